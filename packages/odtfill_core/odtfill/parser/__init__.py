"""
Parser module for ODT packages.

Extracts template containers and gives access to their markup parts.
"""

from .package_reader import OdtPackage, CONTENT_PART, STYLES_PART, MIMETYPE_ENTRY, MANIFEST_PART

__all__ = [
    "OdtPackage",
    "CONTENT_PART",
    "STYLES_PART",
    "MIMETYPE_ENTRY",
    "MANIFEST_PART",
]
