"""
Export module for filled documents.

Reassembles ODT containers from extracted working directories.
"""

from .odt_exporter import OdtExporter

__all__ = [
    "OdtExporter",
]
