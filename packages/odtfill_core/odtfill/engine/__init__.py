"""
Fill engine for ODT markup parts.

Each pass tokenizes a part once and rebuilds it with the resolved values:
regions, images, repeating rows, single values and leftovers.
"""

from .placeholder_engine import PlaceholderEngine, PlaceholderInfo
from .placeholder_resolver import PlaceholderResolver, scan_images, scan_tokens
from .region_resolver import RegionResolver
from .image_resolver import ImageResolver
from .row_expander import RowExpander
from .scalar_substituter import LeftoverResolver, ScalarSubstituter
from .sanitizer import Sanitizer

__all__ = [
    "PlaceholderEngine",
    "PlaceholderInfo",
    "PlaceholderResolver",
    "scan_images",
    "scan_tokens",
    "RegionResolver",
    "ImageResolver",
    "RowExpander",
    "ScalarSubstituter",
    "LeftoverResolver",
    "Sanitizer",
]
