"""
odtfill - ODT template filling.

Fills OpenDocument Text templates with JSON or XML data and writes a new
document.

Features:
- ``@@dotted.key`` placeholders with inline HTML (b, i, p, br, ul/li)
- Repeating table rows from arrays (``@@items.label``)
- Conditional regions bound to comments carrying ``@@flag``
- Images from files, ``https://`` URLs and ``qrcode://`` payloads
  (``[@@logo 4cm *]``), sized from their aspect ratio
- Template sanitizing, PDF conversion and printing (LibreOffice, Ghostscript)

Quick Start:
    from odtfill import fill_template

    fill_template("invoice.odt", "invoice_filled.odt", data={"name": "Acme"})
"""

from .version import __version__, __version_info__

from .utils.exceptions import (
    OdtFillError,
    DataFormatError,
    StructuralError,
    ResourceResolutionError,
    PackagingError,
    ConversionError,
)
from .config import FillOptions
from .context import RunContext
from .models.values import FlattenedData, flatten
from .engine.placeholder_engine import PlaceholderEngine, PlaceholderInfo
from .api import (
    FillResult,
    Template,
    fill_template,
    sanitize_template,
    extract_placeholders,
)

__all__ = [
    # Version
    "__version__",
    "__version_info__",

    # High-level API
    "Template",
    "FillResult",
    "fill_template",
    "sanitize_template",
    "extract_placeholders",

    # Engine
    "FillOptions",
    "RunContext",
    "FlattenedData",
    "flatten",
    "PlaceholderEngine",
    "PlaceholderInfo",

    # Exceptions
    "OdtFillError",
    "DataFormatError",
    "StructuralError",
    "ResourceResolutionError",
    "PackagingError",
    "ConversionError",
]
