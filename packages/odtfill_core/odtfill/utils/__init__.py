"""
Utils module for odtfill.

This module contains unit conversion, logging setup and the exception
hierarchy shared by every component.
"""

from .units import UnitsConverter, format_decimal, PX_TO_CM
from .rich_logger import RichLogger, get_rich_logger, setup_logging
from .exceptions import (
    OdtFillError,
    DataFormatError,
    StructuralError,
    ResourceResolutionError,
    PackagingError,
    ConversionError,
    handle_exception,
)

__all__ = [
    "UnitsConverter",
    "format_decimal",
    "PX_TO_CM",
    "RichLogger",
    "get_rich_logger",
    "setup_logging",
    "OdtFillError",
    "DataFormatError",
    "StructuralError",
    "ResourceResolutionError",
    "PackagingError",
    "ConversionError",
    "handle_exception",
]
