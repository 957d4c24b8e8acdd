"""
Models module for odtfill.

Contains the placeholder value model and the flattened data mapping shared by
every fill pass.
"""

from .values import (
    Scalar,
    Nil,
    NIL,
    ArrayOfRecords,
    PlaceholderValue,
    FlattenedData,
    flatten,
    is_truthy,
    scalar_text,
)

__all__ = [
    "Scalar",
    "Nil",
    "NIL",
    "ArrayOfRecords",
    "PlaceholderValue",
    "FlattenedData",
    "flatten",
    "is_truthy",
    "scalar_text",
]
