"""
Media module for embedded images.

This module contains the components responsible for fetching, generating,
normalizing and storing images embedded into filled documents.
"""

from .media_store import MediaStore, media_type_for
from .converters import MediaConverter
from .fetcher import ResourceFetcher, is_remote

__all__ = [
    "MediaStore",
    "media_type_for",
    "MediaConverter",
    "ResourceFetcher",
    "is_remote",
]
