"""
Conditional region resolution.

A region is guarded by a comment (``office:annotation``) whose text carries a
``@@key`` condition, and ends at the matching ``office:annotation-end``. The
region survives when the key resolves to true; otherwise it is removed, along
with any table row left without text.
"""

import logging
import re

from ..models.values import FlattenedData
from .placeholder_resolver import KEY, TABLE_ROW_PATTERN, TAG_PATTERN

logger = logging.getLogger(__name__)

ANNOTATION_PATTERN = re.compile(
    r"(?P<annotation><office:annotation(?=[\s>])[^>]*>"
    r"(?:(?!</office:annotation>)[\s\S])*?"
    rf"@@(?P<key>{KEY})"
    r"[\s\S]*?</office:annotation>)"
    r"(?P<region>[\s\S]*?)"
    r"(?P<end><office:annotation-end\b[^>]*>)",
    re.IGNORECASE,
)

REMOVAL_MARKER = "<!--odtfill:remove-region-->"


class RegionResolver:
    """Keeps or drops annotated regions based on boolean placeholders."""

    def __init__(self, data: FlattenedData) -> None:
        self.data = data
        self.kept = 0
        self.removed = 0

    def resolve(self, text: str) -> str:
        """
        Resolve every guarded region in ``text``.

        Args:
            text: Markup part

        Returns:
            Markup with false regions removed
        """
        text = ANNOTATION_PATTERN.sub(self._resolve_region, text)
        if REMOVAL_MARKER not in text:
            return text

        text = TABLE_ROW_PATTERN.sub(self._drop_empty_row, text)
        logger.debug(f"Regions kept={self.kept} removed={self.removed}")
        return text.replace(REMOVAL_MARKER, "")

    def _resolve_region(self, match: re.Match) -> str:
        key = match.group("key")
        if self.data.is_truthy(key):
            self.kept += 1
            return match.group(0)

        self.removed += 1
        logger.debug(f"Region guarded by @@{key} removed")
        return REMOVAL_MARKER

    @staticmethod
    def _drop_empty_row(match: re.Match) -> str:
        row = match.group(0)
        if REMOVAL_MARKER not in row:
            return row

        remaining = TAG_PATTERN.sub("", row.replace(REMOVAL_MARKER, ""))
        if remaining.strip():
            return row
        return ""
