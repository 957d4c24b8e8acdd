"""
Repeating table rows.

Every table row referencing ``@@A.`` for an array placeholder ``A`` is cloned
once per array record, in order. Each clone gets the record's images and
field values, then any ambient single-value placeholders of the row.
"""

import logging
import re
from typing import Dict, Optional

from ..models.values import ArrayOfRecords, FlattenedData, FieldValue
from .image_resolver import ImageResolver
from .inline_markup import render_value
from .placeholder_resolver import TABLE_ROW_PATTERN, replace_tokens

logger = logging.getLogger(__name__)


class RowExpander:
    """Expands array placeholders into table rows."""

    def __init__(self, data: FlattenedData, images: ImageResolver) -> None:
        self.data = data
        self.images = images
        self.row_counter = 0
        self._ambient: Dict[str, str] = {
            key: render_value(value.text) for key, value in data.scalars().items()
        }

    def expand(self, text: str) -> str:
        """
        Expand every array-bound row in ``text``.

        Args:
            text: Markup part

        Returns:
            Markup with one row per array record
        """
        for key, array in self.data.arrays().items():
            marker = f"@@{key}."
            if marker not in text:
                continue

            def expand_match(match: re.Match, key=key, array=array, marker=marker) -> str:
                row = match.group(0)
                if marker not in row:
                    return row
                return self._expand_row(row, key, array)

            text = TABLE_ROW_PATTERN.sub(expand_match, text)

        return text

    def _expand_row(self, row: str, key: str, array: ArrayOfRecords) -> str:
        prefix = f"{key}."
        filled_rows = []

        for record in array:
            self.row_counter += 1
            filled = self.images.resolve_row(row, key, record, self.row_counter)

            def resolve(token: str, record=record) -> Optional[str]:
                if token.startswith(prefix):
                    value: Optional[FieldValue] = record.get(token[len(prefix):])
                    if value is not None:
                        return render_value(value.text)
                return self._ambient.get(token)

            filled_rows.append(replace_tokens(filled, resolve))

        logger.debug(f"Row bound to @@{key} expanded into {len(filled_rows)} rows")
        return "".join(filled_rows)
