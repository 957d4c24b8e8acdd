"""
Single-value and leftover placeholder passes.

The scalar pass replaces every ``@@key`` naming a single value; the leftover
pass then deletes unresolved image tokens and, when a fallback is configured,
replaces every remaining ``@@key`` with it.
"""

import logging
from typing import Dict, Optional

from ..models.values import FlattenedData
from .inline_markup import escape_xml, render_value
from .placeholder_resolver import IMAGE_PATTERN, TOKEN_PATTERN, replace_tokens

logger = logging.getLogger(__name__)


class ScalarSubstituter:
    """Replaces single-value placeholders with escaped or converted text."""

    def __init__(self, data: FlattenedData) -> None:
        self.rendered: Dict[str, str] = {
            key: render_value(value.text) for key, value in data.scalars().items()
        }
        self.replaced = 0

    def substitute(self, text: str) -> str:
        def resolve(key: str) -> Optional[str]:
            value = self.rendered.get(key)
            if value is not None:
                self.replaced += 1
            return value

        text = replace_tokens(text, resolve)
        logger.debug(f"Scalar placeholders replaced: {self.replaced}")
        return text


class LeftoverResolver:
    """Clears whatever placeholder syntax the earlier passes left behind."""

    def __init__(self, fallback: Optional[str] = None) -> None:
        self.fallback = fallback

    def resolve(self, text: str) -> str:
        """
        Remove leftover image tokens and apply the fallback to leftover placeholders.

        Without a fallback, unresolved ``@@key`` tokens stay visible in the output.
        """
        text, images = IMAGE_PATTERN.subn("", text)
        if images:
            logger.debug(f"Removed {images} unresolved image tokens")

        if not self.fallback:
            leftovers = len(TOKEN_PATTERN.findall(text))
            if leftovers:
                logger.info(f"{leftovers} placeholders left unresolved")
            return text

        fallback = escape_xml(self.fallback)
        text, count = TOKEN_PATTERN.subn(lambda _m: fallback, text)
        if count:
            logger.debug(f"Replaced {count} unresolved placeholders with {fallback!r}")
        return text
