"""Tokenizing and rewriting ``@@`` placeholders within markup text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

KEY = r"[\w-]+(?:\.[\w-]+)*"
LENGTH = r"(?:\d+(?:\.\d+)?|\.\d+)(?:cm|mm|in|pt|px)?"
WILDCARD = "*"

# Innermost <table:table-row> element, so nested tables resolve to their own rows.
TABLE_ROW_PATTERN = re.compile(
    r"<table:table-row(?=[\s>])[^>]*>"
    r"(?:(?!<table:table-row[\s>])[\s\S])*?"
    r"</table:table-row>",
    re.IGNORECASE,
)

TAG_PATTERN = re.compile(r"<[^>]*>")

TOKEN_PATTERN = re.compile(rf"@@(?P<key>{KEY})")

IMAGE_PATTERN = re.compile(
    rf"\[\s*@@(?P<key>{KEY})"
    rf"(?:\s+(?P<width>{LENGTH}|\*))?"
    rf"(?:\s+(?P<height>{LENGTH}|\*))?"
    r"\s*\]",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class PlaceholderToken:
    """One ``@@key`` occurrence."""

    key: str
    start: int
    end: int


@dataclass(frozen=True)
class ImageDirective:
    """
    One ``[@@key width height]`` occurrence.

    ``width``/``height`` hold the literal length, ``"*"`` for "derive from
    aspect ratio", or None when absent.
    """

    key: str
    width: Optional[str]
    height: Optional[str]
    start: int
    end: int
    text: str

    @property
    def explicit_width(self) -> Optional[str]:
        return None if self.width in (None, WILDCARD) else self.width

    @property
    def explicit_height(self) -> Optional[str]:
        return None if self.height in (None, WILDCARD) else self.height

    @property
    def leaf(self) -> str:
        return self.key.rsplit(".", 1)[-1]


Match = Union[PlaceholderToken, ImageDirective]


def scan_tokens(text: str) -> List[PlaceholderToken]:
    """Every ``@@key`` token, in document order."""
    return [
        PlaceholderToken(m.group("key"), m.start(), m.end())
        for m in TOKEN_PATTERN.finditer(text)
    ]


def scan_images(text: str) -> List[ImageDirective]:
    """Every image token, in document order."""
    return [
        ImageDirective(
            key=m.group("key"),
            width=m.group("width"),
            height=m.group("height"),
            start=m.start(),
            end=m.end(),
            text=m.group(0),
        )
        for m in IMAGE_PATTERN.finditer(text)
    ]


def rewrite(text: str, matches: Sequence[Match], replacements: Sequence[Optional[str]]) -> str:
    """
    Rebuild ``text`` with each match replaced, in one pass.

    Args:
        text: Source text the matches were scanned from
        matches: Non-overlapping matches in document order
        replacements: One entry per match; None keeps the original text

    Returns:
        Rewritten text
    """
    pieces: List[str] = []
    cursor = 0
    for match, replacement in zip(matches, replacements):
        if replacement is None:
            continue
        pieces.append(text[cursor:match.start])
        pieces.append(replacement)
        cursor = match.end
    pieces.append(text[cursor:])
    return "".join(pieces)


def replace_tokens(text: str, resolve: Callable[[str], Optional[str]]) -> str:
    """Replace every ``@@key`` token for which ``resolve`` returns text."""
    if "@@" not in text:
        return text
    tokens = scan_tokens(text)
    return rewrite(text, tokens, [resolve(token.key) for token in tokens])


class PlaceholderResolver:
    """Resolve ``@@key`` tokens within text against a key -> text mapping."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(values or {})

    def set_values(self, values: Mapping[str, str]) -> None:
        self.values = dict(values)

    def resolve_text(self, text: str) -> str:
        if not text or "@@" not in text:
            return text
        return replace_tokens(text, self.values.get)
