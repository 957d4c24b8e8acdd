"""
Template sanitizer.

Word processors split typed text into spans bound to automatic text styles
that change nothing visible. Such spans can cut a ``@@key`` token in pieces,
so the sanitizer unwraps every span whose style sets none of font weight,
font size or color.
"""

import logging
import re
from typing import List, Tuple

from ..parser.package_reader import OdtPackage

logger = logging.getLogger(__name__)

TEXT_STYLE_PATTERN = re.compile(
    r'<style:style style:name="(?P<name>[\w.-]*?)" style:family="text">(?P<body>.*?)</style:style>',
    re.DOTALL,
)
EMPTY_PROPERTIES_PATTERN = re.compile(r"<style:text-properties\s*/>")
MEANINGFUL_PROPERTY_PATTERN = re.compile(r":(?:font-weight|font-size|color)=")


class Sanitizer:
    """Removes spans bound to text styles without visible effect."""

    def __init__(self):
        self.removed_spans = 0

    def useless_styles(self, text: str) -> List[str]:
        """Names of text styles whose properties are empty or change nothing visible."""
        names = []
        for match in TEXT_STYLE_PATTERN.finditer(text):
            body = match.group("body")
            if EMPTY_PROPERTIES_PATTERN.search(body) or not MEANINGFUL_PROPERTY_PATTERN.search(body):
                names.append(match.group("name"))
        return names

    def sanitize_part(self, text: str) -> Tuple[str, int]:
        """
        Unwrap spans bound to useless text styles of ``text``.

        Returns:
            (sanitized text, number of unwrapped spans)
        """
        names = self.useless_styles(text)
        if not names:
            return text, 0

        alternatives = "|".join(re.escape(name) for name in names)
        span_pattern = re.compile(
            rf'<text:span text:style-name="(?:{alternatives})">'
            r"((?:(?!<text:span[\s>]).)*?)</text:span>",
            re.DOTALL,
        )
        text, count = span_pattern.subn(r"\1", text)
        self.removed_spans += count
        return text, count

    def sanitize_package(self, package: OdtPackage) -> int:
        """
        Sanitize ``styles.xml`` and ``content.xml`` of an extracted package.

        Returns:
            Number of unwrapped spans
        """
        total = 0
        for part_name in reversed(package.markup_parts()):
            text, count = self.sanitize_part(package.read_part(part_name))
            if count:
                package.write_part(part_name, text)
            logger.debug(f"{part_name}: {count} spans unwrapped")
            total += count
        return total
