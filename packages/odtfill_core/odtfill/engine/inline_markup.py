"""
Inline markup conversion.

Rewrites the small HTML subset accepted in data values (bold, italic,
paragraph, line break, unordered list) into ODF text markup, strips every other
tag, and escapes plain values.
"""

import html as html_entities
import re
from xml.sax.saxutils import escape

HTML_HINT = re.compile(r"<[a-z][\s\S]*>")

_RULES = [
    (re.compile(r"<b>(.*?)</b>", re.IGNORECASE), r'<text:span text:style-name="Bold">\1</text:span>'),
    (re.compile(r"<strong>(.*?)</strong>", re.IGNORECASE), r'<text:span text:style-name="Bold">\1</text:span>'),
    (re.compile(r"<i>(.*?)</i>", re.IGNORECASE), r'<text:span text:style-name="Italic">\1</text:span>'),
    (re.compile(r"<em>(.*?)</em>", re.IGNORECASE), r'<text:span text:style-name="Italic">\1</text:span>'),
    (re.compile(r"<p>(.*?)</p>", re.IGNORECASE), r"<text:p>\1</text:p>"),
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "<text:line-break/>"),
    (re.compile(r"<ul>(.*?)</ul>", re.IGNORECASE | re.DOTALL), r"<text:list>\1</text:list>"),
    (re.compile(r"<li>(.*?)</li>", re.IGNORECASE), r"<text:list-item><text:p>\1</text:p></text:list-item>"),
]

# Any tag outside the text: namespace.
_FOREIGN_TAG = re.compile(r"<(?!/?text:)[^>]+>")
_ODF_TAG = re.compile(r"(</?text:[^>]*>)")

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def looks_like_markup(value: str) -> bool:
    return bool(HTML_HINT.search(value))


def html_to_odt(html: str) -> str:
    """
    Convert the supported HTML subset to ODF text markup.

    Args:
        html: Value containing inline HTML

    Returns:
        ODF text markup with unsupported tags removed
    """
    for pattern, replacement in _RULES:
        html = pattern.sub(replacement, html)
    html = _FOREIGN_TAG.sub("", html)
    # Text between the ODF tags may carry HTML entities or bare "&" and "<".
    return "".join(
        piece if _ODF_TAG.fullmatch(piece) else escape_xml(html_entities.unescape(piece))
        for piece in _ODF_TAG.split(html)
    )


def escape_xml(value: str) -> str:
    return escape(value, _XML_ENTITIES)


def render_value(value: str) -> str:
    """Markup-safe rendering of a data value: converted when it carries HTML, escaped otherwise."""
    if not value:
        return value
    if looks_like_markup(value):
        return html_to_odt(value)
    return escape_xml(value)
