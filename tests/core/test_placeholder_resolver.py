"""
Tests for placeholder tokenizing and rewriting.
"""

from odtfill.engine.placeholder_resolver import (
    PlaceholderResolver,
    TABLE_ROW_PATTERN,
    replace_tokens,
    rewrite,
    scan_images,
    scan_tokens,
)


class TestScanTokens:
    """Test @@key scanning."""

    def test_keys_in_order(self):
        """Test that tokens are returned in document order."""
        tokens = scan_tokens("<text:p>@@name and @@customer.address.city</text:p>")

        assert [t.key for t in tokens] == ["name", "customer.address.city"]

    def test_trailing_dot_is_not_part_of_key(self):
        """Test that a sentence-ending dot stays outside the key."""
        text = "Sent to @@name."
        tokens = scan_tokens(text)

        assert [t.key for t in tokens] == ["name"]
        assert text[tokens[0].end:] == "."

    def test_positions(self):
        """Test token spans."""
        token = scan_tokens("ab@@x_1cd")[0]

        assert (token.key, token.start, token.end) == ("x_1cd", 2, 9)

    def test_hyphen_and_unicode_keys(self):
        """Test that keys may hold hyphens and non-ASCII letters."""
        tokens = scan_tokens("@@first-name, @@città.nome e @@perché")

        assert [t.key for t in tokens] == ["first-name", "città.nome", "perché"]


class TestScanImages:
    """Test [@@key width height] scanning."""

    def test_width_and_wildcard(self):
        """Test explicit width with wildcard height."""
        directive = scan_images("<text:p>[@@logo 4cm *]</text:p>")[0]

        assert directive.key == "logo"
        assert directive.width == "4cm"
        assert directive.height == "*"
        assert directive.explicit_width == "4cm"
        assert directive.explicit_height is None

    def test_bare_token(self):
        """Test an image token without sizes."""
        directive = scan_images("[@@logo]")[0]

        assert directive.width is None
        assert directive.height is None
        assert directive.text == "[@@logo]"

    def test_both_sizes(self):
        """Test explicit width and height."""
        directive = scan_images("[@@items.photo 2.5cm 30mm]")[0]

        assert directive.key == "items.photo"
        assert directive.leaf == "photo"
        assert (directive.explicit_width, directive.explicit_height) == ("2.5cm", "30mm")

    def test_invalid_size_is_not_an_image(self):
        """Test that an unparseable size does not form an image token."""
        assert scan_images("[@@logo big]") == []


class TestRewrite:
    """Test single-pass rewriting."""

    def test_none_keeps_original(self):
        """Test that None replacements keep the matched text."""
        text = "@@a @@b @@c"
        tokens = scan_tokens(text)

        assert rewrite(text, tokens, ["1", None, "3"]) == "1 @@b 3"

    def test_replacement_is_not_rescanned(self):
        """Test that substituted text containing tokens is not substituted again."""
        values = {"a": "@@b", "b": "x"}

        assert replace_tokens("@@a @@b", values.get) == "@@b x"

    def test_resolver(self):
        """Test PlaceholderResolver over a mapping."""
        resolver = PlaceholderResolver({"name": "Acme"})

        assert resolver.resolve_text("Hi @@name, @@other") == "Hi Acme, @@other"
        assert resolver.resolve_text("") == ""


class TestTableRowPattern:
    """Test table row matching."""

    def test_innermost_row(self):
        """Test that nested tables match their own rows."""
        inner = "<table:table-row><table:table-cell>@@x</table:table-cell></table:table-row>"
        text = (
            "<table:table-row><table:table-cell><table:table>"
            f"{inner}"
            "</table:table></table:table-cell></table:table-row>"
        )

        assert TABLE_ROW_PATTERN.search(text).group(0) == inner

    def test_row_with_attributes(self):
        """Test rows with attributes and no confusion with table-rows."""
        text = '<table:table-rows><table:table-row table:style-name="R1"><table:table-cell/></table:table-row></table:table-rows>'

        assert TABLE_ROW_PATTERN.search(text).group(0).startswith('<table:table-row table:style-name="R1">')
