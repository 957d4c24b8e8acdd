"""
Tests for ImageResolver.

Tests image acquisition from files, URLs and QR payloads, sizing and frame
markup.
"""

import pytest
import requests
import struct
import zlib
from unittest.mock import Mock

from PIL import Image as PILImage

from odtfill.config import FillOptions
from odtfill.context import RunContext
from odtfill.engine.image_resolver import ImageResolver
from odtfill.models.values import Scalar, flatten
from odtfill.utils.exceptions import ResourceResolutionError


def resolver_for(data, context):
    return ImageResolver(flatten(data), context)


def png_chunk(kind, payload):
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


@pytest.fixture
def huge_png(temp_dir):
    """PNG whose header declares 20000x20000 pixels, beyond the Pillow limit."""
    path = temp_dir / "huge.png"
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + png_chunk(b"IHDR", struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0))
        + png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + png_chunk(b"IEND", b"")
    )
    return path


class TestComputeSize:
    """Test width/height derivation."""

    def test_width_derives_height(self, run_context, make_png):
        """Test that a 200x100 image with width 4cm gets height 2cm."""
        resolver = resolver_for({}, run_context)

        assert resolver.compute_size("4cm", None, make_png()) == ("4cm", "2cm")

    def test_height_derives_width(self, run_context, make_png):
        """Test that height alone derives width."""
        resolver = resolver_for({}, run_context)

        assert resolver.compute_size(None, "1cm", make_png()) == ("2cm", "1cm")

    def test_both_given(self, run_context, make_png):
        """Test that explicit sizes are used as given, pixels converted."""
        resolver = resolver_for({}, run_context)

        assert resolver.compute_size("3cm", "300px", make_png()) == ("3cm", "10.583cm")

    def test_document_default_height(self, run_context, make_png):
        """Test that a document-level image without size is one inch high."""
        resolver = resolver_for({}, run_context)

        assert resolver.compute_size(None, None, make_png()) == ("5.08cm", "1in")

    def test_row_intrinsic_size(self, run_context, make_png):
        """Test that a row image without size uses its pixel size."""
        resolver = resolver_for({}, run_context)

        assert resolver.compute_size(None, None, make_png(), row_level=True) == ("7.056cm", "3.528cm")

    def test_vector_image_keeps_requested_size(self, run_context, temp_dir):
        """Test that vector images get no derived dimension."""
        svg = temp_dir / "logo.svg"
        svg.write_text('<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"/>')
        resolver = resolver_for({}, run_context)

        assert resolver.compute_size("4cm", None, svg) == ("4cm", None)


class TestDocumentImages:
    """Test document-level image tokens."""

    def test_local_file(self, run_context, make_png):
        """Test embedding a local file."""
        png = make_png("photo.png")
        resolver = resolver_for({"logo": str(png)}, run_context)

        result = resolver.resolve("<text:p>[@@logo 4cm *]</text:p>")

        assert result.startswith('<text:p><draw:frame draw:name="logo"')
        assert 'svg:width="4cm"' in result
        assert 'svg:height="2cm"' in result
        assert 'xlink:href="Pictures/logo_photo.png"' in result
        assert (run_context.media.directory / "logo_photo.png").is_file()
        assert resolver.resolved == 1

    def test_missing_file_is_empty(self, run_context, temp_dir):
        """Test that a missing file degrades to empty output."""
        resolver = resolver_for({"logo": str(temp_dir / "nope.png")}, run_context)

        assert resolver.resolve("<text:p>[@@logo]</text:p>") == "<text:p></text:p>"
        assert resolver.failed == 1

    def test_qr_code(self, run_context):
        """Test generating a QR code image."""
        resolver = resolver_for({"code": "qrcode://INV-42"}, run_context)

        result = resolver.resolve("[@@code 3cm 3cm]")

        stored = run_context.media.directory / "code_qrcode.png"
        assert 'xlink:href="Pictures/code_qrcode.png"' in result
        assert 'svg:width="3cm" svg:height="3cm"' in result
        with PILImage.open(stored) as img:
            assert img.format == "PNG"
            assert img.width == img.height

    def test_remote_image(self, run_context, make_png):
        """Test downloading a remote image."""
        png_bytes = make_png().read_bytes()
        session = Mock()
        session.get.return_value.content = png_bytes
        run_context.fetcher.session = session
        url = "https://example.com/img/pic.png"

        result = resolver_for({"logo": url}, run_context).resolve("[@@logo 4cm]")

        session.get.assert_called_once_with(url, timeout=30.0)
        assert 'xlink:href="Pictures/logo_pic.png"' in result
        assert 'svg:height="2cm"' in result

    def test_remote_failure_is_empty(self, run_context):
        """Test that a failed download degrades to empty output."""
        session = Mock()
        session.get.side_effect = requests.ConnectionError("unreachable")
        run_context.fetcher.session = session

        resolver = resolver_for({"logo": "https://example.com/x.png"}, run_context)

        assert resolver.resolve("a[@@logo]b") == "ab"
        assert resolver.failed == 1

    def test_oversized_image_is_skipped(self, run_context, huge_png):
        """Test that an image beyond the pixel limit degrades to empty output."""
        resolver = resolver_for({"img": str(huge_png)}, run_context)

        assert resolver.resolve("<text:p>[@@img]</text:p>") == "<text:p></text:p>"
        assert resolver.failed == 1
        assert not (run_context.media.directory / "img_huge.png").exists()

    def test_oversized_intrinsic_size(self, run_context, huge_png):
        """Test that size queries on an oversized image raise a resolution error."""
        with pytest.raises(ResourceResolutionError) as exc_info:
            run_context.converter.intrinsic_size(huge_png)
        assert exc_info.value.error_code == "IMAGE_TOO_LARGE"

    def test_legacy_form(self, run_context, make_png):
        """Test the per-field path/width form."""
        png = make_png()
        resolver = resolver_for({"sig": {"path": str(png), "width": "3cm"}}, run_context)

        result = resolver.resolve("[@@sig]")

        assert 'svg:width="3cm"' in result
        assert 'svg:height="1.5cm"' in result

    def test_legacy_form_not_found_marker(self, run_context, temp_dir):
        """Test that a missing legacy image emits the not-found marker."""
        resolver = resolver_for({"sig": {"path": str(temp_dir / "missing.png")}}, run_context)

        assert resolver.resolve("[@@sig]") == "[image not found: sig]"

    def test_unknown_and_array_keys_are_left(self, run_context):
        """Test that tokens without a usable source are left for later passes."""
        resolver = resolver_for({"items": [{"img": "x.png"}]}, run_context)
        text = "[@@items.img] [@@items] [@@unknown]"

        assert resolver.resolve(text) == text

    def test_parallel_acquisition_keeps_order(self, temp_dir, make_png):
        """Test that concurrent fetching still renders in token order."""
        context = RunContext(work_dir=temp_dir / "run", options=FillOptions(image_workers=4))
        data = {"a": str(make_png("a.png")), "b": str(make_png("b.png", size=(100, 100)))}

        result = resolver_for(data, context).resolve("[@@a 4cm][@@b 4cm][@@a 2cm]")

        frames = result.split("</draw:frame>")[:-1]
        assert 'draw:name="a"' in frames[0] and 'svg:height="2cm"' in frames[0]
        assert 'draw:name="b"' in frames[1] and 'svg:height="4cm"' in frames[1]
        assert 'draw:name="a"' in frames[2] and 'svg:height="1cm"' in frames[2]
        context.cleanup()


class TestRowImages:
    """Test row-scoped resolution."""

    def test_row_ordinal_in_names(self, run_context, make_png):
        """Test that row images carry the row ordinal."""
        png = make_png()
        resolver = resolver_for({}, run_context)
        record = {"img": Scalar(str(png))}

        result = resolver.resolve_row("[@@items.img 2cm *]", "items", record, 3)

        assert 'draw:name="items.img3"' in result
        assert 'xlink:href="Pictures/items.img3_photo.png"' in result
        assert 'svg:height="1cm"' in result

    def test_other_arrays_untouched(self, run_context):
        """Test that tokens of other keys are kept."""
        resolver = resolver_for({}, run_context)

        assert resolver.resolve_row("[@@logo]", "items", {}, 1) == "[@@logo]"
