"""
Pytest configuration for odtfill
"""

import pytest
import logging
import sys
import zipfile
from pathlib import Path

from PIL import Image as PILImage

from odtfill.config import FillOptions
from odtfill.context import RunContext


ODT_MIMETYPE = "application/vnd.oasis.opendocument.text"

NAMESPACES = (
    'xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0" '
    'xmlns:style="urn:oasis:names:tc:opendocument:xmlns:style:1.0" '
    'xmlns:text="urn:oasis:names:tc:opendocument:xmlns:text:1.0" '
    'xmlns:table="urn:oasis:names:tc:opendocument:xmlns:table:1.0" '
    'xmlns:draw="urn:oasis:names:tc:opendocument:xmlns:drawing:1.0" '
    'xmlns:fo="urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:svg="urn:oasis:names:tc:opendocument:xmlns:svg-compatible:1.0"'
)

MANIFEST_XML = '''<?xml version="1.0" encoding="UTF-8"?>
<manifest:manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0" manifest:version="1.3">
 <manifest:file-entry manifest:full-path="/" manifest:version="1.3" manifest:media-type="application/vnd.oasis.opendocument.text"/>
 <manifest:file-entry manifest:full-path="content.xml" manifest:media-type="text/xml"/>
 <manifest:file-entry manifest:full-path="styles.xml" manifest:media-type="text/xml"/>
</manifest:manifest>'''


def content_xml(body: str, automatic_styles: str = "") -> str:
    """content.xml document wrapping ``body`` in office:text."""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<office:document-content {NAMESPACES} office:version="1.3">'
        f'<office:automatic-styles>{automatic_styles}</office:automatic-styles>'
        f'<office:body><office:text>{body}</office:text></office:body>'
        f'</office:document-content>'
    )


def styles_xml(header: str = "") -> str:
    """styles.xml document with ``header`` as the default page header."""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<office:document-styles {NAMESPACES} office:version="1.3">'
        f'<office:master-styles><style:master-page style:name="Standard">'
        f'<style:header>{header}</style:header>'
        f'</style:master-page></office:master-styles>'
        f'</office:document-styles>'
    )


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid handler leaks between tests."""
    # Clear all existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Set up console-only logging for tests
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)  # Only show warnings and errors during tests

    formatter = logging.Formatter(
        '%(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    # Cleanup after test
    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    import tempfile
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_odt_content():
    """Entries of a minimal ODT package (mimetype excluded)."""
    return {
        'content.xml': content_xml('<text:p>Hello @@name</text:p>'),
        'styles.xml': styles_xml('<text:p>@@company</text:p>'),
        'META-INF/manifest.xml': MANIFEST_XML,
    }


@pytest.fixture
def make_odt(temp_dir):
    """
    Factory writing an ODT template.

    ``body`` goes into content.xml; pass ``content=None`` to omit the part and
    ``mimetype=False`` to omit the mimetype entry.
    """
    def _make(body="", name="template.odt", header=None, automatic_styles="",
              mimetype=True, content=True, extra=None):
        path = temp_dir / name
        with zipfile.ZipFile(path, 'w') as zf:
            if mimetype:
                zf.writestr('mimetype', ODT_MIMETYPE, compress_type=zipfile.ZIP_STORED)
            if content:
                zf.writestr('content.xml', content_xml(body, automatic_styles),
                            compress_type=zipfile.ZIP_DEFLATED)
            if header is not None:
                zf.writestr('styles.xml', styles_xml(header), compress_type=zipfile.ZIP_DEFLATED)
            zf.writestr('META-INF/manifest.xml', MANIFEST_XML, compress_type=zipfile.ZIP_DEFLATED)
            for entry, data in (extra or {}).items():
                zf.writestr(entry, data)
        return path

    return _make


@pytest.fixture
def read_odt_part():
    """Read one entry of a written ODT as text."""
    def _read(path, part="content.xml"):
        with zipfile.ZipFile(path) as zf:
            return zf.read(part).decode("utf-8")

    return _read


@pytest.fixture
def make_png(temp_dir):
    """Factory writing a PNG image of the given pixel size."""
    def _make(name="photo.png", size=(200, 100), color=(200, 30, 30)):
        path = temp_dir / name
        PILImage.new("RGB", size, color).save(path, format="PNG")
        return path

    return _make


@pytest.fixture
def fill_options():
    """Fill options with fixed executables, independent of the environment."""
    return FillOptions(soffice_path="soffice", ghostscript_path="gs")


@pytest.fixture
def run_context(temp_dir, fill_options):
    """Run context working inside the test's temporary directory."""
    context = RunContext(work_dir=temp_dir / "run", options=fill_options)
    context.package_dir.mkdir(parents=True)
    yield context
    context.fetcher.close()


# Configure pytest to ignore logging errors
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    # Ignore logging errors during tests
    logging.raiseExceptions = False
