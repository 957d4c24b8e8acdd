"""

Simple high-level API for odtfill.

Main entry point for users - fill, inspect and sanitize ODT templates.

Usage example:
>>> from odtfill import Template, fill_template
>>>
>>> # One call
>>> result = fill_template('invoice.odt', 'invoice_filled.odt', data={'name': 'Acme'})
>>>
>>> # Step by step
>>> with Template('invoice.odt') as template:
...     stats = template.fill({'name': 'Acme', 'items': [{'label': 'A'}]})
...     template.save('invoice_filled.odt')

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import FillOptions
from .context import RunContext
from .engine.placeholder_engine import PlaceholderEngine, PlaceholderInfo
from .engine.sanitizer import Sanitizer
from .export.odt_exporter import OdtExporter
from .importers.data_importer import load_data
from .media.fetcher import is_remote
from .models.values import FlattenedData, flatten
from .parser.package_reader import OdtPackage
from .utils.exceptions import OdtFillError, PackagingError

logger = logging.getLogger(__name__)

INCOMPLETE_KEY = "incomplete"
INCOMPLETE_SUFFIX = "__"


def output_path_for(destination: Union[str, Path], incomplete: bool = False) -> Path:
    """Final output path: ``.odt`` extension forced, ``__`` suffix for incomplete data."""
    destination = str(destination)
    if not destination.lower().endswith(".odt"):
        destination += ".odt"
    if incomplete:
        destination = destination[:-4] + INCOMPLETE_SUFFIX + destination[-4:]
    return Path(destination)


@dataclass
class FillResult:
    """Outcome of a fill run."""
    output_path: Path
    stats: Dict[str, int] = field(default_factory=dict)
    incomplete: bool = False


class Template:
    """
    ODT template opened for one fill run.

    Extracts the template into a run-scoped working directory which is
    removed by ``close``.
    """

    def __init__(self, template: Union[str, Path], options: Optional[FillOptions] = None,
                 context: Optional[RunContext] = None):
        """
        Open a template.

        Args:
            template: Local ``.odt`` path or ``https://`` URL
            options: Fill options (ignored when ``context`` is given)
            context: Run context to use instead of a fresh one
        """
        self.source = str(template)
        self.context = context or RunContext.create(options)
        self.options = self.context.options
        self.data: Optional[FlattenedData] = None

        try:
            local_path = self.context.fetcher.materialize(
                self.source, self.context.downloads_dir, "template.odt"
            )
            self.package = OdtPackage(local_path, self.context.package_dir)
        except OdtFillError:
            self.context.cleanup()
            raise

    def __enter__(self) -> "Template":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def incomplete(self) -> bool:
        return self.data is not None and self.data.is_truthy(INCOMPLETE_KEY)

    def fill(self, data: Union[Mapping[str, Any], FlattenedData]) -> Dict[str, int]:
        """
        Fill every markup part with ``data``.

        Args:
            data: Nested data (object root) or already flattened data

        Returns:
            Fill statistics
        """
        self.data = data if isinstance(data, FlattenedData) else flatten(data)
        engine = PlaceholderEngine(self.data, self.context)
        return engine.fill_package(self.package)

    def extract_placeholders(self) -> List[PlaceholderInfo]:
        """List the placeholders of the template, classified against the loaded data."""
        engine = PlaceholderEngine(self.data or FlattenedData(), self.context)
        return engine.extract_placeholders(self.package)

    def sanitize(self) -> int:
        """Unwrap spans bound to useless text styles. Returns the number of spans removed."""
        return Sanitizer().sanitize_package(self.package)

    def save(self, output_path: Union[str, Path], overwrite: bool = True) -> Path:
        """
        Package the working directory into ``output_path``.

        Args:
            output_path: Destination; ``.odt`` is forced and the incomplete suffix applied
            overwrite: Replace an existing destination

        Returns:
            Path actually written

        Raises:
            PackagingError: If the destination exists and ``overwrite`` is False
        """
        output_path = output_path_for(output_path, self.incomplete)
        if output_path.exists() and not overwrite:
            raise PackagingError(
                f"Destination file '{output_path}' already exists",
                output_path=str(output_path), error_code="DESTINATION_EXISTS"
            )

        exporter = OdtExporter(self.context.package_dir, self.context.media)
        exporter.update_manifest()
        return exporter.export(output_path)

    def close(self) -> None:
        self.context.fetcher.close()
        self.context.cleanup()


def fill_template(
    template: Union[str, Path],
    output_path: Union[str, Path],
    data: Optional[Mapping[str, Any]] = None,
    data_path: Optional[Union[str, Path]] = None,
    data_format: Optional[str] = None,
    options: Optional[FillOptions] = None,
    overwrite: bool = False,
) -> FillResult:
    """
    Fill a template and write the result (convenience function).

    Args:
        template: Template path or URL
        output_path: Destination ODT path
        data: Nested data; used when ``data_path`` is not given
        data_path: JSON or XML data path or URL
        data_format: ``"json"`` or ``"xml"`` for ``data_path``
        options: Fill options
        overwrite: Replace an existing destination

    Returns:
        FillResult
    """
    if data is None and data_path is None:
        raise ValueError("Either data or data_path is required")

    context = RunContext.create(options)
    try:
        if data_path is not None:
            data = load_data(data_path, data_format, context.fetcher)
        flattened = flatten(data)

        incomplete = flattened.is_truthy(INCOMPLETE_KEY)
        destination = output_path_for(output_path, incomplete)
        if destination.exists() and not overwrite:
            raise PackagingError(
                f"Destination file '{destination}' already exists",
                output_path=str(destination), error_code="DESTINATION_EXISTS"
            )
    except Exception:
        context.cleanup()
        raise

    with Template(template, context=context) as doc:
        stats = doc.fill(flattened)
        written = doc.save(output_path, overwrite=True)

    return FillResult(output_path=written, stats=stats, incomplete=incomplete)


def sanitize_template(template: Union[str, Path], output_path: Optional[Union[str, Path]] = None,
                      options: Optional[FillOptions] = None) -> int:
    """
    Sanitize a template, in place unless ``output_path`` is given.

    Returns:
        Number of unwrapped spans
    """
    if output_path is None and is_remote(str(template)):
        raise OdtFillError("A remote template needs an output path to be sanitized")

    with Template(template, options) as doc:
        removed = doc.sanitize()
        doc.save(output_path or template, overwrite=True)
    logger.info(f"Sanitized {template}: {removed} spans removed")
    return removed


def extract_placeholders(template: Union[str, Path], data: Optional[Mapping[str, Any]] = None,
                         options: Optional[FillOptions] = None) -> List[PlaceholderInfo]:
    """List the placeholders of a template (convenience function)."""
    with Template(template, options) as doc:
        if data is not None:
            doc.data = flatten(data)
        return doc.extract_placeholders()
