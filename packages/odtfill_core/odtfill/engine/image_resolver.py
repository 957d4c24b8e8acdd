"""
Image placeholder resolution.

Turns ``[@@name width height]`` tokens into embedded ``draw:frame`` markup.

Supports:
- Remote images (``https://``), generated QR codes (``qrcode://payload``) and
  local files
- The legacy per-field form (``name.path`` / ``name.width`` / ``name.height``)
- Width/height derivation from the image aspect ratio
- Row-scoped resolution against one array record (used by the row expander)

A failing image never aborts the fill: the occurrence degrades to empty output
(or the not-found marker for the legacy form).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..context import RunContext
from ..media.fetcher import is_remote, remote_file_name
from ..models.values import ArrayOfRecords, FieldValue, FlattenedData
from ..utils.exceptions import ResourceResolutionError
from .inline_markup import escape_xml
from .placeholder_resolver import ImageDirective, rewrite, scan_images

logger = logging.getLogger(__name__)

QR_PREFIX = "qrcode://"


@dataclass(frozen=True)
class ImageSource:
    """Where the bytes of one image token come from."""

    name: str
    locator: str
    width: Optional[str] = None
    height: Optional[str] = None
    legacy: bool = False

    @property
    def cache_key(self) -> Tuple[str, str]:
        return self.name, self.locator


class ImageResolver:
    """

    Resolves image tokens of one markup part.

    Document-level tokens are resolved by ``resolve``; tokens naming an array
    field are left for the row expander, which calls ``resolve_row`` once per
    record.

    """

    def __init__(self, data: FlattenedData, context: RunContext) -> None:
        """

        Initializes image resolver.

        Args:
        data: Flattened placeholder data
        context: Run context (media store, fetcher, converter, options)

        """
        self.data = data
        self.context = context
        self.options = context.options
        self.units = context.units
        self.resolved = 0
        self.failed = 0

    # Document level
    def resolve(self, text: str) -> str:
        """

        Replaces every document-level image token in ``text``.

        Args:
        text: Markup part

        Returns:
        Markup with image tokens turned into frames

        """
        directives = scan_images(text)
        if not directives:
            return text

        sources = [self._document_source(directive) for directive in directives]
        acquired = self._acquire_all(
            {s.cache_key: s for s in sources if s is not None}.values(), row=None
        )

        replacements: List[Optional[str]] = []
        for directive, source in zip(directives, sources):
            if source is None:
                replacements.append(None)
                continue
            replacements.append(
                self._render(directive, source, acquired.get(source.cache_key), row=None)
            )

        logger.debug(f"Image tokens resolved={self.resolved} failed={self.failed}")
        return rewrite(text, directives, replacements)

    def _document_source(self, directive: ImageDirective) -> Optional[ImageSource]:
        key = directive.key
        value = self.data.get(key)

        if value is not None and not isinstance(value, ArrayOfRecords):
            return ImageSource(name=key, locator=value.text.strip())

        path = self.data.get_text(f"{key}.path")
        if value is None and path is not None:
            return ImageSource(
                name=key,
                locator=path.strip(),
                width=self._legacy_length(key, "width"),
                height=self._legacy_length(key, "height"),
                legacy=True,
            )

        return None

    def _legacy_length(self, key: str, dimension: str) -> Optional[str]:
        value = self.data.get_text(f"{key}.{dimension}")
        if not value:
            return None
        if not self.units.is_length(value):
            logger.warning(f"Ignoring invalid {dimension} {value!r} for image @@{key}")
            return None
        return value

    # Row level
    def resolve_row(self, text: str, array_key: str, record: Mapping[str, FieldValue], row: int) -> str:
        """

        Replaces image tokens naming fields of ``array_key`` within one cloned row.

        Args:
        text: Row markup
        array_key: Array placeholder key
        record: Array element the row is filled from
        row: Running row ordinal, part of generated file names

        Returns:
        Row markup with the record's images embedded

        """
        prefix = f"{array_key}."
        directives = scan_images(text)
        if not directives:
            return text

        replacements: List[Optional[str]] = []
        for directive in directives:
            if not directive.key.startswith(prefix):
                replacements.append(None)
                continue

            field_value = record.get(directive.key[len(prefix):])
            if field_value is None:
                replacements.append(None)
                continue

            source = ImageSource(name=directive.key, locator=field_value.text.strip())
            stored = self._acquire(source, row)
            replacements.append(self._render(directive, source, stored, row=row))

        return rewrite(text, directives, replacements)

    # Acquisition
    def _acquire_all(self, sources: Iterable[ImageSource], row: Optional[int]) -> Dict[Tuple[str, str], Optional[Path]]:
        sources = list(sources)
        workers = min(self.options.image_workers, len(sources))
        if workers <= 1:
            return {s.cache_key: self._acquire(s, row) for s in sources}

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="odtfill-image") as executor:
            results = executor.map(lambda s: self._acquire(s, row), sources)
            return {s.cache_key: path for s, path in zip(sources, results)}

    def _acquire(self, source: ImageSource, row: Optional[int]) -> Optional[Path]:
        """

        Fetches, generates or copies the image bytes into the media folder.

        Args:
        source: Image source
        row: Row ordinal for row-scoped images

        Returns:
        Stored file path, or None when the image is unavailable

        """
        locator = source.locator
        if not locator:
            logger.debug(f"Image @@{source.name} has an empty source")
            return None

        stem = f"{source.name}{row}" if row is not None else source.name
        stored = None
        try:
            if is_remote(locator):
                data = self.context.fetcher.fetch(locator)
                file_name = f"{stem}_{remote_file_name(locator)}"
            elif locator.lower().startswith(QR_PREFIX):
                data = self.context.converter.generate_qr(locator[len(QR_PREFIX):])
                return self.context.media.store(f"{stem}_qrcode.png", data)
            else:
                path = Path(locator)
                if not path.is_file():
                    logger.warning(f"Image @@{source.name} not found: {locator}")
                    return None
                data = self.context.fetcher.fetch(path)
                file_name = f"{stem}_{path.name}"

            stored = self.context.media.store(file_name, data)
            self.context.converter.normalize(stored)
        except ResourceResolutionError as e:
            logger.warning(f"Image @@{source.name} skipped: {e.message}")
            self._discard(stored)
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Image @@{source.name} skipped: {type(e).__name__}: {e}")
            self._discard(stored)
            return None

        return stored

    @staticmethod
    def _discard(stored: Optional[Path]) -> None:
        # Rejected files must not reach the manifest.
        if stored is not None:
            stored.unlink(missing_ok=True)

    # Rendering
    def _render(self, directive: ImageDirective, source: ImageSource,
                stored: Optional[Path], row: Optional[int]) -> str:
        if stored is None:
            self.failed += 1
            if source.legacy:
                return escape_xml(self.options.image_not_found_marker.format(name=source.name))
            return ""

        width, height = self.compute_size(
            directive.explicit_width or source.width,
            directive.explicit_height or source.height,
            stored,
            row_level=row is not None,
        )
        self.resolved += 1
        frame_name = f"{source.name}{row}" if row is not None else source.name
        return self.frame_markup(frame_name, self.context.media.href(stored), width, height)

    def compute_size(self, width: Optional[str], height: Optional[str], image_path: Path,
                     row_level: bool = False) -> Tuple[Optional[str], Optional[str]]:
        """

        Completes a requested size from the image aspect ratio.

        Args:
        width: Requested width (None to derive)
        height: Requested height (None to derive)
        image_path: Stored image, queried for its intrinsic size
        row_level: Use the intrinsic size, not the default height, when nothing is requested

        Returns:
        (svg:width, svg:height) values; None when not resolvable

        """
        units = self.units
        if width and height:
            return units.to_odt_length(width), units.to_odt_length(height)

        try:
            size = self.context.converter.intrinsic_size(image_path)
        except ResourceResolutionError as e:
            logger.info(f"Aspect ratio not applicable {image_path}: {e.message}")
            size = None

        if size is None:
            return units.to_odt_length(width), units.to_odt_length(height)

        pixel_width, pixel_height = size
        aspect = pixel_width / pixel_height

        if not width and not height:
            if row_level:
                return (units.format_cm(units.pixels_to_cm(pixel_width)),
                        units.format_cm(units.pixels_to_cm(pixel_height)))
            height = self.options.default_image_height

        if width:
            height = units.format_cm(units.to_cm(width) / aspect)
        else:
            width = units.format_cm(units.to_cm(height) * aspect)

        return units.to_odt_length(width), units.to_odt_length(height)

    @staticmethod
    def frame_markup(name: str, href: str, width: Optional[str], height: Optional[str]) -> str:
        width_attr = f' svg:width="{width}"' if width else ""
        height_attr = f' svg:height="{height}"' if height else ""
        return (
            f'<draw:frame draw:name="{escape_xml(name)}" text:anchor-type="as-char" '
            f'draw:z-index="0"{width_attr}{height_attr}>'
            f'<draw:image xlink:href="{escape_xml(href)}" xlink:type="simple" '
            f'xlink:show="embed" xlink:actuate="onLoad"/></draw:frame>'
        )
