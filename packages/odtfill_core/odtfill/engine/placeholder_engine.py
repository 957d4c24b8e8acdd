"""

Placeholder Engine - filling ``@@`` placeholders in ODT markup parts.

Supports:
- Extracting placeholders from a part
- Conditional regions (comments carrying ``@@flag``)
- Images (``[@@logo 4cm *]``) from files, URLs and QR payloads
- Repeating table rows from arrays (``@@items.label``)
- Single values with inline HTML conversion
- Fallback text for unresolved placeholders

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..context import RunContext
from ..models.values import ArrayOfRecords, FlattenedData
from ..parser.package_reader import OdtPackage
from .image_resolver import ImageResolver
from .placeholder_resolver import scan_images, scan_tokens
from .region_resolver import ANNOTATION_PATTERN, RegionResolver
from .row_expander import RowExpander
from .scalar_substituter import LeftoverResolver, ScalarSubstituter

logger = logging.getLogger(__name__)


@dataclass
class PlaceholderInfo:
    """Placeholder found in a template part."""
    name: str
    type: str  # "text", "image", "array", "condition", "unknown"
    count: int = 0
    parts: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


class PlaceholderEngine:
    """

    Engine filling placeholders of ODT markup parts.

    Passes run in a fixed order on each part, because later passes consume
    what earlier ones produce (a row expansion can introduce tokens the
    scalar pass must still see):
    1. Conditional regions
    2. Images
    3. Repeating rows
    4. Single values
    5. Leftovers

    """

    def __init__(self, data: FlattenedData, context: RunContext) -> None:
        """

        Initializes placeholder engine.

        Args:
        data: Flattened placeholder data
        context: Run context of this fill

        """
        self.data = data
        self.context = context
        self.stats: Dict[str, int] = {}

    def fill_part(self, text: str) -> str:
        """

        Fills all placeholders of one markup part.

        Args:
        text: Part markup

        Returns:
        Filled markup

        """
        regions = RegionResolver(self.data)
        text = regions.resolve(text)

        images = ImageResolver(self.data, self.context)
        text = images.resolve(text)

        rows = RowExpander(self.data, images)
        text = rows.expand(text)

        scalars = ScalarSubstituter(self.data)
        text = scalars.substitute(text)

        text = LeftoverResolver(self.context.options.no_value_replacement).resolve(text)

        self._count("regions_kept", regions.kept)
        self._count("regions_removed", regions.removed)
        self._count("images", images.resolved)
        self._count("images_failed", images.failed)
        self._count("rows", rows.row_counter)
        self._count("values", scalars.replaced)
        return text

    def fill_package(self, package: OdtPackage) -> Dict[str, int]:
        """

        Fills content.xml, then styles.xml when present.

        Args:
        package: Extracted template

        Returns:
        Fill statistics

        """
        self.stats = {}
        for part_name in package.markup_parts():
            logger.info(f"Filling {part_name}")
            package.write_part(part_name, self.fill_part(package.read_part(part_name)))

        logger.info(
            "Filled: %s",
            ", ".join(f"{k}={v}" for k, v in sorted(self.stats.items())) or "nothing",
        )
        return dict(self.stats)

    def extract_placeholders(self, package: OdtPackage) -> List[PlaceholderInfo]:
        """

        Extracts all placeholders from the template parts.

        Returns:
        List of PlaceholderInfo objects, sorted by name

        """
        placeholders: Dict[str, PlaceholderInfo] = {}

        def record(name: str, ph_type: str, part_name: str, **metadata: Any) -> None:
            info = placeholders.get(name)
            if info is None:
                info = placeholders[name] = PlaceholderInfo(name=name, type=ph_type, metadata=dict(metadata))
            info.count += 1
            if part_name not in info.parts:
                info.parts.append(part_name)

        for part_name in package.markup_parts():
            text = package.read_part(part_name)

            claimed = []
            for match in ANNOTATION_PATTERN.finditer(text):
                record(match.group("key"), "condition", part_name)
                claimed.append(match.span("annotation"))

            for directive in scan_images(text):
                record(directive.key, "image", part_name, width=directive.width, height=directive.height)
                claimed.append((directive.start, directive.end))

            for token in scan_tokens(text):
                if any(start <= token.start < end for start, end in claimed):
                    continue
                record(token.key, self._classify_placeholder(token.key), part_name)

        return sorted(placeholders.values(), key=lambda x: x.name)

    def _classify_placeholder(self, name: str) -> str:
        if name in self.data:
            return "array" if isinstance(self.data[name], ArrayOfRecords) else "text"
        if any(name.startswith(f"{key}.") for key in self.data.arrays()):
            return "array"
        return "unknown"

    def _count(self, name: str, value: int) -> None:
        self.stats[name] = self.stats.get(name, 0) + value

