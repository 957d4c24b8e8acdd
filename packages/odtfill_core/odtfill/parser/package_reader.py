"""
Package reader for ODT files.

Handles extraction of the template container into the run's working
directory and access to its markup parts.
"""

import zipfile
from pathlib import Path
from typing import Dict, List, Union
import logging

from ..utils.exceptions import StructuralError

logger = logging.getLogger(__name__)

MIMETYPE_ENTRY = "mimetype"
CONTENT_PART = "content.xml"
STYLES_PART = "styles.xml"
MANIFEST_PART = "META-INF/manifest.xml"


class OdtPackage:
    """
    Extracted ODT package.

    Owns the extraction directory for the duration of one fill run.
    """

    def __init__(self, odt_path: Union[str, Path], extract_to: Union[str, Path]):
        """
        Initialize package reader.

        Args:
            odt_path: Path to the ODT template
            extract_to: Directory to extract to (must be owned by this run)
        """
        self.odt_path = Path(odt_path)
        self.root = Path(extract_to)
        self._extracted_files: Dict[str, Path] = {}

        self._extract_files()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def _extract_files(self):
        """Extract every entry of the container into ``root``."""
        if not self.odt_path.is_file():
            raise StructuralError(
                f"ODT template not found: {self.odt_path}",
                package_path=str(self.odt_path), error_code="TEMPLATE_MISSING"
            )

        try:
            with zipfile.ZipFile(self.odt_path, 'r') as zip_file:
                self.root.mkdir(parents=True, exist_ok=True)
                root = self.root.resolve()

                for file_info in zip_file.infolist():
                    if file_info.is_dir():
                        continue

                    file_path = (self.root / file_info.filename).resolve()
                    if root not in file_path.parents:
                        raise StructuralError(
                            f"Entry escapes the package: {file_info.filename}",
                            package_path=str(self.odt_path), part_name=file_info.filename
                        )

                    file_path.parent.mkdir(parents=True, exist_ok=True)
                    file_path.write_bytes(zip_file.read(file_info.filename))
                    self._extracted_files[file_info.filename] = file_path
        except zipfile.BadZipFile as e:
            raise StructuralError(
                f"Template is not a valid ODT archive: {self.odt_path}",
                package_path=str(self.odt_path), cause=e, error_code="BAD_ZIP"
            ) from e
        except OSError as e:
            raise StructuralError(
                f"Cannot extract template {self.odt_path}: {e}",
                package_path=str(self.odt_path), cause=e
            ) from e

        logger.debug(f"Extracted {len(self._extracted_files)} files to {self.root}")

        if CONTENT_PART not in self._extracted_files:
            raise StructuralError(
                f"Template has no {CONTENT_PART}: {self.odt_path}",
                package_path=str(self.odt_path), part_name=CONTENT_PART, error_code="PART_MISSING"
            )
        if MIMETYPE_ENTRY not in self._extracted_files:
            logger.warning(f"Template has no {MIMETYPE_ENTRY} entry: {self.odt_path}")

    def has_part(self, part_name: str) -> bool:
        return (self.root / part_name).is_file()

    def markup_parts(self) -> List[str]:
        """Markup parts to fill, in processing order."""
        return [name for name in (CONTENT_PART, STYLES_PART) if self.has_part(name)]

    def part_path(self, part_name: str) -> Path:
        return self.root / part_name

    def read_part(self, part_name: str) -> str:
        """Get the text of a markup part."""
        path = self.part_path(part_name)
        if not path.is_file():
            raise StructuralError(
                f"Missing part {part_name}", package_path=str(self.root), part_name=part_name
            )
        return path.read_text(encoding="utf-8")

    def write_part(self, part_name: str, text: str) -> None:
        self.part_path(part_name).write_text(text, encoding="utf-8")

    def get_extracted_files(self) -> Dict[str, Path]:
        return dict(self._extracted_files)
