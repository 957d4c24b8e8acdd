"""
ODT exporter.

Registers embedded pictures in the manifest and reassembles the container
from the working directory, with ``mimetype`` stored first and uncompressed.
"""

from typing import List, Optional, Union
from pathlib import Path
import logging
import os
import xml.etree.ElementTree as ET
import zipfile

from ..media.media_store import MediaStore, media_type_for
from ..parser.package_reader import MANIFEST_PART, MIMETYPE_ENTRY
from ..utils.exceptions import PackagingError, StructuralError

logger = logging.getLogger(__name__)

MANIFEST_NS = "urn:oasis:names:tc:opendocument:xmlns:manifest:1.0"
LOEXT_NS = "urn:org:documentfoundation:names:experimental:office:xmlns:loext:1.0"


class OdtExporter:
    """
    Writes an extracted ODT package back into a container.
    """

    def __init__(self, root: Union[str, Path], media: Optional[MediaStore] = None):
        """
        Initialize ODT exporter.

        Args:
            root: Extracted package directory
            media: Media store whose folder is registered in the manifest
        """
        self.root = Path(root)
        self.media = media
        self.logger = logging.getLogger(self.__class__.__name__)

    def update_manifest(self) -> int:
        """
        Add a ``file-entry`` for every media file missing from the manifest.

        Returns:
            Number of entries added
        """
        manifest_path = self.root / MANIFEST_PART
        if self.media is None or not manifest_path.is_file():
            return 0

        media_files = self.media.list_media()
        if not media_files:
            return 0

        ET.register_namespace('manifest', MANIFEST_NS)
        ET.register_namespace('loext', LOEXT_NS)
        try:
            tree = ET.parse(manifest_path)
        except ET.ParseError as e:
            raise StructuralError(
                f"Unreadable manifest: {e}", package_path=str(self.root),
                part_name=MANIFEST_PART, cause=e
            ) from e

        root = tree.getroot()
        full_path_attr = f"{{{MANIFEST_NS}}}full-path"
        known = {entry.get(full_path_attr) for entry in root.iter(f"{{{MANIFEST_NS}}}file-entry")}

        added = 0
        for media_file in media_files:
            rel_path = self.media.href(media_file)
            if rel_path in known:
                continue
            ET.SubElement(root, f"{{{MANIFEST_NS}}}file-entry", {
                f"{{{MANIFEST_NS}}}full-path": rel_path,
                f"{{{MANIFEST_NS}}}media-type": media_type_for(media_file),
            })
            added += 1

        if added:
            tree.write(manifest_path, encoding="UTF-8", xml_declaration=True)
            self.logger.debug(f"Manifest updated with {added} media entries")
        return added

    def export(self, output_path: Union[str, Path]) -> Path:
        """
        Write the package to ``output_path``.

        Args:
            output_path: Destination ODT file

        Returns:
            Output path

        Raises:
            StructuralError: If the ``mimetype`` entry is missing
            PackagingError: If writing fails (the partial file is removed)
        """
        output_path = Path(output_path)
        mimetype_path = self.root / MIMETYPE_ENTRY
        if not mimetype_path.is_file():
            raise StructuralError(
                "mimetype file missing in extracted folder",
                package_path=str(self.root), part_name=MIMETYPE_ENTRY, error_code="MIMETYPE_MISSING"
            )

        if output_path.exists():
            output_path.unlink()
        if output_path.parent != Path(""):
            output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with zipfile.ZipFile(output_path, 'w') as zip_file:
                zip_file.write(mimetype_path, MIMETYPE_ENTRY, compress_type=zipfile.ZIP_STORED)
                for rel_path, file_path in self._package_files():
                    zip_file.write(file_path, rel_path, compress_type=zipfile.ZIP_DEFLATED)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            if output_path.exists():
                output_path.unlink()
            raise PackagingError(
                f"Failed to write {output_path}: {e}", output_path=str(output_path), cause=e
            ) from e

        self.logger.info(f"Package written: {output_path}")
        return output_path

    def _package_files(self) -> List[tuple]:
        """Every file except ``mimetype``, as (forward-slash relative path, path)."""
        files = []
        for dir_path, dir_names, file_names in os.walk(self.root):
            dir_names.sort()
            for file_name in sorted(file_names):
                file_path = Path(dir_path) / file_name
                rel_path = file_path.relative_to(self.root).as_posix()
                if rel_path == MIMETYPE_ENTRY:
                    continue
                files.append((rel_path, file_path))
        return files
