"""
Media store for filled documents.

Persists resolved image bytes into the container's media folder and keeps
track of what was stored, for the manifest update.
"""

from typing import Dict, List
from pathlib import Path
import logging
import re
import threading

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif': 'image/gif',
    '.svg': 'image/svg+xml',
    '.bmp': 'image/bmp',
}

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def media_type_for(path: Path) -> str:
    """Manifest media type from the file extension."""
    return MEDIA_TYPES.get(Path(path).suffix.lower(), 'application/octet-stream')


def safe_file_name(name: str) -> str:
    """Reduce ``name`` to a flat, portable file name."""
    cleaned = _UNSAFE_CHARS.sub('_', Path(name).name).strip('._')
    return cleaned or 'image'


class MediaStore:
    """
    Stores media files under the working directory's media folder.

    Safe to use from several image-resolution threads at once.
    """

    def __init__(self, root: Path, folder: str = "Pictures"):
        """
        Initialize media store.

        Args:
            root: Extracted container directory
            folder: Media folder name inside the container
        """
        self.root = Path(root)
        self.folder = folder
        self.directory = self.root / folder
        self.stored: Dict[str, Path] = {}
        self._lock = threading.Lock()

    def store(self, file_name: str, data: bytes) -> Path:
        """
        Write ``data`` into the media folder.

        Args:
            file_name: Target file name (flattened to a safe name)
            data: File bytes

        Returns:
            Path of the stored file
        """
        name = safe_file_name(file_name)
        target = self.directory / name
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            if name in self.stored:
                logger.debug(f"Media file {name} replaced")
            target.write_bytes(data)
            self.stored[name] = target

        logger.debug(f"Media stored: {target}, size={len(data)}")
        return target

    def href(self, path: Path) -> str:
        """Container-relative reference for a stored file."""
        return f"{self.folder}/{Path(path).name}"

    def list_media(self) -> List[Path]:
        """Every file currently in the media folder (stored or shipped with the template)."""
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.iterdir() if p.is_file())
