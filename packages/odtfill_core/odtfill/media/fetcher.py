"""
Resource fetcher.

Fetches template, data and image bytes from a local path or an ``https://``
URL, with a bounded timeout per request.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

import requests

from ..utils.exceptions import ResourceResolutionError

logger = logging.getLogger(__name__)

REMOTE_PREFIX = "https://"


def is_remote(locator: str) -> bool:
    return locator.lower().startswith(REMOTE_PREFIX)


def remote_file_name(url: str) -> str:
    """Last path segment of a URL (``"image"`` when the path is empty)."""
    name = posixpath.basename(unquote(urlparse(url).path))
    return name or "image"


class ResourceFetcher:
    """Returns bytes for a path or URL."""

    def __init__(self, timeout: float = 30.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, locator: Union[str, Path]) -> bytes:
        """
        Fetch bytes for ``locator``.

        Args:
            locator: Local path or ``https://`` URL

        Returns:
            Resource bytes

        Raises:
            ResourceResolutionError: If the resource cannot be read
        """
        locator = str(locator)
        if is_remote(locator):
            return self._fetch_remote(locator)

        path = Path(locator)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ResourceResolutionError(
                f"Cannot read {locator}: {e}", locator=locator, cause=e
            ) from e
        logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    def _fetch_remote(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ResourceResolutionError(
                f"Download failed for {url}: {e}", locator=url, cause=e
            ) from e
        logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content

    def materialize(self, locator: Union[str, Path], dest_dir: Path, default_name: str) -> Path:
        """
        Return a local path for ``locator``, downloading remote resources into ``dest_dir``.

        Args:
            locator: Local path or URL
            dest_dir: Directory receiving downloads
            default_name: File name used for the download

        Returns:
            Local file path
        """
        locator = str(locator)
        if not is_remote(locator):
            return Path(locator)

        dest_dir.mkdir(parents=True, exist_ok=True)
        target = dest_dir / default_name
        target.write_bytes(self._fetch_remote(locator))
        logger.info(f"Downloaded {locator} to {target}")
        return target

    def close(self) -> None:
        self.session.close()
