"""Run-scoped context threaded through every component of one fill run."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import FillOptions
from .media.converters import MediaConverter
from .media.fetcher import ResourceFetcher
from .media.media_store import MediaStore
from .utils.units import UnitsConverter

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Working directory, options and collaborators owned by one fill run."""

    work_dir: Path
    options: FillOptions = field(default_factory=FillOptions)
    fetcher: Optional[ResourceFetcher] = None
    converter: Optional[MediaConverter] = None
    units: UnitsConverter = field(default_factory=UnitsConverter)
    media: MediaStore = field(init=False)

    def __post_init__(self) -> None:
        self.work_dir = Path(self.work_dir)
        if self.fetcher is None:
            self.fetcher = ResourceFetcher(timeout=self.options.http_timeout)
        if self.converter is None:
            self.converter = MediaConverter(
                max_size=self.options.max_image_size,
                qr_box_size=self.options.qr_box_size,
                qr_border=self.options.qr_border,
            )
        self.media = MediaStore(self.package_dir, self.options.pictures_dir)

    @property
    def package_dir(self) -> Path:
        """Extraction directory of the template; everything in it is packaged."""
        return self.work_dir / "package"

    @property
    def downloads_dir(self) -> Path:
        return self.work_dir / "downloads"

    @classmethod
    def create(cls, options: Optional[FillOptions] = None, **kwargs) -> "RunContext":
        """Context with a fresh temporary working directory."""
        work_dir = Path(tempfile.mkdtemp(prefix="odtfill_"))
        logger.debug(f"Working directory: {work_dir}")
        return cls(work_dir=work_dir, options=options or FillOptions(), **kwargs)

    def cleanup(self) -> None:
        if self.options.keep_workdir:
            logger.info(f"Working directory kept: {self.work_dir}")
            return
        shutil.rmtree(self.work_dir, ignore_errors=True)
