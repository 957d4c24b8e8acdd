"""
Fill options for odtfill.

Plain option holder consulted by every component of a fill run.
"""

import os
from typing import Optional


class FillOptions:
    """Template fill options."""

    def __init__(
        self,
        no_value_replacement: Optional[str] = None,
        http_timeout: float = 30.0,
        max_image_size: int = 1024,
        image_workers: int = 1,
        pictures_dir: str = "Pictures",
        default_image_height: str = "1in",
        image_not_found_marker: str = "[image not found: {name}]",
        qr_box_size: int = 20,
        qr_border: int = 4,
        keep_workdir: bool = False,
        soffice_path: Optional[str] = None,
        ghostscript_path: Optional[str] = None,
        thermal_paper_size: str = "4x6",
    ):
        """

        Initializes fill options.

        Args:
        no_value_replacement: Text for placeholders left unresolved (None keeps them verbatim)
        http_timeout: Seconds allowed for each remote fetch
        max_image_size: Bounding box in pixels for stored raster images
        image_workers: Threads used to resolve image tokens of one part
        pictures_dir: Media folder inside the document container
        default_image_height: Height used when an image token gives no size
        image_not_found_marker: Text emitted for a missing legacy per-field image
        qr_box_size: Pixels per QR module
        qr_border: QR quiet zone in modules
        keep_workdir: Keep the extraction directory after packaging
        soffice_path: LibreOffice executable (env ODTFILL_SOFFICE, else "soffice")
        ghostscript_path: Ghostscript executable (env ODTFILL_GHOSTSCRIPT, else "gs")
        thermal_paper_size: Paper size in inches ("WxH") for thermal printing

        """
        self.no_value_replacement = no_value_replacement
        self.http_timeout = http_timeout
        self.max_image_size = max_image_size
        self.image_workers = max(1, int(image_workers))
        self.pictures_dir = pictures_dir
        self.default_image_height = default_image_height
        self.image_not_found_marker = image_not_found_marker
        self.qr_box_size = qr_box_size
        self.qr_border = qr_border
        self.keep_workdir = keep_workdir
        self.soffice_path = soffice_path or os.environ.get("ODTFILL_SOFFICE", "soffice")
        self.ghostscript_path = ghostscript_path or os.environ.get("ODTFILL_GHOSTSCRIPT", "gs")
        self.thermal_paper_size = thermal_paper_size

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"FillOptions({fields})"
