"""
Media converters for embedded images.

Handles intrinsic size queries, EXIF orientation correction, downscaling of
oversized rasters, and QR code generation.
"""

from typing import Optional, Tuple
from pathlib import Path
import io
import logging

import qrcode
from PIL import Image as PILImage
from PIL import ImageOps, UnidentifiedImageError

from ..utils.exceptions import ResourceResolutionError

logger = logging.getLogger(__name__)

VECTOR_SUFFIXES = {".svg", ".svgz"}


def is_vector(path: Path) -> bool:
    return Path(path).suffix.lower() in VECTOR_SUFFIXES


class MediaConverter:
    """
    Image helpers used by the image resolver.

    Raster work goes through Pillow; QR symbols through qrcode.
    """

    def __init__(self, max_size: int = 1024, qr_box_size: int = 20, qr_border: int = 4):
        """
        Initialize media converter.

        Args:
            max_size: Bounding box in pixels for stored images
            qr_box_size: Pixels per QR module
            qr_border: Quiet zone in modules
        """
        self.max_size = max_size
        self.qr_box_size = qr_box_size
        self.qr_border = qr_border

    def intrinsic_size(self, path: Path) -> Optional[Tuple[int, int]]:
        """
        Native pixel width and height of an image.

        Args:
            path: Image file

        Returns:
            (width, height), or None for vector images

        Raises:
            ResourceResolutionError: If the image cannot be decoded
        """
        if is_vector(path):
            return None
        try:
            with PILImage.open(path) as img:
                width, height = img.size
        except PILImage.DecompressionBombError as e:
            raise ResourceResolutionError(
                f"Image {path} exceeds the pixel limit: {e}",
                locator=str(path), cause=e, error_code="IMAGE_TOO_LARGE"
            ) from e
        except (OSError, UnidentifiedImageError) as e:
            raise ResourceResolutionError(
                f"Cannot decode image {path}: {e}", locator=str(path), cause=e
            ) from e
        if not width or not height:
            raise ResourceResolutionError(f"Image {path} has no area", locator=str(path))
        return width, height

    def normalize(self, path: Path) -> bool:
        """
        Apply EXIF orientation and shrink the image into the bounding box, in place.

        Vector images are left alone. Failures are logged and the file is kept
        as stored.

        Args:
            path: Image file

        Returns:
            True if the file was rewritten

        Raises:
            ResourceResolutionError: If the image exceeds the Pillow pixel limit
        """
        if is_vector(path):
            return False

        try:
            with PILImage.open(path) as img:
                image_format = img.format
                orientation = img.getexif().get(0x0112, 1)
                oversized = img.width > self.max_size or img.height > self.max_size
                if orientation == 1 and not oversized:
                    return False

                fixed = ImageOps.exif_transpose(img)
                if oversized:
                    fixed.thumbnail((self.max_size, self.max_size), PILImage.Resampling.LANCZOS)

                buffer = io.BytesIO()
                fixed.save(buffer, format=image_format)
        except PILImage.DecompressionBombError as e:
            raise ResourceResolutionError(
                f"Image {path} exceeds the pixel limit: {e}",
                locator=str(path), cause=e, error_code="IMAGE_TOO_LARGE"
            ) from e
        except (OSError, UnidentifiedImageError, ValueError) as e:
            logger.warning(f"Could not resize image {path}: {type(e).__name__}: {e}")
            return False

        path.write_bytes(buffer.getvalue())
        logger.debug(f"Normalized image {path} (orientation={orientation}, oversized={oversized})")
        return True

    def generate_qr(self, payload: str) -> bytes:
        """
        Encode ``payload`` into a PNG QR symbol.

        Args:
            payload: Text to encode

        Returns:
            PNG bytes
        """
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_Q,
            box_size=self.qr_box_size,
            border=self.qr_border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        img_bytes = io.BytesIO()
        img.save(img_bytes, format='PNG')
        return img_bytes.getvalue()
