"""
Photo storage for wildlife reports.

Every uploaded image is re-encoded as JPEG and written to
<images_dir>/<report_id>.jpg.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from src.core.config import settings
from src.core.exceptions import InvalidArgument

logger = logging.getLogger(__name__)


class ImageStore:
    """Reads and writes report photos on the local filesystem."""

    def __init__(
        self,
        images_dir: Optional[str] = None,
        quality: Optional[int] = None
    ):
        """
        Initialize image store.

        Args:
            images_dir: Directory holding <report_id>.jpg files
            quality: JPEG quality (1-95)
        """
        self.images_dir = Path(images_dir or settings.images_dir)
        self.quality = quality or settings.jpeg_quality
        self.images_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, report_id: int) -> Path:
        return self.images_dir / f"{report_id}.jpg"

    def to_jpeg(self, data: bytes) -> bytes:
        """
        Convert uploaded image bytes to JPEG.

        Raises:
            InvalidArgument: the payload is not a readable image
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                # JPEG has no alpha or palette modes
                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                buffer = io.BytesIO()
                img.save(buffer, format="JPEG", quality=self.quality)
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidArgument("Only image files are allowed") from e

        return buffer.getvalue()

    def write(self, report_id: int, jpeg_data: bytes) -> Path:
        """Write already-encoded JPEG bytes for a report."""
        path = self.path_for(report_id)
        path.write_bytes(jpeg_data)
        logger.info(f"Saved image for report {report_id} ({len(jpeg_data)} bytes)")
        return path

    def read(self, report_id: int) -> Optional[bytes]:
        """Raw JPEG bytes, or None when the report has no image file."""
        path = self.path_for(report_id)
        if not path.is_file():
            return None
        return path.read_bytes()

    def data_uri(self, report_id: int) -> Optional[str]:
        """
        Image encoded as a data:image/jpeg;base64 URI.

        Unreadable files are logged and reported as missing.
        """
        try:
            data = self.read(report_id)
        except OSError as e:
            logger.error(f"Error reading image file for report {report_id}: {e}")
            return None

        if data is None:
            logger.error(f"Image file missing for report {report_id}")
            return None

        return "data:image/jpeg;base64," + base64.b64encode(data).decode("ascii")
