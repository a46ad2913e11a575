"""Screenshot capture and size normalization."""

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from sitesnap.browser import PageDriver
from sitesnap.config import CaptureSettings
from sitesnap.constants import MAX_DECODE_PIXELS, SCREENSHOT_EXTENSION
from sitesnap.url_scope import sanitize_filename

logger = logging.getLogger(__name__)

# Full-page screenshots of long pages exceed Pillow's default limit
Image.MAX_IMAGE_PIXELS = MAX_DECODE_PIXELS


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Compute "contain" dimensions for an image.

    The image is scaled so that it fits inside ``max_width x max_height``
    with its aspect ratio kept. Images that already fit are returned as-is;
    nothing is ever upscaled.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_width: Width bound
        max_height: Height bound

    Returns:
        (width, height) tuple within bounds
    """
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Invalid bounds: {max_width}x{max_height}")

    if width <= max_width and height <= max_height:
        return width, height

    scale = min(max_width / width, max_height / height)
    new_width = min(max_width, max(1, round(width * scale)))
    new_height = min(max_height, max(1, round(height * scale)))
    return new_width, new_height


class ImageCodec:
    """Pillow-backed resize-and-write for screenshot buffers."""

    def __init__(self, resample: int = Image.Resampling.LANCZOS):
        self.resample = resample

    def resize_contain(
        self,
        buffer: bytes,
        max_width: int,
        max_height: int,
        destination: Path,
    ) -> Path:
        """
        Write ``buffer`` to ``destination``, bounded to the given size.

        Args:
            buffer: Encoded image bytes (PNG from the browser)
            max_width: Width bound
            max_height: Height bound
            destination: Output file path; format follows its extension

        Returns:
            Path that was written
        """
        destination = Path(destination)

        with Image.open(BytesIO(buffer)) as img:
            target = fit_within(img.width, img.height, max_width, max_height)

            if target == (img.width, img.height):
                if img.format == "PNG" and destination.suffix.lower() == ".png":
                    destination.write_bytes(buffer)
                else:
                    img.save(destination)
                return destination

            logger.debug(f"Resizing {img.width}x{img.height} -> {target[0]}x{target[1]}")
            img.resize(target, self.resample).save(destination)

        return destination


class ScreenshotCapturer:
    """Captures the current page and writes a bounded image named after its URL."""

    def __init__(
        self,
        settings: Optional[CaptureSettings] = None,
        codec: Optional[ImageCodec] = None,
    ):
        self.settings = settings or CaptureSettings()
        self.codec = codec or ImageCodec()

    def path_for(self, url: str, output_dir: Path) -> Path:
        """Screenshot path for ``url`` inside ``output_dir``."""
        return Path(output_dir) / f"{sanitize_filename(url)}{SCREENSHOT_EXTENSION}"

    async def capture(self, driver: PageDriver, url: str, output_dir: Path) -> Path:
        """
        Take a full-page screenshot and store it within the configured bounds.

        Args:
            driver: PageDriver with a stabilized page
            url: URL the screenshot is named after
            output_dir: Phase screenshot directory

        Returns:
            Path of the written image
        """
        buffer = await driver.capture_full_page()
        destination = self.path_for(url, output_dir)
        return self.codec.resize_contain(
            buffer,
            self.settings.max_width,
            self.settings.max_height,
            destination,
        )
