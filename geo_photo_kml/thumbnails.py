"""Bordered thumbnail generation."""

import logging
from pathlib import Path

from PIL import Image, ImageOps

from .constants import Constants
from .exceptions import ImageDecodeError
from .types import PhotoConfig


class ThumbnailGenerator:
    """Writes size-limited, bordered JPEG copies of photos."""

    def __init__(self, photo_config: PhotoConfig, thumbnail_dir: Path, logger: logging.Logger):
        self.photo_config = photo_config
        self.thumbnail_dir = Path(thumbnail_dir)
        self.logger = logger

    def thumbnail_path(self, name: str) -> Path:
        return self.thumbnail_dir / f"{name}.jpg"

    def create(self, source_path: str, name: str) -> Path:
        """
        Create the thumbnail of source_path as ``<name>.jpg``.

        An existing thumbnail is left untouched. The image is rotated upright
        from its EXIF orientation, fitted into the configured size minus the
        border, and centred on a canvas of the border color.

        Raises:
            ImageDecodeError: The source could not be decoded or the thumbnail written.
        """
        dest = self.thumbnail_path(name)
        if dest.exists():
            self.logger.debug(f"Thumbnail exists: {dest}")
            return dest

        size = self.photo_config.thumbnail_size
        border = self.photo_config.thumbnail_border_size
        inner = max(size - 2 * border, 1)

        try:
            with Image.open(source_path) as img:
                img = ImageOps.exif_transpose(img)
                img.thumbnail((inner, inner))
                if img.mode != "RGB":
                    img = img.convert("RGB")

                canvas = Image.new(
                    "RGB",
                    (img.width + 2 * border, img.height + 2 * border),
                    f"#{self.photo_config.thumbnail_border_color}",
                )
                canvas.paste(img, (border, border))
                canvas.save(dest, format="JPEG", quality=Constants.THUMBNAIL_QUALITY)
        except (OSError, ValueError) as e:
            raise ImageDecodeError(f"Could not create thumbnail for {source_path}: {e}") from e

        self.logger.debug(f"Thumbnail created: {dest}")
        return dest
