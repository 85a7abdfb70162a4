"""Icon image normalization with Pillow."""

import base64
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from macos_apps.errors import IconProcessingError

DATA_URI_PREFIX = "data:image/png;base64,"

# Modes Pillow can write to PNG without losing transparency
_PNG_MODES = {"RGBA", "RGB", "LA", "L"}


def encode_png(path: Path | str, size: int) -> bytes:
    """
    Decode an image and re-encode it as PNG bounded to ``size x size``.

    Aspect ratio is preserved and the image is never enlarged beyond its
    native resolution.

    Args:
        path: Raster image on disk (PNG, TIFF, ICO, ...)
        size: Bounding box edge in pixels

    Returns:
        PNG bytes

    Raises:
        IconProcessingError: If the image cannot be decoded or encoded
    """
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")

    try:
        with Image.open(path) as im:
            im.load()
            image = im if im.mode in _PNG_MODES else im.convert("RGBA")
            image.thumbnail((size, size), Image.Resampling.LANCZOS)

            buffer = BytesIO()
            image.save(buffer, format="PNG")
            return buffer.getvalue()
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
        raise IconProcessingError(
            f"Failed to convert icon at {path}: {e}", icon_path=str(path)
        ) from e


def to_data_uri(png: bytes) -> str:
    """Wrap PNG bytes in a ``data:image/png;base64`` URI."""
    return DATA_URI_PREFIX + base64.b64encode(png).decode("ascii")


def encode_png_data_uri(path: Path | str, size: int) -> str:
    """Normalize an image to a bounded PNG and return it as a data URI."""
    return to_data_uri(encode_png(path, size))
