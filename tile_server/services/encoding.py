"""Raster encoding of rendered tiles."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from tile_server.core import models

if TYPE_CHECKING:
    from PIL import Image

# Modes the JPEG writer accepts as-is; anything else is flattened to RGB.
JPEG_MODES = frozenset({"1", "L", "RGB", "CMYK"})


def encode_image(
    image: Image.Image,
    fmt: models.ImageFormat,
    *,
    jpeg_quality: int = 90,
) -> bytes:
    """Encode a rendered tile.

    The whole image is encoded into memory before anything is sent, so a
    failure here never leaves a half-written response behind.

    Args:
        image: Tile returned by a renderer.
        fmt: Requested output format.
        jpeg_quality: Quality for JPEG output, ignored for PNG.

    Returns:
        The encoded image bytes.

    Raises:
        Exception: Whatever Pillow raises when the image cannot be encoded.
    """
    buffer = io.BytesIO()
    if fmt is models.ImageFormat.JPEG:
        if image.mode not in JPEG_MODES:
            image = image.convert("RGB")
        image.save(buffer, format=str(fmt), quality=jpeg_quality)
    else:
        image.save(buffer, format=str(fmt))
    return buffer.getvalue()
