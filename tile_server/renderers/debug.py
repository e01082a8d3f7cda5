"""Debug renderer labelling each tile with its own coordinate."""

from __future__ import annotations

from PIL import Image, ImageDraw

from tile_server.renderers import CancellationToken

BACKGROUND = (0, 0, 0)
FOREGROUND = (255, 255, 255)
TEXT_ORIGIN = (5, 5)


class DebugRenderer:
    """Draws a black square with ``(x|y) lvl=level`` written in white.

    Useful to check that a map client requests the tiles it should: every
    tile names the grid cell it was rendered for.
    """

    def __init__(self, tile_size: int = 256) -> None:
        if tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {tile_size}")
        self.tile_size = tile_size

    def render(
        self,
        x: int,
        y: int,
        level: int,
        cancellation: CancellationToken,
    ) -> Image.Image:
        cancellation.raise_if_cancelled()
        img = Image.new("RGB", (self.tile_size, self.tile_size), BACKGROUND)
        draw = ImageDraw.Draw(img)
        draw.text(TEXT_ORIGIN, f"({x}|{y}) lvl={level}", fill=FOREGROUND)
        return img
