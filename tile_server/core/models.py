"""Data models for tile requests.

This module defines the structures decoded from a tile request path and
handed from the address parser to the dispatcher. All of them are created
fresh for every request and are immutable.

Example:
    The address of ``/maps/roads/3/10/7.png``:
        >>> from tile_server.core.models import (
        ...     ImageFormat, TileAddress, TileCoordinate,
        ... )
        >>> address = TileAddress(
        ...     layer="roads",
        ...     coordinate=TileCoordinate(level=3, x=10, y=7),
        ...     format=ImageFormat.PNG,
        ... )
        >>> address.format.content_type
        'image/png'
"""

from __future__ import annotations

import dataclasses
import enum


class ImageFormat(enum.StrEnum):
    """Raster formats a tile can be requested in, keyed by path extension."""

    PNG = "png"
    JPEG = "jpeg"

    @property
    def content_type(self) -> str:
        """MIME type sent with tiles of this format."""
        return f"image/{self.value}"


@dataclasses.dataclass(frozen=True)
class TileCoordinate:
    """Position of a tile in the tile grid.

    Attributes:
        level: Zoom level.
        x: Column index.
        y: Row index.
    """

    level: int
    x: int
    y: int


@dataclasses.dataclass(frozen=True)
class TileAddress:
    """Everything a tile request path encodes.

    Attributes:
        layer: Layer name, used only as the registry lookup key.
        coordinate: Decoded zoom level and grid position.
        format: Requested image encoding.
    """

    layer: str
    coordinate: TileCoordinate
    format: ImageFormat
