"""Tile address decoding from request paths.

A tile path ends with ``/<layer>/<level>/<x>/<y>.<ext>``. Any segments in
front of it are ignored, but at least one must be present, so
``/maps/roads/3/10/7.png`` addresses a tile while ``/roads/3/10/7.png`` does
not. Matching is ASCII-only and case-sensitive, and the extension must be
exactly ``png`` or ``jpeg``.

Example:
    >>> parse_tile_path("/maps/roads/3/10/7.png")
    TileAddress(layer='roads', coordinate=TileCoordinate(level=3, x=10, y=7),
                format=<ImageFormat.PNG: 'png'>)
"""

from __future__ import annotations

import re

from tile_server.core import errors
from tile_server.core import models

TILE_PATH_PATTERN = re.compile(
    r"\A/.*/(\w+)/(\d+)/(\d+)/(\d+)\.(png|jpeg)\Z",
    re.ASCII,
)

# Layer names a tile path can carry.
LAYER_NAME_PATTERN = re.compile(r"\w+", re.ASCII)

# Largest value a decoded coordinate may take (signed 64-bit).
MAX_COORDINATE = 2**63 - 1


def _decode_field(field: str, digits: str) -> int:
    """Convert a matched digit group to an integer.

    Raises:
        FieldDecodeFailure: If the digits overflow a signed 64-bit integer or
            exceed the interpreter's integer string conversion limit.
    """
    try:
        value = int(digits)
    except ValueError:
        raise errors.FieldDecodeFailure(field, digits) from None
    if value > MAX_COORDINATE:
        raise errors.FieldDecodeFailure(field, digits)
    return value


def parse_tile_path(path: str) -> models.TileAddress:
    """Decode the tile address carried by a request path.

    Args:
        path: Request path as received from the ASGI server.

    Returns:
        The decoded layer name, coordinate and image format.

    Raises:
        MalformedAddress: If the path does not have the tile address shape.
        FieldDecodeFailure: If level, x or y cannot be decoded; fields are
            checked in that order.
    """
    match = TILE_PATH_PATTERN.match(path)
    if match is None:
        raise errors.MalformedAddress(path)

    layer, level_digits, x_digits, y_digits, extension = match.groups()
    coordinate = models.TileCoordinate(
        level=_decode_field("level", level_digits),
        x=_decode_field("x", x_digits),
        y=_decode_field("y", y_digits),
    )
    return models.TileAddress(
        layer=layer,
        coordinate=coordinate,
        format=models.ImageFormat(extension),
    )
