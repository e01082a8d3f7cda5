"""Tests for tile address decoding.

This module checks parse_tile_path() against the tile path grammar:
    - Valid addresses with arbitrary leading segments,
    - Structural mismatches raising MalformedAddress,
    - Digit groups that overflow raising FieldDecodeFailure for the right
      field, while the largest signed 64-bit value still decodes.
"""

from __future__ import annotations

import pytest

from tile_server.core import errors
from tile_server.core import models
from tile_server.services import address


def test_parse_png_address() -> None:
    """Test decoding of a plain PNG tile address."""
    result = address.parse_tile_path("/maps/roads/3/10/7.png")
    assert result == models.TileAddress(
        layer="roads",
        coordinate=models.TileCoordinate(level=3, x=10, y=7),
        format=models.ImageFormat.PNG,
    )


def test_parse_jpeg_address() -> None:
    """Test that the jpeg extension decodes to the JPEG format."""
    result = address.parse_tile_path("/a/terrain_2/0/0/0.jpeg")
    assert result.layer == "terrain_2"
    assert result.format is models.ImageFormat.JPEG


def test_parse_ignores_leading_segments() -> None:
    """Test that only the trailing structure is interpreted."""
    result = address.parse_tile_path("/v1/x/y/z/1/2/3/4/roads/5/6/7.png")
    assert result.layer == "roads"
    assert result.coordinate == models.TileCoordinate(level=5, x=6, y=7)


def test_parse_allows_empty_leading_segment() -> None:
    """Test that a double slash counts as a leading segment."""
    result = address.parse_tile_path("//roads/1/2/3.png")
    assert result.layer == "roads"


def test_parse_leading_zeros() -> None:
    """Test that zero-padded digit groups decode numerically."""
    result = address.parse_tile_path("/maps/roads/003/010/007.png")
    assert result.coordinate == models.TileCoordinate(level=3, x=10, y=7)


def test_parse_largest_coordinate() -> None:
    """Test that the largest signed 64-bit value is accepted."""
    top = str(address.MAX_COORDINATE)
    result = address.parse_tile_path(f"/maps/roads/{top}/{top}/{top}.png")
    assert result.coordinate.x == 2**63 - 1


@pytest.mark.parametrize(
    "path",
    [
        "/roads/3/10/7.png",
        "roads/3/10/7.png",
        "/maps/roads/3/10/7.gif",
        "/maps/roads/3/10/7.PNG",
        "/maps/roads/3/10/7.png ",
        "/maps/roads/3/10/7.png\n",
        " /maps/roads/3/10/7.png",
        "/maps/roads/3/+10/7.png",
        "/maps/roads/3/-10/7.png",
        "/maps/roads/3/1e3/7.png",
        "/maps/roads/3/10/7.5.png",
        "/maps/roads/3/10.png",
        "/maps/ro%20ads/3/10/7.png",
        "/maps/röads/3/10/7.png",
        "/maps/roads/3/١٠/7.png",
        "",
    ],
)
def test_parse_rejects_malformed(path: str) -> None:
    """Test that paths outside the grammar raise MalformedAddress."""
    with pytest.raises(errors.MalformedAddress):
        address.parse_tile_path(path)


@pytest.mark.parametrize(
    ("path", "field"),
    [
        (f"/maps/roads/{2**63}/0/0.png", "level"),
        (f"/maps/roads/0/{2**63}/0.png", "x"),
        (f"/maps/roads/0/0/{2**63}.png", "y"),
        (f"/maps/roads/0/{'1' * 5000}/0.png", "x"),
        (f"/maps/roads/{'9' * 25}/{'9' * 25}/0.png", "level"),
    ],
)
def test_parse_rejects_overflow(path: str, field: str) -> None:
    """Test that overflowing digit groups name the failing field."""
    with pytest.raises(errors.FieldDecodeFailure) as exc_info:
        address.parse_tile_path(path)
    assert exc_info.value.field == field
    assert exc_info.value.public_message == f"{field} decoding failed"
    assert exc_info.value.status_code == 400
