"""Failure taxonomy of the tile pipeline.

Every failure a tile request can hit maps to exactly one HTTP status and a
public response body. The body never carries internal detail; the detail is
logged by the dispatcher instead.
"""

from __future__ import annotations


class TileError(Exception):
    """Base class for failures converted to an HTTP response.

    Attributes:
        status_code: HTTP status sent to the client.
        public_message: Response body text. Empty means no body.
    """

    status_code: int = 500
    public_message: str = ""


class MalformedAddress(TileError):
    """The request path does not have the tile address shape."""

    status_code = 404

    def __init__(self, path: str) -> None:
        super().__init__(f"path does not address a tile: {path!r}")
        self.path = path


class FieldDecodeFailure(TileError):
    """A level, x or y digit group matched but is not a usable integer."""

    status_code = 400

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"{field} decoding failed: {value!r}")
        self.field = field
        self.value = value
        self.public_message = f"{field} decoding failed"


class UnknownLayer(TileError):
    """No renderer is registered for the requested layer."""

    status_code = 404

    def __init__(self, layer: str) -> None:
        super().__init__(f"layer not found: {layer!r}")
        self.layer = layer


class RenderFailure(TileError):
    """The renderer raised, was cancelled or missed the render deadline."""

    status_code = 500
    public_message = "tile generation failed"


class EncodingFailure(TileError):
    """The rendered image could not be encoded in the requested format."""

    status_code = 500
    public_message = "tile encoding failed"
