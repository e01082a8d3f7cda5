"""Renderer contract and per-request cancellation.

A renderer draws one tile. The dispatcher looks it up by layer name in the
renderer registry and calls ``render`` from a worker thread, so
implementations must not rely on running inside the event loop. Rendering
is synchronous; the dispatcher waits for it unless a render deadline is
configured.

Example:
    A minimal renderer:
        >>> from PIL import Image
        >>> class Blank:
        ...     def render(self, x, y, level, cancellation):
        ...         cancellation.raise_if_cancelled()
        ...         return Image.new("RGB", (256, 256))
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from PIL import Image


class RenderCancelled(Exception):
    """Raised by a cooperative renderer once its request is cancelled."""


class CancellationToken:
    """Thread-safe cancellation flag shared by a request and its renderer.

    The transport layer sets it when the client disconnects and the
    dispatcher sets it when the render deadline passes. Renderers only read
    it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Mark the request as cancelled. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise RenderCancelled if the request was cancelled.

        Raises:
            RenderCancelled: If cancel() has been called.
        """
        if self._event.is_set():
            raise RenderCancelled("render cancelled")


class RendererProtocol(Protocol):
    """Capability every tile renderer provides."""

    def render(
        self,
        x: int,
        y: int,
        level: int,
        cancellation: CancellationToken,
    ) -> Image.Image:
        """Draw the tile at (x, y) on the given zoom level.

        Args:
            x: Tile column.
            y: Tile row.
            level: Zoom level.
            cancellation: Token to poll for early abort.

        Returns:
            The rendered tile as an in-memory Pillow image.

        Raises:
            Exception: Any failure; the dispatcher reports it as a failed
                tile generation.
        """
        ...
