"""Tile request pipeline: parse, resolve, render, encode, respond.

The dispatcher owns one request end to end. Steps run strictly in order and
the first failure ends the request with exactly one response:

=====================================  ======  ==========================
Failure                                Status  Body
=====================================  ======  ==========================
Path is not a tile address             404     empty
Level, x or y does not decode          400     ``<field> decoding failed``
Layer has no renderer                  404     empty
Renderer raises or misses deadline     500     ``tile generation failed``
Image cannot be encoded                500     ``tile encoding failed``
=====================================  ======  ==========================

Internal error detail goes to the log only. Nothing is cached or shared
between requests, so two identical requests render twice.

Example:
    Dispatch a path without going through HTTP:
        >>> dispatcher = TileDispatcher(registry)
        >>> response = await dispatcher.dispatch("/maps/roads/3/10/7.png")
        >>> response.status_code
        200
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from fastapi import responses
from starlette import concurrency

from tile_server.core import errors
from tile_server.renderers import CancellationToken, RenderCancelled
from tile_server.services import address as address_service
from tile_server.services import encoding

if TYPE_CHECKING:
    from PIL import Image

    from tile_server.core import config
    from tile_server.core import models
    from tile_server.registry import layers
    from tile_server.renderers import RendererProtocol

default_logger = logging.getLogger(__name__)


def _error_response(exc: errors.TileError) -> responses.Response:
    """Convert a pipeline failure to its HTTP response."""
    if exc.public_message:
        return responses.PlainTextResponse(
            exc.public_message,
            status_code=exc.status_code,
        )
    return responses.Response(status_code=exc.status_code)


def _tile_context(path: str, address: models.TileAddress) -> dict[str, Any]:
    return {
        "path": path,
        "layer": address.layer,
        "level": address.coordinate.level,
        "x": address.coordinate.x,
        "y": address.coordinate.y,
        "format": str(address.format),
    }


def _discard_result(task: asyncio.Future[Any]) -> None:
    """Retrieve the outcome of an abandoned render so it is not reported."""
    if not task.cancelled():
        task.exception()


class TileDispatcher:
    """Serves tile requests against a renderer registry.

    Attributes:
        registry: Read-only layer to renderer lookup.
        render_timeout_seconds: Render deadline, or None to wait forever.
        jpeg_quality: Quality used when encoding JPEG tiles.
        logger: Destination of the request log events.
    """

    def __init__(
        self,
        registry: layers.RendererRegistryProtocol,
        *,
        render_timeout_seconds: float | None = None,
        jpeg_quality: int = 90,
        logger: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.render_timeout_seconds = render_timeout_seconds
        self.jpeg_quality = jpeg_quality
        self.logger = logger or default_logger

    @classmethod
    def from_settings(
        cls,
        registry: layers.RendererRegistryProtocol,
        settings: config.Settings,
        logger: logging.Logger | None = None,
    ) -> TileDispatcher:
        """Create a dispatcher configured from application settings."""
        return cls(
            registry,
            render_timeout_seconds=settings.render_timeout_seconds,
            jpeg_quality=settings.jpeg_quality,
            logger=logger,
        )

    async def dispatch(
        self,
        path: str,
        *,
        host: str = "",
        cancellation: CancellationToken | None = None,
    ) -> responses.Response:
        """Serve one tile request.

        Args:
            path: Request path.
            host: Host the request was addressed to, for logging.
            cancellation: Token the transport sets when the client goes
                away. Forwarded to the renderer unchanged. A fresh token is
                used when omitted.

        Returns:
            The tile response, or the error response of the first failing
            step.
        """
        started = time.perf_counter()
        token = cancellation if cancellation is not None else CancellationToken()
        self.logger.info("request received", extra={"host": host, "path": path})

        try:
            address = address_service.parse_tile_path(path)
        except errors.MalformedAddress as exc:
            self.logger.warning("invalid URL", extra={"path": path})
            return _error_response(exc)
        except errors.FieldDecodeFailure as exc:
            self.logger.warning(
                f"{exc.field} decoding failed",
                extra={"path": path, "field": exc.field, "value": exc.value},
            )
            return _error_response(exc)

        try:
            renderer = self._resolve(address, path)
            image = await self._render(renderer, address, token, path)
            body = self._encode(image, address, path)
        except errors.TileError as exc:
            return _error_response(exc)

        self.logger.info(
            "request completed",
            extra={
                **_tile_context(path, address),
                "bytes": len(body),
                "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            },
        )
        return responses.Response(
            content=body,
            media_type=address.format.content_type,
        )

    def _resolve(
        self,
        address: models.TileAddress,
        path: str,
    ) -> RendererProtocol:
        renderer = self.registry.resolve(address.layer)
        if renderer is None:
            self.logger.warning(
                "layer not found",
                extra={"path": path, "layer": address.layer},
            )
            raise errors.UnknownLayer(address.layer)
        return renderer

    async def _render(
        self,
        renderer: RendererProtocol,
        address: models.TileAddress,
        token: CancellationToken,
        path: str,
    ) -> Image.Image:
        coordinate = address.coordinate
        try:
            return await self._run_renderer(
                renderer, coordinate.x, coordinate.y, coordinate.level, token
            )
        except RenderCancelled as exc:
            self.logger.warning(
                "tile generation cancelled",
                extra=_tile_context(path, address),
            )
            raise errors.RenderFailure() from exc
        except Exception as exc:
            self.logger.error(
                "tile generation failed",
                extra={**_tile_context(path, address), "error": repr(exc)},
                exc_info=exc,
            )
            raise errors.RenderFailure() from exc

    async def _run_renderer(
        self,
        renderer: RendererProtocol,
        x: int,
        y: int,
        level: int,
        token: CancellationToken,
    ) -> Image.Image:
        """Run the renderer off the event loop, honoring the deadline.

        A renderer that misses the deadline keeps its worker thread until it
        returns; its token is cancelled and its result is dropped.
        """
        call = concurrency.run_in_threadpool(renderer.render, x, y, level, token)
        if self.render_timeout_seconds is None:
            return await call

        task = asyncio.ensure_future(call)
        done, _ = await asyncio.wait({task}, timeout=self.render_timeout_seconds)
        if not done:
            token.cancel()
            task.add_done_callback(_discard_result)
            raise TimeoutError(
                f"renderer exceeded {self.render_timeout_seconds}s deadline"
            )
        return task.result()

    def _encode(
        self,
        image: Image.Image,
        address: models.TileAddress,
        path: str,
    ) -> bytes:
        try:
            return encoding.encode_image(
                image,
                address.format,
                jpeg_quality=self.jpeg_quality,
            )
        except Exception as exc:
            self.logger.error(
                "tile encoding failed",
                extra={**_tile_context(path, address), "error": repr(exc)},
                exc_info=exc,
            )
            raise errors.EncodingFailure() from exc
