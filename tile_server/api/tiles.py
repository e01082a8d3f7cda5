"""Tile serving endpoint.

This module exposes a single catch-all route that hands every request it
receives to the tile dispatcher, whatever the HTTP method. A tile path ends
with ``/{layer}/{level}/{x}/{y}.{png|jpeg}`` behind at least one leading
segment of any shape; every other path is answered with 404 by the
dispatcher itself.

Each request carries a cancellation token that is set when the client
disconnects, so cooperative renderers can stop early.

Example:
    Request a tile:
        >>> response = client.get("/maps/roads/3/10/7.png")
        >>> response.headers["content-type"]
        'image/png'

    Use in MapLibre GL JS:
        >>> map.addSource('roads', {
        ...     type: 'raster',
        ...     tiles: ['http://api/maps/roads/{z}/{x}/{y}.png'],
        ...     tileSize: 256
        ... });
"""

import asyncio

import fastapi
from fastapi import responses

from tile_server.core import config
from tile_server.registry import layers
from tile_server.renderers import CancellationToken
from tile_server.services import dispatcher as tile_dispatcher

router = fastapi.APIRouter(tags=["tiles"])


def _get_registry(request: fastapi.Request) -> layers.RendererRegistryProtocol:
    """Resolve the renderer registry built at application startup.

    Args:
        request: Incoming request, used to reach the application state.

    Returns:
        The application's read-only renderer registry.
    """
    return request.app.state.renderer_registry  # type: ignore[no-any-return]


def _get_dispatcher(
    request: fastapi.Request,
    settings: config.Settings,
) -> tile_dispatcher.TileDispatcher:
    """Build the tile dispatcher serving from the application's registry.

    Args:
        request: Incoming request, used to reach the registry.
        settings: Application settings.

    Returns:
        TileDispatcher serving from the registry.
    """
    return tile_dispatcher.TileDispatcher.from_settings(
        _get_registry(request), settings
    )


async def _cancel_on_disconnect(
    request: fastapi.Request,
    token: CancellationToken,
    interval: float,
) -> None:
    """Poll the connection and cancel the token once the client is gone."""
    while not token.cancelled:
        if await request.is_disconnected():
            token.cancel()
            return
        await asyncio.sleep(interval)


async def serve_tile(request: fastapi.Request) -> responses.Response:
    """Render the tile addressed by the request path.

    The full request path is decoded, not just the part matched by the
    route, so any leading segments are accepted and ignored.

    Args:
        request: Incoming request, whatever its method.

    Returns:
        PNG or JPEG tile on success, otherwise the error response chosen by
        the dispatcher (400, 404 or 500).
    """
    settings = config.get_settings()
    dispatcher = _get_dispatcher(request, settings)
    token = CancellationToken()
    watcher = asyncio.create_task(
        _cancel_on_disconnect(
            request, token, settings.disconnect_poll_interval_seconds
        )
    )
    try:
        return await dispatcher.dispatch(
            request.url.path,
            host=request.headers.get("host", ""),
            cancellation=token,
        )
    finally:
        watcher.cancel()


# A plain route carries no method filter, so every method reaches the
# dispatcher, including TRACE and extension methods.
router.add_route("/{tile_path:path}", serve_tile, include_in_schema=False)
