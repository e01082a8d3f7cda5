"""FastAPI application entrypoint and configuration.

This module provides the main FastAPI application factory that sets up
logging, CORS middleware, the renderer registry and the tile route, and
exposes a health check endpoint for monitoring.

Example:
    The application can be run with the console script:
        $ tile-server

    Or with uvicorn directly:
        $ uvicorn tile_server.main:app --reload

    Or imported and used programmatically:
        >>> from tile_server.main import app
        >>> # Use app in ASGI server
"""

import contextlib
import importlib.metadata
import logging
import platform
from collections.abc import AsyncIterator

import fastapi
import uvicorn
from fastapi.middleware import cors

from tile_server.api import tiles
from tile_server.core import config, logging_setup
from tile_server.registry import layers

DISTRIBUTION_NAME = "tile-server"

logger = logging.getLogger(__name__)


def _package_version() -> str:
    """Installed version of the distribution, or "unknown" in a bare checkout."""
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


@contextlib.asynccontextmanager
async def _lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
    """Log process lifetime events around serving.

    Args:
        app: The application being served.
    """
    logger.info(
        "started",
        extra={"layers": list(app.state.renderer_registry.layers())},
    )
    logger.info(
        "build info",
        extra={
            "version": _package_version(),
            "python_version": platform.python_version(),
        },
    )
    yield
    logger.info("stopped")


def create_app(
    registry: layers.RendererRegistryProtocol | None = None,
) -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Configures logging, populates the renderer registry from settings unless
    one is given, adds the health check endpoint and CORS middleware, and
    mounts the catch-all tile route last so it never shadows other routes.

    Args:
        registry: Renderer registry to serve from. Built from settings when
            omitted.

    Returns:
        Configured FastAPI application instance ready for ASGI server.

    Raises:
        ValueError: If the logging settings or the layer mapping are invalid.

    Example:
        Serve a custom renderer under the "roads" layer:
            >>> registry = layers.InMemoryRendererRegistry({"roads": MyRenderer()})
            >>> app = create_app(registry)
    """
    settings = config.get_settings()
    logging_setup.setup_logging(settings.log_format, settings.log_level)

    app = fastapi.FastAPI(title="Tile Server", version="0.1.0", lifespan=_lifespan)
    app.state.renderer_registry = (
        registry
        if registry is not None
        else layers.build_renderer_registry(settings)
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    app.include_router(tiles.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


def run() -> None:
    """Serve the application with uvicorn until interrupted.

    uvicorn handles SIGINT/SIGTERM and drains in-flight requests before the
    lifespan logs "stopped". Its own logging configuration is disabled so
    that log lines keep the application's format.
    """
    settings = config.get_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


app = create_app()
