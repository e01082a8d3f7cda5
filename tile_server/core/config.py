"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the bind address, the layer-to-renderer mapping populated into the renderer
registry at startup, rendering and encoding knobs, logging output and CORS
origins.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from tile_server.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.port)

    Environment variables can override defaults:
        >>> PORT=9000
        >>> LAYERS='{"roads": "debug", "terrain": "debug"}'
        >>> RENDER_TIMEOUT_SECONDS=5
        >>> LOG_FORMAT=text
"""

import functools
from typing import Literal

import pydantic
import pydantic_settings

LogFormat = Literal["json", "text"]


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.
    Complex values such as ``layers`` and ``allow_origins`` are read as JSON.

    Attributes:
        host: Interface the HTTP server binds to.
        port: TCP port the HTTP server listens on.
        layers: Mapping of layer name to renderer kind. Every entry becomes
            one registry entry at startup.
        tile_size: Edge length in pixels of tiles drawn by the debug renderer.
        render_timeout_seconds: Optional per-request render deadline. None
            (the default) waits for the renderer however long it takes.
        disconnect_poll_interval_seconds: How often an in-flight request
            checks whether its client went away.
        jpeg_quality: Quality passed to the JPEG encoder.
        log_format: Log line format, "json" or "text".
        log_level: Name of the minimum log level ("DEBUG", "INFO", ...).
        allow_origins: List of allowed CORS origins (["*"] allows all).

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     port=9000,
            ...     layers={"roads": "debug"},
            ...     render_timeout_seconds=2.5,
            ... )

        Or use environment variables:
            >>> export LAYERS='{"roads": "debug"}'
            >>> export LOG_LEVEL=DEBUG
            >>> settings = Settings()  # Loads from environment
    """

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    layers: dict[str, str] = {"debug": "debug"}
    tile_size: int = pydantic.Field(default=256, gt=0)
    render_timeout_seconds: float | None = pydantic.Field(default=None, gt=0)
    disconnect_poll_interval_seconds: float = pydantic.Field(default=0.25, gt=0)
    jpeg_quality: int = pydantic.Field(default=90, ge=1, le=95)
    log_format: LogFormat = "json"
    log_level: str = "INFO"
    allow_origins: list[str] = ["*"]

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @pydantic.field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        """Upper-case the level name so "debug" and "DEBUG" are equivalent."""
        return value.upper()


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        The settings are cached, so multiple calls return the same instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2  # Same instance
    """
    return Settings()
