"""Renderer registry abstractions.

This package maps layer names to the renderers that draw them. The registry
is populated once at application startup from settings and is read-only
while requests are served, so concurrent lookups need no locking.

Example:
    Build the registry from settings and resolve a layer:
        >>> from tile_server.registry import layers
        >>> registry = layers.build_renderer_registry(settings)
        >>> renderer = registry.resolve("roads")
"""
