"""Layer name to renderer lookup."""

from __future__ import annotations

import types
from typing import TYPE_CHECKING, Protocol

from tile_server.renderers import debug
from tile_server.services import address

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from tile_server.core import config
    from tile_server.renderers import RendererProtocol


class RendererRegistryProtocol(Protocol):
    """Protocol interface for resolving the renderer of a layer."""

    def resolve(self, layer_name: str) -> RendererProtocol | None: ...

    def layers(self) -> Iterable[str]: ...


class InMemoryRendererRegistry(RendererRegistryProtocol):
    """Immutable registry backed by a read-only mapping.

    The mapping is copied on construction, so later changes to the caller's
    dict do not leak into a registry that is already serving requests.
    """

    def __init__(self, renderers: Mapping[str, RendererProtocol]) -> None:
        """Initialize the registry.

        Args:
            renderers: Layer name to renderer mapping.
        """
        self._renderers: Mapping[str, RendererProtocol] = types.MappingProxyType(
            dict(renderers)
        )

    def resolve(self, layer_name: str) -> RendererProtocol | None:
        """Look up a renderer by exact layer name.

        Args:
            layer_name: Layer name decoded from the request path.

        Returns:
            The layer's renderer, or None if the layer is not registered.
        """
        return self._renderers.get(layer_name)

    def layers(self) -> Iterable[str]:
        """Get all registered layer names.

        Returns:
            Iterable of layer names, in registration order.
        """
        return self._renderers.keys()


def _debug_renderer(settings: config.Settings) -> RendererProtocol:
    return debug.DebugRenderer(tile_size=settings.tile_size)


RENDERER_FACTORIES: Mapping[str, Callable[[config.Settings], RendererProtocol]] = (
    types.MappingProxyType({"debug": _debug_renderer})
)


def build_renderer_registry(settings: config.Settings) -> InMemoryRendererRegistry:
    """Factory function to create the registry served by the application.

    Each configured layer gets its own renderer instance built from the
    factory registered for its kind.

    Args:
        settings: Application settings holding the layer mapping.

    Returns:
        InMemoryRendererRegistry with one entry per configured layer.

    Raises:
        ValueError: If a layer name cannot appear in a tile path, or a layer
            names a renderer kind that does not exist.
    """
    renderers: dict[str, RendererProtocol] = {}
    for layer_name, kind in settings.layers.items():
        if address.LAYER_NAME_PATTERN.fullmatch(layer_name) is None:
            raise ValueError(
                f"layer name {layer_name!r} is not addressable; "
                "use only ASCII letters, digits and underscores"
            )
        factory = RENDERER_FACTORIES.get(kind)
        if factory is None:
            raise ValueError(
                f"layer {layer_name!r} uses unknown renderer kind {kind!r}; "
                f"expected one of {sorted(RENDERER_FACTORIES)}"
            )
        renderers[layer_name] = factory(settings)
    return InMemoryRendererRegistry(renderers)
