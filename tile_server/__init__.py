"""Tile server package for on-demand raster map tiles.

This package serves map tiles addressed as ``/.../{layer}/{z}/{x}/{y}.{ext}``
by handing each request to the renderer registered for its layer and
returning the rendered image as PNG or JPEG.

- Decodes tile addresses from request paths with a fixed grammar
- Resolves renderers by exact layer name from a registry built at startup
- Renders off the event loop, forwarding client disconnects as cancellation
- Maps every failure to a single HTTP response without leaking internals
- Configured from environment variables, logging as JSON or text lines

See module sub-docstrings for details on each stage of the pipeline.
"""
