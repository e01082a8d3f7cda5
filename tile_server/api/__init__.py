"""API router subpackage for the tile server.

Each module exposes its own APIRouter for composition in the application's
main FastAPI instance.

Submodules:
    - tiles: Catch-all endpoint serving rendered map tiles for any HTTP
      method.
"""
