"""Allow ``python -m tile_server`` to start the server."""

from tile_server import main

if __name__ == "__main__":
    main.run()
