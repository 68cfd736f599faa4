"""Helper for running the SplitBasket ASGI application."""

from __future__ import annotations

import os

import uvicorn


def serve(host: str = "127.0.0.1", port: int = 8000, reload_enabled: bool = False) -> None:
    """Run the API with uvicorn."""

    uvicorn.run(
        "splitbasket.server.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


def main() -> None:
    """Entry point for the ``splitbasket-server`` script."""

    serve(
        host=os.environ.get("SPLITBASKET_SERVER_HOST", "127.0.0.1"),
        port=int(os.environ.get("SPLITBASKET_SERVER_PORT", "8000")),
        reload_enabled=os.environ.get("RELOAD") == "1",
    )


if __name__ == "__main__":
    main()
