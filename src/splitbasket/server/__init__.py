"""ASGI application factory and dependencies for the SplitBasket server."""

from splitbasket.server.app import app, create_app

__all__ = ["app", "create_app"]
