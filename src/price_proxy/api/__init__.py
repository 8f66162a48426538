"""HTTP surface -- FastAPI app factory and /api/prices routes."""

from price_proxy.api.app import create_app

__all__ = ["create_app"]
