"""FastAPI application factory for the price proxy."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from price_proxy.api.routes import health, prices
from price_proxy.service import PriceService


def create_app(service: PriceService | None = None, lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        service: PriceService used by the route handlers. May be omitted when
                 the lifespan installs one on app.state before serving.
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        Configured FastAPI application with price and health routes.
    """
    app = FastAPI(
        title="Vendyz Price Proxy",
        lifespan=lifespan,
    )

    if service is not None:
        app.state.price_service = service

    app.include_router(prices.router, prefix="/api")
    app.include_router(health.router)

    return app
