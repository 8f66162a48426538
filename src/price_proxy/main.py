"""Entry point for the price proxy.

Wires settings, logging, the price cache and the upstream sources into a
PriceService, then serves the FastAPI app with uvicorn. Source HTTP clients
are closed by the lifespan on shutdown.
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from price_proxy.api.app import create_app
from price_proxy.cache import PriceCache
from price_proxy.config import AppSettings
from price_proxy.logging import get_logger, setup_logging
from price_proxy.service import PriceService
from price_proxy.sources.coingecko import CoinGeckoSource
from price_proxy.sources.moralis import MoralisSource


def build_service(settings: AppSettings) -> PriceService:
    """Build the PriceService from settings.

    Source order is priority order: CoinGecko (batch) first, then Moralis.
    """
    logger = get_logger("price_proxy.main")

    if not settings.coingecko.api_key.get_secret_value():
        logger.warning(
            "no_coingecko_api_key",
            note="Requests go to the keyless public tier and may be rate limited.",
        )
    if not settings.moralis.api_key.get_secret_value():
        logger.warning(
            "no_moralis_api_key",
            note="Fallback lookups will fail until MORALIS_API_KEY is set.",
        )

    cache = PriceCache(ttl_seconds=settings.cache.ttl_seconds)
    sources = [
        CoinGeckoSource(settings.coingecko),
        MoralisSource(settings.moralis),
    ]
    return PriceService(cache, sources)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close upstream HTTP clients when the server shuts down."""
    logger = get_logger("price_proxy.main")
    service: PriceService = app.state.price_service

    logger.info(
        "price_proxy_started",
        sources=[s.name for s in service.sources],
        ttl_seconds=service.cache.ttl_seconds,
    )

    yield

    await service.close()
    logger.info("price_proxy_stopped")


async def run() -> None:
    """Load settings, build components and serve until interrupted."""
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("price_proxy.main")

    service = build_service(settings)
    app = create_app(service, lifespan=lifespan)

    logger.info(
        "starting_price_proxy",
        host=settings.server.host,
        port=settings.server.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
