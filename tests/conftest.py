"""Shared test fixtures for the price proxy."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from price_proxy.cache import PriceCache
from price_proxy.config import AppSettings, CoinGeckoSettings, MoralisSettings
from price_proxy.service import PriceService
from tests.helpers import TOKEN_A, TOKEN_B, FakeClock, make_source


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> PriceCache:
    """Fresh 5-minute cache driven by the fake clock."""
    return PriceCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def primary() -> AsyncMock:
    return make_source("coingecko", {TOKEN_A: Decimal("1.25")})


@pytest.fixture
def fallback() -> AsyncMock:
    return make_source(
        "moralis",
        {TOKEN_A: Decimal("1.30"), TOKEN_B: Decimal("0.5")},
        supports_batch=False,
    )


@pytest.fixture
def service(cache: PriceCache, primary: AsyncMock, fallback: AsyncMock) -> PriceService:
    return PriceService(cache, [primary, fallback])


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults and dummy API keys."""
    return AppSettings(
        log_level="DEBUG",
        coingecko=CoinGeckoSettings(
            api_key="test-cg-key",  # type: ignore[arg-type]
            base_url="https://cg.test/api/v3",
        ),
        moralis=MoralisSettings(
            api_key="test-moralis-key",  # type: ignore[arg-type]
            base_url="https://moralis.test/api/v2.2",
        ),
    )
