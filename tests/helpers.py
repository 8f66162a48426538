"""Test constants and mock builders shared across test modules."""

from decimal import Decimal
from unittest.mock import AsyncMock

from price_proxy.exceptions import SourceUnavailableError

TOKEN_A = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
TOKEN_B = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
TOKEN_C = "0xcccccccccccccccccccccccccccccccccccccccc"


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_source(
    name: str,
    prices: dict[str, Decimal] | None = None,
    supports_batch: bool = True,
    fail: bool = False,
) -> AsyncMock:
    """Mock PriceSource returning a fixed subset of ``prices`` per call."""
    source = AsyncMock()
    source.name = name
    source.supports_batch = supports_batch
    table = prices or {}

    async def fetch_prices(addresses: list[str]) -> dict[str, Decimal]:
        if fail:
            raise SourceUnavailableError(name, "HTTP 503")
        return {a: table[a] for a in addresses if a in table}

    source.fetch_prices = AsyncMock(side_effect=fetch_prices)
    return source

