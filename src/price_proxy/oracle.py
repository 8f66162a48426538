"""Client for the price proxy, used to show USD values for wallet balances.

Keeps its own short-lived cache of positive prices so repeated renders do
not hit the proxy, and never raises: lookup failures come back as a zero
price with an error description.
"""

import time
from collections.abc import Callable, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import httpx

from price_proxy.cache import DEFAULT_TTL_SECONDS, normalize
from price_proxy.logging import get_logger
from price_proxy.models import TokenHolding, TokenPrice, TokenValue, WalletValue
from price_proxy.sources.base import parse_price

logger = get_logger(__name__)

CENT = Decimal("0.01")


def format_usd(value: Decimal | float | int) -> str:
    """Format a USD amount for display with precision scaled to its size.

    >>> format_usd(Decimal("0"))
    '$0.00'
    >>> format_usd(Decimal("0.004"))
    '<$0.01'
    >>> format_usd(Decimal("0.1234"))
    '$0.123'
    >>> format_usd(Decimal("12.345"))
    '$12.35'
    >>> format_usd(Decimal("1234.5"))
    '$1235'
    """
    amount = Decimal(str(value))
    if amount == 0:
        return "$0.00"
    if amount < CENT:
        return "<$0.01"
    if amount < 1:
        places = Decimal("0.001")
    elif amount < 100:
        places = CENT
    else:
        places = Decimal("1")
    return f"${amount.quantize(places, rounding=ROUND_HALF_UP)}"


def _token_amount(holding: TokenHolding) -> Decimal:
    """Whole-token amount of a holding; unparseable balances count as zero."""
    try:
        amount = Decimal(holding.amount or "0")
    except (InvalidOperation, TypeError, ValueError):
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning(
            "token_amount_invalid", address=holding.address, amount=str(holding.amount)
        )
        return Decimal("0")
    return amount.scaleb(-holding.decimals)


class PriceOracleClient:
    """Fetches token prices from the proxy's /api/prices endpoints.

    Args:
        base_url: Root URL of the price proxy (e.g. "http://localhost:8080").
        ttl_seconds: How long a fetched positive price is reused client-side.
        client: Optional pre-built httpx client (tests inject a mock transport).
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        base_url: str,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=15.0)
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: dict[str, tuple[Decimal, float]] = {}

    def _cached_price(self, address: str) -> Decimal | None:
        entry = self._cache.get(address)
        if entry is None:
            return None
        price, fetched_at = entry
        if self._clock() - fetched_at >= self._ttl:
            return None
        return price

    def _remember(self, address: str, price: Decimal) -> None:
        if price > 0:
            self._cache[address] = (price, self._clock())

    async def get_token_price(self, address: str) -> TokenPrice:
        """Return the price of one token, from the local cache or the proxy."""
        key = normalize(address)
        cached = self._cached_price(key)
        if cached is not None:
            return TokenPrice(price=cached, cached=True, source="cache")

        try:
            response = await self._client.get("/api/prices", params={"token": address})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("token_price_fetch_failed", address=key, error=str(e))
            return TokenPrice(
                price=Decimal("0"), cached=False, source="error", error=str(e)
            )

        if not isinstance(data, dict):
            logger.warning("token_price_malformed_response", address=key)
            return TokenPrice(
                price=Decimal("0"),
                cached=False,
                source="error",
                error="Malformed price response",
            )

        price = parse_price(data.get("price")) or Decimal("0")
        self._remember(key, price)
        return TokenPrice(
            price=price,
            cached=False,
            source=data.get("source") or "unknown",
            error=data.get("error"),
        )

    async def get_token_prices(self, addresses: Sequence[str]) -> dict[str, TokenPrice]:
        """Return prices for many tokens keyed by lowercase address.

        Addresses the proxy could not be asked about (request failure) are
        absent from the result.
        """
        results: dict[str, TokenPrice] = {}
        uncached: list[str] = []

        for address in addresses:
            key = normalize(address)
            cached = self._cached_price(key)
            if cached is not None:
                results[key] = TokenPrice(price=cached, cached=True, source="cache")
            elif key not in uncached:
                uncached.append(key)

        if not uncached:
            return results

        try:
            response = await self._client.post("/api/prices", json={"tokens": uncached})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "token_prices_fetch_failed", addresses=len(uncached), error=str(e)
            )
            return results

        prices = data.get("prices") if isinstance(data, dict) else None
        if not isinstance(prices, dict):
            logger.warning("token_prices_malformed_response", addresses=len(uncached))
            return results

        for address, price_data in prices.items():
            if not isinstance(address, str) or not isinstance(price_data, dict):
                logger.warning("token_price_entry_malformed", address=str(address))
                continue
            key = normalize(address)
            price = parse_price(price_data.get("price")) or Decimal("0")
            self._remember(key, price)
            results[key] = TokenPrice(
                price=price,
                cached=False,
                source=price_data.get("source") or "unknown",
            )

        return results

    async def calculate_wallet_value(
        self, holdings: Sequence[TokenHolding]
    ) -> WalletValue:
        """Price every holding and sum the wallet's USD value."""
        prices = await self.get_token_prices([h.address for h in holdings])

        wallet = WalletValue()
        for holding in holdings:
            price_data = prices.get(normalize(holding.address))
            price = price_data.price if price_data else Decimal("0")
            amount = _token_amount(holding)
            value = amount * price
            wallet.total_value += value
            wallet.tokens.append(
                TokenValue(
                    address=holding.address,
                    symbol=holding.symbol,
                    amount=holding.amount,
                    decimals=holding.decimals,
                    price=price,
                    value=value,
                    source=price_data.source if price_data else "none",
                )
            )

        logger.debug(
            "wallet_value_calculated",
            tokens=len(wallet.tokens),
            total_value=str(wallet.total_value),
        )
        return wallet

    async def close(self) -> None:
        await self._client.aclose()
