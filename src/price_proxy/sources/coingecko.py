"""CoinGecko price source (primary, batch-capable).

Uses the simple/token_price endpoint, which accepts a comma-joined list of
contract addresses and returns {address: {"usd": price}}.
"""

from decimal import Decimal

import httpx

from price_proxy.config import CoinGeckoSettings
from price_proxy.exceptions import SourceUnavailableError
from price_proxy.logging import get_logger
from price_proxy.sources.base import PriceSource, parse_price

logger = get_logger(__name__)


class CoinGeckoSource(PriceSource):
    """Batch price lookups against the CoinGecko demo/public API."""

    name = "coingecko"
    supports_batch = True

    def __init__(
        self,
        settings: CoinGeckoSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        headers = {"accept": "application/json"}
        api_key = settings.api_key.get_secret_value()
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._headers = headers
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def fetch_prices(self, addresses: list[str]) -> dict[str, Decimal]:
        if not addresses:
            return {}

        params = {
            "contract_addresses": ",".join(a.lower() for a in addresses),
            "vs_currencies": "usd",
        }
        url = f"{self._settings.base_url}/simple/token_price/{self._settings.platform}"

        try:
            response = await self._client.get(url, params=params, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(
                self.name, f"HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailableError(self.name, str(e) or type(e).__name__) from e

        if not isinstance(data, dict):
            raise SourceUnavailableError(self.name, "unexpected response shape")

        prices: dict[str, Decimal] = {}
        for address, price_data in data.items():
            if not isinstance(price_data, dict):
                continue
            price = parse_price(price_data.get("usd"))
            if price is not None:
                prices[address.lower()] = price

        logger.debug(
            "coingecko_prices_fetched",
            requested=len(addresses),
            returned=len(prices),
        )
        return prices

    async def close(self) -> None:
        await self._client.aclose()
