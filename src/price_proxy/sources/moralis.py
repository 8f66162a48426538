"""Moralis price source (fallback, one address per request).

The ERC20 price endpoint has no batch mode, so multi-address lookups fan
out into concurrent single requests.
"""

import asyncio
from decimal import Decimal
from urllib.parse import quote

import httpx

from price_proxy.config import MoralisSettings
from price_proxy.exceptions import SourceUnavailableError
from price_proxy.logging import get_logger
from price_proxy.sources.base import PriceSource, parse_price

logger = get_logger(__name__)


class MoralisSource(PriceSource):
    """Single-token price lookups against the Moralis deep-index API."""

    name = "moralis"
    supports_batch = False

    def __init__(
        self,
        settings: MoralisSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._headers = {
            "accept": "application/json",
            "X-API-Key": settings.api_key.get_secret_value(),
        }
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)

    async def fetch_price(self, address: str) -> Decimal | None:
        """Fetch the USD price of one token.

        Returns None when the upstream answers but has no usable price.

        Raises:
            SourceUnavailableError: On transport errors, non-2xx or a non-JSON body.
        """
        url = f"{self._settings.base_url}/erc20/{quote(address, safe='')}/price"
        try:
            response = await self._client.get(
                url, params={"chain": self._settings.chain}, headers=self._headers
            )
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

        return parse_price(data.get("usdPrice")) or parse_price(
            data.get("usdPriceFormatted")
        )

    async def fetch_prices(self, addresses: list[str]) -> dict[str, Decimal]:
        if not addresses:
            return {}

        lowered = [a.lower() for a in addresses]
        results = await asyncio.gather(
            *(self.fetch_price(a) for a in lowered), return_exceptions=True
        )

        prices: dict[str, Decimal] = {}
        failures: list[SourceUnavailableError] = []
        for address, result in zip(lowered, results):
            if isinstance(result, SourceUnavailableError):
                logger.warning(
                    "moralis_price_failed", address=address, error=result.reason
                )
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                prices[address] = result

        if failures and len(failures) == len(lowered):
            raise SourceUnavailableError(
                self.name, f"all {len(lowered)} requests failed ({failures[0].reason})"
            )
        return prices

    async def close(self) -> None:
        await self._client.aclose()
