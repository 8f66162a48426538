"""Price lookups over an ordered chain of upstream sources with TTL caching.

The first source in the chain is the primary; every later source is a
fallback consulted only for addresses the earlier ones could not price.
Source failures never escape this module: an address no source can price
resolves to the zero-price sentinel (source NONE) and is not cached, so the
next request retries upstream immediately.
"""

from collections.abc import Sequence
from decimal import Decimal

from price_proxy.cache import PriceCache, normalize
from price_proxy.exceptions import InvalidRequestError, SourceUnavailableError
from price_proxy.logging import get_logger
from price_proxy.models import PriceQuote, PriceSourceKind
from price_proxy.sources.base import PriceSource

logger = get_logger(__name__)


class PriceService:
    """Cached, multi-source USD price lookups.

    Args:
        cache: Price cache shared by all requests handled by this service.
        sources: Price sources in priority order (primary first).
    """

    def __init__(self, cache: PriceCache, sources: Sequence[PriceSource]) -> None:
        if not sources:
            raise ValueError("PriceService requires at least one price source")
        self._cache = cache
        self._sources = list(sources)

    @property
    def cache(self) -> PriceCache:
        return self._cache

    @property
    def sources(self) -> list[PriceSource]:
        return list(self._sources)

    @staticmethod
    def _kind_for(index: int) -> PriceSourceKind:
        return PriceSourceKind.PRIMARY if index == 0 else PriceSourceKind.FALLBACK

    async def _fetch_from(
        self, source: PriceSource, addresses: list[str]
    ) -> dict[str, Decimal]:
        """Query one source, absorbing its failure as an empty result."""
        try:
            return await source.fetch_prices(addresses)
        except SourceUnavailableError as e:
            logger.warning(
                "price_source_failed",
                source=source.name,
                batch=source.supports_batch,
                addresses=len(addresses),
                error=e.reason,
            )
            return {}

    async def get_price(self, address: str) -> PriceQuote:
        """Return the USD price of one token.

        Raises:
            InvalidRequestError: If the address is empty.
        """
        key = normalize(address or "")
        if not key:
            raise InvalidRequestError("Missing token address")

        entry = self._cache.get(key)
        if entry is not None:
            logger.debug("price_cache_hit", address=key, source=entry.source.value)
            return PriceQuote.from_entry(key, entry, cached=True)

        for index, source in enumerate(self._sources):
            prices = await self._fetch_from(source, [key])
            price = prices.get(key)
            if price is None:
                continue
            entry = self._cache.set(key, price, self._kind_for(index), source.name)
            logger.info(
                "price_resolved",
                address=key,
                price=str(price),
                source=entry.source.value,
                provider=source.name,
            )
            return PriceQuote.from_entry(key, entry, cached=False)

        logger.warning("price_unavailable", address=key)
        return PriceQuote.unavailable(key)

    async def get_prices(self, addresses: Sequence[str]) -> dict[str, PriceQuote]:
        """Return USD prices for many tokens, keyed by lowercase address.

        Every requested address appears exactly once in the result; addresses
        no source can price map to the zero-price sentinel.

        Raises:
            InvalidRequestError: If no addresses are given.
        """
        if not addresses:
            raise InvalidRequestError("Invalid token addresses")

        hits, pending = self._cache.partition(addresses)

        results: dict[str, PriceQuote] = {
            address: PriceQuote.from_entry(address, entry, cached=True)
            for address, entry in hits.items()
        }

        for index, source in enumerate(self._sources):
            if not pending:
                break
            kind = self._kind_for(index)
            prices = await self._fetch_from(source, pending)
            for address in pending:
                price = prices.get(address)
                if price is None:
                    continue
                entry = self._cache.set(address, price, kind, source.name)
                results[address] = PriceQuote.from_entry(address, entry, cached=False)
            pending = [a for a in pending if a not in results]

        for address in pending:
            results[address] = PriceQuote.unavailable(address)

        logger.info(
            "batch_prices_resolved",
            requested=len(results),
            cached=len(hits),
            unavailable=len(pending),
        )
        return results

    async def close(self) -> None:
        """Close every source's HTTP client."""
        for source in self._sources:
            await source.close()
