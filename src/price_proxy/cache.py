"""In-memory TTL cache for token prices.

Owned by a PriceService instance rather than module state, so its lifetime
is explicit and tests can build a fresh cache with a fake clock. Entries are
never deleted during normal operation; expired entries are treated as absent
on read and overwritten by the next successful fetch.
"""

import re
import time
from collections.abc import Callable, Iterable
from decimal import Decimal

from price_proxy.logging import get_logger
from price_proxy.models import PriceCacheEntry, PriceSourceKind

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0

# EVM contract address: 0x followed by 40 hex digits
TOKEN_ADDRESS_RE = re.compile(r"0[xX][0-9a-fA-F]{40}")


def normalize(address: str) -> str:
    """Canonical cache key for a token address (addresses are case-insensitive)."""
    return address.strip().lower()


def is_token_address(address: str) -> bool:
    """True if the value looks like an EVM token contract address."""
    return bool(TOKEN_ADDRESS_RE.fullmatch(address.strip()))


class PriceCache:
    """Price cache keyed by lowercase token address.

    Concurrent writers for the same address are last-write-wins; entries
    are idempotent price snapshots so no lock is taken.

    Args:
        ttl_seconds: Maximum age of an entry that may still be served.
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: dict[str, PriceCacheEntry] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def _is_valid(self, entry: PriceCacheEntry) -> bool:
        return self._clock() - entry.timestamp < self._ttl

    def get(self, address: str) -> PriceCacheEntry | None:
        """Return the entry for an address, or None if missing or expired."""
        entry = self._entries.get(normalize(address))
        if entry is None or not self._is_valid(entry):
            return None
        return entry

    def set(
        self,
        address: str,
        price: Decimal,
        source: PriceSourceKind,
        provider: str,
    ) -> PriceCacheEntry:
        """Write a fresh entry stamped with the current time."""
        entry = PriceCacheEntry(
            price=price,
            source=source,
            provider=provider,
            timestamp=self._clock(),
        )
        self._entries[normalize(address)] = entry
        return entry

    def partition(
        self, addresses: Iterable[str]
    ) -> tuple[dict[str, PriceCacheEntry], list[str]]:
        """Split addresses into valid cache hits and addresses needing a fetch.

        Addresses are normalized; duplicates collapse to their first occurrence.
        """
        hits: dict[str, PriceCacheEntry] = {}
        misses: list[str] = []
        seen: set[str] = set()
        for raw in addresses:
            address = normalize(raw)
            if address in seen:
                continue
            seen.add(address)
            entry = self.get(address)
            if entry is not None:
                hits[address] = entry
            else:
                misses.append(address)
        return hits, misses

    def clear(self) -> None:
        """Drop every entry."""
        logger.info("price_cache_cleared", entries=len(self._entries))
        self._entries.clear()
