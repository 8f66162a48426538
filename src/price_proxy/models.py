"""Shared data models for the price proxy.

All monetary values use Decimal internally; floats only appear at the
JSON boundary.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class PriceSourceKind(str, Enum):
    """Where a price came from, as reported to callers."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    NONE = "none"


@dataclass
class PriceCacheEntry:
    """A cached USD price snapshot for one token address."""

    price: Decimal
    source: PriceSourceKind
    provider: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class PriceQuote:
    """Result of a price lookup.

    price == 0 with source NONE is the "no price found" sentinel.
    """

    address: str
    price: Decimal = Decimal("0")
    source: PriceSourceKind = PriceSourceKind.NONE
    cached: bool = False
    provider: str | None = None

    @property
    def found(self) -> bool:
        return self.source is not PriceSourceKind.NONE

    @classmethod
    def unavailable(cls, address: str) -> "PriceQuote":
        return cls(address=address)

    @classmethod
    def from_entry(cls, address: str, entry: PriceCacheEntry, cached: bool) -> "PriceQuote":
        return cls(
            address=address,
            price=entry.price,
            source=entry.source,
            cached=cached,
            provider=entry.provider,
        )


@dataclass
class TokenPrice:
    """Client-side view of a token price returned by the proxy."""

    price: Decimal
    cached: bool
    source: str
    error: str | None = None


@dataclass
class TokenHolding:
    """A raw token balance held by a wallet."""

    address: str
    symbol: str
    amount: str  # integer base units, as returned on-chain
    decimals: int


@dataclass
class TokenValue:
    """A token holding priced in USD."""

    address: str
    symbol: str
    amount: str
    decimals: int
    price: Decimal
    value: Decimal
    source: str


@dataclass
class WalletValue:
    """Total USD value of a wallet with per-token breakdown."""

    total_value: Decimal = Decimal("0")
    tokens: list[TokenValue] = field(default_factory=list)
