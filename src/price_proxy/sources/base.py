"""Abstract price source interface.

The price service depends only on this interface; provider-specific URL
shapes, headers and response parsing stay in the concrete sources.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any


def parse_price(value: Any) -> Decimal | None:
    """Convert an upstream price field to a positive Decimal, or None.

    Zero, negative, missing and non-numeric values all mean "no price".
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


class PriceSource(ABC):
    """Abstract base class for upstream USD price providers."""

    name: str = "unknown"
    supports_batch: bool = False

    @abstractmethod
    async def fetch_prices(self, addresses: list[str]) -> dict[str, Decimal]:
        """Fetch USD prices for lowercase token addresses.

        Returns positive prices keyed by lowercase address; addresses without
        a usable price are omitted.

        Raises:
            SourceUnavailableError: On any transport, HTTP or parsing failure.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
        ...
