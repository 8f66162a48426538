"""Upstream price sources -- CoinGecko (primary) and Moralis (fallback) via httpx."""

from price_proxy.sources.base import PriceSource, parse_price
from price_proxy.sources.coingecko import CoinGeckoSource
from price_proxy.sources.moralis import MoralisSource

__all__ = ["CoinGeckoSource", "MoralisSource", "PriceSource", "parse_price"]
