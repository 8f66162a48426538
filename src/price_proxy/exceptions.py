"""Custom exceptions for the price proxy.

Upstream failures are raised by the price sources and absorbed by
PriceService; only request validation errors cross the HTTP boundary.
"""


class PriceProxyError(Exception):
    """Base exception for all price proxy errors."""


class InvalidRequestError(PriceProxyError):
    """Raised when caller input is structurally invalid (missing/empty addresses)."""


class SourceUnavailableError(PriceProxyError):
    """Raised when an upstream price source fails (network, HTTP status, bad body)."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
