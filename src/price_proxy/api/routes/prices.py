"""Token price endpoints: single lookup (GET) and batch lookup (POST).

Price-level failures are reported in the body (price 0, source "none") with
HTTP 200; only malformed requests get a 400 and only unexpected exceptions
a 500.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from price_proxy.cache import is_token_address
from price_proxy.models import PriceQuote
from price_proxy.service import PriceService

log = structlog.get_logger(__name__)

router = APIRouter()

ALL_SOURCES_FAILED = "All sources failed"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


def _quote_to_dict(quote: PriceQuote) -> dict[str, Any]:
    return {"price": float(quote.price), "source": quote.source.value}


def _valid_token_list(tokens: Any) -> bool:
    if not isinstance(tokens, list) or not tokens:
        return False
    return all(isinstance(t, str) and is_token_address(t) for t in tokens)


@router.get("/prices")
async def get_price(request: Request) -> JSONResponse:
    """Return the USD price of a single token: GET /api/prices?token=0x..."""
    token = request.query_params.get("token", "").strip()
    if not token:
        return _error("Missing token address", 400)
    if not is_token_address(token):
        return _error("Invalid token address", 400)

    service: PriceService = request.app.state.price_service
    try:
        quote = await service.get_price(token)
    except Exception:
        log.exception("price_api_error", token=token)
        return _error("Internal server error", 500)

    content: dict[str, Any] = {**_quote_to_dict(quote), "cached": quote.cached}
    if not quote.found:
        content["error"] = ALL_SOURCES_FAILED
    return JSONResponse(content=content)


@router.post("/prices")
async def get_prices(request: Request) -> JSONResponse:
    """Return USD prices for many tokens.

    Expects JSON body: {"tokens": ["0x...", "0x..."]}.

    Returns:
        JSON {"prices": {address: {"price": float, "source": str}}}.
    """
    try:
        body = await request.json()
    except Exception:
        log.exception("batch_price_api_error", reason="unreadable_body")
        return _error("Internal server error", 500)

    tokens = body.get("tokens") if isinstance(body, dict) else None
    if not _valid_token_list(tokens):
        return _error("Invalid token addresses", 400)

    service: PriceService = request.app.state.price_service
    try:
        quotes = await service.get_prices(tokens)
    except Exception:
        log.exception("batch_price_api_error", tokens=len(tokens))
        return _error("Internal server error", 500)

    return JSONResponse(
        content={"prices": {addr: _quote_to_dict(q) for addr, q in quotes.items()}}
    )
