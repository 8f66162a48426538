"""Liveness endpoint."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    service = request.app.state.price_service
    return JSONResponse(content={"status": "ok", "cached_tokens": len(service.cache)})
