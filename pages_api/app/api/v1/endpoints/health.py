"""
Health and diagnostic endpoints for API v1.

``/health`` reports whether the process is up and the store answers.
``/test`` and ``/data`` are echo routes kept for clients that use
them to check connectivity and request encoding.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from pages_api.app.api.deps import get_context
from pages_api.app.core.context import AppContext

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health(context: AppContext = Depends(get_context)) -> JSONResponse:
    database_ok = context.db.ping()
    body = {
        "status": "ok" if database_ok else "degraded",
        "timestamp": _now(),
        "version": context.settings.api_version,
        "database": "up" if database_ok else "down",
        "media": "configured" if context.media.configured else "not configured",
    }
    return JSONResponse(body, status_code=200 if database_ok else 503)


@router.get("/test")
async def test_endpoint(request: Request) -> Dict[str, Any]:
    return {
        "message": "API is working!",
        "data": {"timestamp": _now(), "method": request.method, "path": request.url.path},
    }


@router.post("/data")
async def echo_data(payload: Any = Body(None)) -> Dict[str, Any]:
    return {"message": "Data received successfully", "receivedData": payload, "timestamp": _now()}
