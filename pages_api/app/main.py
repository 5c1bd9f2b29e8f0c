"""
Main entrypoint for the Pages API.

This module assembles the FastAPI application: logging, CORS, request
logging, error handlers and the versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn pages_api.app.main:app --reload

Resources (database connection, Cloudinary session) are opened by the
lifespan handler and closed when the server shuts down.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.context import open_context
from .core.errors import ServiceError, UpstreamError, ValidationError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _error_message(error: Dict[str, Any]) -> str:
    kind = error.get("type")
    ctx = error.get("ctx") or {}
    if kind == "missing":
        return "This field is required"
    if kind == "string_too_long":
        return f"Cannot be more than {ctx.get('max_length')} characters"
    if kind == "string_too_short":
        return "Cannot be empty"
    message = error.get("msg") or "Invalid value"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


def field_errors(errors: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    """Collapse pydantic errors into one message per field.

    The location prefix (``body``/``query``/``path``) is dropped and
    nested locations are joined with dots; the first error reported
    for a field wins.
    """
    result: Dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        result.setdefault(".".join(loc) or "body", _error_message(error))
    return result


def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation failed", "errors": field_errors(exc.errors())},
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        content: Dict[str, Any] = {"detail": exc.message}
        if isinstance(exc, ValidationError):
            content["errors"] = exc.errors
        elif isinstance(exc, UpstreamError):
            logger.error("%s %s: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
            if settings.debug and exc.detail:
                content["error"] = exc.detail
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content: Dict[str, Any] = {"detail": "Internal server error"}
        if settings.debug:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the module-level settings
        read from the environment; tests pass their own instance.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings

    # Initialise logging before anything else so that the lifespan and
    # the middleware below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        with open_context(settings) as context:
            app.state.context = context
            yield

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    _register_error_handlers(app, settings)

    app.include_router(v1_router, prefix=API_PREFIX)

    @app.get("/", include_in_schema=False)
    async def root() -> Dict[str, Any]:
        return {
            "message": settings.project_name,
            "version": settings.api_version,
            "status": "running",
            "endpoints": {
                "health": f"{API_PREFIX}/health",
                "pages": f"{API_PREFIX}/pages",
                "tracks": f"{API_PREFIX}/tracks",
                "playlists": f"{API_PREFIX}/playlists",
                "images": f"{API_PREFIX}/images",
            },
        }

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
