"""
Agency360 console - FastAPI application.
CORS, API versioning (/api/v1), health check, error handling, console lifecycle.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest

from agency360.api.v1.routes import api_router
from agency360.core.config import Settings, get_settings
from agency360.services.backend_service import BackendService, get_backend_service
from agency360.services.console import Console

# Ensure app logs (including request logs) appear in deploy logs
_log_handler = logging.StreamHandler(sys.stdout)
_log_handler.setFormatter(logging.Formatter("%(levelname)s:     %(message)s"))
logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Attach the stdout handler to the package logger once."""
    package_logger = logging.getLogger("agency360")
    package_logger.setLevel(level)
    if _log_handler not in package_logger.handlers:
        package_logger.addHandler(_log_handler)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request (method + path) so deploy logs show console traffic."""

    async def dispatch(self, request: StarletteRequest, call_next: Callable) -> Response:
        response = await call_next(request)
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response


class PreflightCorsMiddleware(BaseHTTPMiddleware):
    """
    Respond to OPTIONS (preflight) immediately with 200 and CORS headers, before
    any other middleware or routing.
    """

    def __init__(self, app, allowed_origins: list[str]) -> None:
        super().__init__(app)
        self._allowed = allowed_origins

    async def dispatch(self, request: StarletteRequest, call_next: Callable) -> Response:
        if request.method != "OPTIONS":
            return await call_next(request)
        origin = request.headers.get("origin", "").strip()
        allow_origin = origin if origin in self._allowed else (self._allowed[0] if self._allowed else "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": allow_origin,
                "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )


def create_app(
    settings: Settings | None = None,
    backend: BackendService | None = None,
) -> FastAPI:
    """Build the console API. settings/backend are injected; defaults come from the environment."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle: build the console and run the initial fetch."""
        logger.info("Starting Agency360 console API (backend %s)", settings.api_url)
        if settings.ENVIRONMENT == "production":
            settings.validate_for_production()
        console = Console(backend or get_backend_service(settings), settings)
        app.state.console = console
        console.load()
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="Agency360 Console API",
        version="1.0.0",
        description="Accounts, products and product-account links console.",
        lifespan=lifespan,
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)
    # CORS: preflight first (runs first), then general CORS for all responses
    app.add_middleware(PreflightCorsMiddleware, allowed_origins=settings.cors_origins_list)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    # Error handling middleware
    @app.middleware("http")
    async def catch_exceptions(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error: %s", exc)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    # Root and health (outside versioning)
    @app.get("/")
    def root():
        return {
            "message": "Agency360 Console API",
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": {
                "accounts": "/api/v1/accounts",
                "products": "/api/v1/products",
                "notifications": "/api/v1/notifications",
            },
        }

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    # API v1
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("agency360.main:app", host="0.0.0.0", port=port)
