"""
FastAPI Gateway Application Factory
===================================

This is the main entry point for the gateway service that sits between the
desktop chat client and the Google Gemini API.

Architecture:
    Desktop Client → Gateway (this service) → Gemini generateContent

Routes:
    - /{any path} : POST is authenticated and forwarded, OPTIONS answers
                    CORS preflight, every other method gets 405

Environment Variables:
    - GEMINI_API_KEY: Upstream Gemini API key (required)
    - PROXY_API_KEY: Shared secret expected from clients (required)
    - GEMINI_API_BASE_URL: Gemini REST base URL
    - GEMINI_DEFAULT_MODEL: Model used without ?model= (default: gemini-2.5-flash)
    - UPSTREAM_TIMEOUT_SECONDS / UPSTREAM_CONNECT_TIMEOUT_SECONDS
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn gateway.app.main:app --reload --host 0.0.0.0 --port 8787

    Production:
        python -m gateway
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway import __version__
from gateway.app.config import Settings, get_settings, validate_configuration
from gateway.app.cors import error_response
from gateway.app.errors import GatewayError, MethodNotAllowed
from gateway.app.proxy import proxy_router


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_upstream_client(settings: Settings) -> httpx.AsyncClient:
    """Pooled client for Gemini with explicit upper-bound timeouts."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            settings.UPSTREAM_TIMEOUT_SECONDS,
            connect=settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS,
        ),
    )


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup tasks:
        - Load configuration from environment (unless injected)
        - Validate configuration and log errors/warnings
        - Open the pooled upstream HTTP client (unless injected)

    Shutdown tasks:
        - Close the upstream client if this lifespan opened it
    """
    # Startup
    if app.state.settings is None:
        app.state.settings = get_settings()
    settings: Settings = app.state.settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("gateway.main")

    report = validate_configuration(settings)
    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")
    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")

    owns_client = app.state.upstream_client is None
    if owns_client:
        app.state.upstream_client = build_upstream_client(settings)

    logger.info(
        "Gateway service started",
        extra={
            "service": "gemini-gateway",
            "version": __version__,
            "default_model": settings.GEMINI_DEFAULT_MODEL,
            "upstream": settings.gemini_api_base_url_str,
        }
    )

    yield

    # Shutdown
    logger.info("Shutting down gateway service")

    if owns_client:
        await app.state.upstream_client.aclose()
        app.state.upstream_client = None
        logger.info("Closed upstream HTTP client")


def create_app(
    settings: Optional[Settings] = None,
    upstream_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management
        - The catch-all proxy route
        - Exception handlers rendering every failure with CORS headers

    Args:
        settings: Configuration to use; loaded from the environment at
            startup when omitted
        upstream_client: HTTP client for Gemini; created (and closed) by the
            lifespan when omitted

    Returns:
        FastAPI: Configured application instance
    """
    # Docs routes are disabled: every GET must be answered with 405
    app = FastAPI(
        title="Gemini Gateway",
        description="Authenticated reverse proxy for the Gemini generateContent API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.settings = settings
    app.state.upstream_client = upstream_client

    app.include_router(proxy_router)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Verbs outside the routed set are refused by the router itself
        if exc.status_code == MethodNotAllowed.status_code:
            return error_response(MethodNotAllowed.message, exc.status_code)
        return error_response(str(exc.detail), exc.status_code)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Logs the error and returns the standard error envelope, so even an
        unexpected failure carries the CORS headers.
        """
        logger = logging.getLogger("gateway.main")
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        return error_response("Internal server error", 500)

    return app


# Create app instance for uvicorn
app = create_app()
