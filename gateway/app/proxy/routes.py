"""
Proxy Routes - Gemini Request Forwarding
========================================

This module implements the single catch-all endpoint of the gateway. Every
method on every path lands here and runs the same linear pipeline:

    Preflight -> Authenticate -> Forward -> Envelope

Security Model:
---------------
1. OPTIONS preflights are answered without inspecting credentials
2. Only POST is accepted; the bearer credential must equal PROXY_API_KEY
3. The client's headers are not forwarded; the gateway attaches the Gemini
   key itself, so clients never see it
4. Failures raised here are rendered by the exception handlers in main.py,
   so every outcome carries the CORS headers
"""

import asyncio
import contextlib
import logging
from typing import Awaitable, Optional

import httpx
from fastapi import APIRouter, Depends, Request, Response

from ..auth import authenticate_request
from ..config import Settings
from ..cors import client_closed_response, preflight_response, relay_response
from ..errors import GatewayError
from .forwarder import build_upstream_url, forward_request, resolve_model

logger = logging.getLogger(__name__)

proxy_router = APIRouter()

# Every verb is routed here so unsupported ones get the gateway's own 405
ROUTED_METHODS = [
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "OPTIONS",
    "TRACE",
    "CONNECT",
]


# ============================================================================
# Dependencies
# ============================================================================

def get_gateway_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """
    Get the pooled upstream HTTP client from app state.

    Raises:
        GatewayError: If the client was not initialised (lifespan not run)
    """
    client = getattr(request.app.state, "upstream_client", None)
    if client is None:
        raise GatewayError("Upstream client not initialized")
    return client


# ============================================================================
# Cancellation
# ============================================================================

async def _wait_for_disconnect(request: Request, poll_seconds: float) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(poll_seconds)


async def forward_unless_disconnected(
    request: Request,
    upstream_call: Awaitable[httpx.Response],
    poll_seconds: float,
) -> Optional[httpx.Response]:
    """
    Await the upstream call while watching the inbound connection.

    Returns:
        The upstream response, or None if the client disconnected first
        (the upstream call is cancelled in that case)

    Raises:
        UpstreamFailure: Propagated from the upstream call
    """
    forward_task = asyncio.ensure_future(upstream_call)
    watch_task = asyncio.ensure_future(_wait_for_disconnect(request, poll_seconds))

    try:
        done, _ = await asyncio.wait(
            {forward_task, watch_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (forward_task, watch_task):
            if not task.done():
                task.cancel()

    if forward_task in done:
        return forward_task.result()

    # Let the cancelled call release its pooled connection before returning
    with contextlib.suppress(asyncio.CancelledError):
        await forward_task
    watch_task.result()
    return None


# ============================================================================
# Proxy Endpoint
# ============================================================================

@proxy_router.api_route(
    "/{path:path}",
    methods=ROUTED_METHODS,
    include_in_schema=False,
)
async def proxy_generate_content(
    request: Request,
    path: str,
    settings: Settings = Depends(get_gateway_settings),
) -> Response:
    """
    Authenticate a client request and relay it to Gemini generateContent.

    Flow:
    1. OPTIONS -> 200 preflight with CORS headers
    2. Method and bearer credential check (405 / 401 / 403)
    3. Resolve model from ?model=, build upstream URL with the Gemini key
    4. POST the unmodified body upstream
    5. Relay upstream status and body verbatim (502 on network failure)

    The path itself is ignored; the upstream endpoint is fixed.
    """
    if request.method == "OPTIONS":
        return preflight_response()

    authenticate_request(
        request.method,
        request.headers.get("Authorization"),
        settings,
    )

    upstream_client = get_upstream_client(request)
    body = await request.body()
    model = resolve_model(request.query_params, settings)
    url = build_upstream_url(model, settings)

    logger.info(
        "Proxying generateContent request",
        extra={
            "model": model,
            "path": f"/{path}",
            "body_bytes": len(body),
        },
    )

    upstream = await forward_unless_disconnected(
        request,
        forward_request(upstream_client, url, body),
        settings.DISCONNECT_POLL_SECONDS,
    )

    if upstream is None:
        logger.info("Client disconnected, upstream request cancelled", extra={"model": model})
        return client_closed_response()

    return relay_response(upstream)
