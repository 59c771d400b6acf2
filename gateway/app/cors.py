"""
Response Envelope Builder
=========================

Builds every response the gateway returns and guarantees the CORS header set
is present on all of them, whichever stage produced the outcome.

Starlette's CORSMiddleware is not used: it only decorates requests that carry
an Origin header and rejects preflights for unknown headers, while the
desktop client needs the same fixed headers on every response.
"""

from typing import Dict

import httpx
from fastapi import Response, status
from fastapi.responses import JSONResponse

from .models import ErrorResponse


CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Status logged when the client hangs up before the upstream answers
CLIENT_CLOSED_REQUEST = 499


def preflight_response() -> Response:
    """Answer a CORS preflight: 200, empty body, CORS headers."""
    return Response(status_code=status.HTTP_200_OK, headers=dict(CORS_HEADERS))


def error_response(message: str, status_code: int) -> JSONResponse:
    """
    Render a gateway-generated failure as ``{"error": message}``.

    Args:
        message: Error message shown to the client
        status_code: HTTP status code

    Returns:
        JSONResponse with Content-Type application/json and CORS headers
    """
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=dict(CORS_HEADERS),
    )


def relay_response(upstream: httpx.Response) -> Response:
    """
    Relay an upstream response verbatim.

    Status code and body bytes are copied unchanged, whether upstream
    succeeded or rejected the request. Only the content type is carried
    over from upstream headers (application/json when upstream sent none);
    hop-by-hop and encoding headers are dropped since httpx has already
    decoded the body. CORS headers are applied last.
    """
    headers = {
        "Content-Type": upstream.headers.get("content-type", "application/json"),
    }
    headers.update(CORS_HEADERS)

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=headers,
    )


def client_closed_response() -> Response:
    return Response(status_code=CLIENT_CLOSED_REQUEST, headers=dict(CORS_HEADERS))
