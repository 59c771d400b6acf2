"""
Upstream Forwarder
==================

Resolves the target Gemini model, builds the generateContent URL with the
provider key injected, and issues the outbound POST with the original body.

Two kinds of upstream trouble are kept strictly apart:

1. Upstream answered with a non-2xx status: that response is returned as is
   and relayed verbatim by the caller.
2. Sending the request raised (DNS, connect, timeout, closed client, any
   other exception): ``UpstreamFailure`` is raised and rendered as the
   gateway's own ``{"error": "Proxy error: ..."}`` envelope.
"""

import logging
from typing import List
from urllib.parse import quote

import httpx
from starlette.datastructures import QueryParams

from ..config import Settings
from ..errors import UpstreamFailure

logger = logging.getLogger(__name__)

GENERATE_CONTENT_ACTION = "generateContent"

# Only header sent upstream; client headers (Authorization included) never are
UPSTREAM_HEADERS = {"Content-Type": "application/json"}


# ============================================================================
# URL Construction
# ============================================================================

def resolve_model(query_params: QueryParams, settings: Settings) -> str:
    """Return the first ``model`` query parameter, or the configured default."""
    models: List[str] = query_params.getlist("model")
    return (models[0] if models else "") or settings.GEMINI_DEFAULT_MODEL


def build_upstream_url(model: str, settings: Settings) -> httpx.URL:
    """
    Build the upstream generateContent URL for a model.

    The model id becomes a single path segment (percent-encoded, so it can
    not escape the ``models/`` collection) and GEMINI_API_KEY is attached as
    the ``key`` query parameter.

    Args:
        model: Gemini model identifier, e.g. ``gemini-2.5-flash``
        settings: Gateway settings

    Returns:
        Absolute httpx.URL
    """
    segment = quote(model, safe="")
    return httpx.URL(
        f"{settings.gemini_api_base_url_str}/models/{segment}:{GENERATE_CONTENT_ACTION}",
        params={"key": settings.GEMINI_API_KEY.get_secret_value()},
    )


def redact_upstream_url(url: httpx.URL) -> str:
    """Render an upstream URL with the ``key`` parameter masked, for logs."""
    if "key" not in url.params:
        return str(url)
    return str(url.copy_set_param("key", "***"))


# ============================================================================
# Outbound Call
# ============================================================================

async def forward_request(
    client: httpx.AsyncClient,
    url: httpx.URL,
    body: bytes,
) -> httpx.Response:
    """
    POST the client's body to upstream unchanged.

    Args:
        client: Pooled upstream HTTP client (timeouts configured on it)
        url: Upstream URL from build_upstream_url
        body: Raw inbound request body

    Returns:
        The upstream response, whatever its status code

    Raises:
        UpstreamFailure: If sending the request raised any exception
    """
    try:
        response = await client.post(url, content=body, headers=UPSTREAM_HEADERS)
    except Exception as e:
        reason = str(e) or type(e).__name__
        api_key = url.params.get("key")
        if api_key:
            reason = reason.replace(api_key, "***")
        logger.error(
            f"Upstream request failed: {reason}",
            extra={
                "upstream_url": redact_upstream_url(url),
                "exception_type": type(e).__name__,
            },
        )
        raise UpstreamFailure(reason) from e

    logger.info(
        f"Upstream responded with {response.status_code}",
        extra={
            "upstream_url": redact_upstream_url(url),
            "status_code": response.status_code,
            "response_bytes": len(response.content),
        },
    )
    return response
