"""
Authentication Tests for the Gateway

Tests method enforcement, Authorization header extraction and shared-secret
validation, both on the guard directly and through the HTTP endpoint.
"""

import pytest
from fastapi import status

from gateway.app.auth import authenticate_request, extract_credential
from gateway.app.errors import AuthInvalid, AuthMissing, MethodNotAllowed

from .conftest import TEST_PROXY_KEY


CORS_HEADER_NAMES = [
    "Access-Control-Allow-Origin",
    "Access-Control-Allow-Methods",
    "Access-Control-Allow-Headers",
]


# ============================================================================
# Guard Unit Tests
# ============================================================================

def test_extract_credential_strips_bearer_prefix():
    assert extract_credential("Bearer abc123") == "abc123"


def test_extract_credential_without_prefix_is_literal():
    """A header without 'Bearer ' is taken as the credential itself"""
    assert extract_credential("abc123") == "abc123"
    assert extract_credential("Basic abc123") == "Basic abc123"


def test_guard_accepts_valid_credential(settings):
    authenticate_request("POST", f"Bearer {TEST_PROXY_KEY}", settings)


def test_guard_accepts_credential_without_bearer_prefix(settings):
    authenticate_request("POST", TEST_PROXY_KEY, settings)


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "HEAD"])
def test_guard_rejects_non_post_methods(settings, method):
    with pytest.raises(MethodNotAllowed):
        authenticate_request(method, f"Bearer {TEST_PROXY_KEY}", settings)


def test_guard_checks_method_before_credential(settings):
    """A GET without credentials is a 405, not a 401"""
    with pytest.raises(MethodNotAllowed):
        authenticate_request("GET", None, settings)


@pytest.mark.parametrize("header", [None, ""])
def test_guard_rejects_missing_header(settings, header):
    with pytest.raises(AuthMissing):
        authenticate_request("POST", header, settings)


@pytest.mark.parametrize(
    "header",
    [
        "Bearer wrong-key",
        f"Bearer {TEST_PROXY_KEY} ",
        f"bearer {TEST_PROXY_KEY}",
        f"Bearer  {TEST_PROXY_KEY}",
        f"Bearer {TEST_PROXY_KEY.upper()}",
        "Bearer ",
    ],
)
def test_guard_rejects_inexact_credentials(settings, header):
    with pytest.raises(AuthInvalid):
        authenticate_request("POST", header, settings)


# ============================================================================
# Endpoint Tests
# ============================================================================

def test_rejects_requests_without_authorization_header(client, upstream):
    """Missing header -> 401 with error envelope and CORS headers"""
    response = client.post("/", json={"contents": []})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Missing Authorization header"}
    assert response.headers["content-type"] == "application/json"
    for name in CORS_HEADER_NAMES:
        assert name in response.headers
    assert upstream.requests == []


def test_rejects_requests_with_invalid_api_key(client, upstream):
    response = client.post(
        "/",
        headers={"Authorization": "Bearer wrong-key"},
        json={"contents": []},
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"error": "Invalid API key"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert upstream.requests == []


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
def test_rejects_non_post_methods(client, upstream, method):
    response = client.request(
        method,
        "/",
        headers={"Authorization": f"Bearer {TEST_PROXY_KEY}"},
    )

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json() == {"error": "Method not allowed"}
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert upstream.requests == []


def test_get_on_docs_path_is_not_served(client):
    """Interactive docs are disabled; GET anywhere is a 405"""
    for path in ("/docs", "/openapi.json", "/health"):
        response = client.get(path)
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


def test_accepts_credential_without_bearer_prefix(client, upstream):
    response = client.post(
        "/",
        headers={"Authorization": TEST_PROXY_KEY},
        json={"contents": []},
    )

    assert response.status_code == status.HTTP_200_OK
    assert len(upstream.requests) == 1


@pytest.mark.parametrize("method", ["PROPFIND", "FOO"])
def test_rejects_unrouted_methods_with_gateway_message(client, upstream, method):
    """Verbs the router does not know still get the gateway's 405 envelope"""
    response = client.request(method, "/")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json() == {"error": "Method not allowed"}
    for name in CORS_HEADER_NAMES:
        assert name in response.headers
    assert upstream.requests == []
