"""
Shared fixtures for gateway tests.

The Gemini API is replaced by an httpx.MockTransport so every test sees the
exact request the gateway sent upstream and controls what upstream answers.
"""

from typing import Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from gateway.app.config import Settings
from gateway.app.main import create_app


TEST_GEMINI_KEY = "test-gemini-key"
TEST_PROXY_KEY = "test-proxy-key"


class UpstreamStub:
    """Records upstream requests and replies with a canned response or error"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.content = b'{"candidates": [{"content": {"parts": [{"text": "Hello from Gemini!"}]}}]}'
        self.headers: Dict[str, str] = {"content-type": "application/json; charset=UTF-8"}
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers=self.headers,
        )

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "upstream was never called"
        return self.requests[-1]


@pytest.fixture
def settings():
    """Gateway settings with fixed test secrets (no .env lookup)"""
    return Settings(
        _env_file=None,
        GEMINI_API_KEY=TEST_GEMINI_KEY,
        PROXY_API_KEY=TEST_PROXY_KEY,
    )


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def upstream_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def app(settings, upstream_client):
    """Create test FastAPI application"""
    return create_app(settings=settings, upstream_client=upstream_client)


@pytest.fixture
def client(app):
    """Create test client (runs the application lifespan)"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Standard authorization headers for authenticated requests"""
    return {
        "Authorization": f"Bearer {TEST_PROXY_KEY}",
        "Content-Type": "application/json",
    }
