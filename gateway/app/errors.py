"""
Gateway error taxonomy.

Every failure the gateway produces on its own is one of these exceptions.
They are raised by the stage that detects them and rendered into a
``{"error": "<message>"}`` JSON body by the exception handler registered in
``gateway.app.main``. Upstream non-2xx responses are not errors here; they
are relayed to the client untouched.
"""

from typing import Optional

from fastapi import status


class GatewayError(Exception):
    """Base exception for errors rendered by the gateway itself"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MethodNotAllowed(GatewayError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    message = "Method not allowed"


class AuthMissing(GatewayError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Missing Authorization header"


class AuthInvalid(GatewayError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid API key"


class UpstreamFailure(GatewayError):
    """The upstream could not be reached at all (DNS, connect, timeout...)"""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Proxy error: {reason}")
