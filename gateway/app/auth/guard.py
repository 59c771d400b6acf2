"""
Request authentication for the gateway.

This module handles:
- Rejecting every method except POST (OPTIONS is answered before this runs)
- Extracting the client credential from the Authorization header
- Comparing it against the configured shared secret in constant time
"""

import logging
import secrets
from typing import Optional

from ..config import Settings
from ..errors import AuthInvalid, AuthMissing, MethodNotAllowed

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_credential(auth_header: str) -> str:
    """
    Strip a leading ``Bearer `` prefix from an Authorization header value.

    Stripping is best-effort: a header without the prefix is taken as the
    literal credential.

    Example:
        >>> extract_credential("Bearer abc")
        'abc'
        >>> extract_credential("abc")
        'abc'
    """
    if auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX):]
    return auth_header


def credential_matches(credential: str, expected: str) -> bool:
    """Constant-time comparison of two secrets."""
    return secrets.compare_digest(
        credential.encode("utf-8"),
        expected.encode("utf-8"),
    )


def authenticate_request(
    method: str,
    auth_header: Optional[str],
    settings: Settings,
) -> None:
    """
    Validate method and credential of a non-preflight request.

    Args:
        method: HTTP method of the inbound request
        auth_header: Raw Authorization header value, if any
        settings: Gateway settings holding PROXY_API_KEY

    Raises:
        MethodNotAllowed: If method is not POST
        AuthMissing: If the Authorization header is absent or empty
        AuthInvalid: If the credential does not equal PROXY_API_KEY
    """
    if method.upper() != "POST":
        logger.warning(f"Rejected {method} request: method not allowed")
        raise MethodNotAllowed()

    if not auth_header:
        logger.warning("Rejected request without Authorization header")
        raise AuthMissing()

    credential = extract_credential(auth_header)
    if not credential_matches(credential, settings.PROXY_API_KEY.get_secret_value()):
        logger.warning("Rejected request with invalid API key")
        raise AuthInvalid()
