"""
Authentication Package

Checks that an inbound request is a POST carrying the gateway's shared
secret as a bearer credential.

Modules:
- guard: method check, credential extraction and constant-time comparison
"""

from .guard import authenticate_request, extract_credential

__all__ = [
    "authenticate_request",
    "extract_credential",
]
