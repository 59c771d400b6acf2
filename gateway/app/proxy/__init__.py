"""
Proxy Package
=============

Authenticated forwarding of client requests to the Gemini API.

Main Components:
----------------
- routes.py: catch-all FastAPI router running the request pipeline
- forwarder.py: model resolution, upstream URL construction, outbound call

Security Features:
------------------
- Shared-secret bearer authentication (constant-time comparison)
- Gemini key injected server-side, never returned to clients
- Client headers are not forwarded upstream
"""

from .routes import proxy_router

__all__ = ["proxy_router"]
