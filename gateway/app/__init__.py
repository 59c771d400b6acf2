"""
Gemini Gateway Application
==========================

Packages:
    - auth:  method and shared-secret checks
    - proxy: catch-all route and upstream forwarder

Modules:
    - config: pydantic-settings configuration
    - cors:   response envelope builder (CORS headers on every response)
    - errors: gateway error taxonomy
    - main:   FastAPI application factory
"""
