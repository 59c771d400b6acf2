"""
Data Models Module

Pydantic models for the bodies the gateway generates itself. Forwarded
request bodies and relayed upstream bodies are opaque bytes and have no
model here.
"""

from pydantic import BaseModel, Field


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Uniform error envelope for every gateway-generated failure."""
    error: str = Field(..., description="Human-readable error message")
