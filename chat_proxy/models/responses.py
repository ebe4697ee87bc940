"""Pydantic models for API response serialization."""
from __future__ import annotations

from pydantic import BaseModel, Field

CHAT_FAILURE_MESSAGE = "Failed to process request"


class ErrorResponse(BaseModel):
    """JSON error body returned by the API."""
    error: str = Field(..., description="Human-readable error message")
