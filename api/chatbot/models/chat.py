"""
Pydantic models for the Chat API request/response contracts.
"""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for the POST /chat endpoint."""

    message: str | None = Field(None, description="The user's message")


class ChatResponse(BaseModel):
    """Success envelope returned by POST /chat."""

    success: bool = Field(True, description="Always true for a successful reply")
    message: str = Field(..., description="The generated reply text")
    timestamp: str = Field(..., description="ISO-8601 UTC time the reply was produced")


class ErrorResponse(BaseModel):
    """Failure envelope shared by every endpoint."""

    success: bool = Field(False, description="Always false for a failure")
    error: str = Field(..., description="User-facing error text")
    details: str | None = Field(
        None, description="Raw error message (omitted in production)"
    )


class HealthResponse(BaseModel):
    """Response body from GET /health."""

    status: str = "OK"
    message: str = "Chatbot API is running"
