"""
Pydantic models for the feedback endpoint. Fields are accepted as sent.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FeedbackRequest(BaseModel):
    """Request body for POST /feedback. Every field is optional."""

    model_config = ConfigDict(extra="allow")

    message: Any = Field(None, description="The message the feedback refers to")
    feedback: Any = Field(None, description="Free-form feedback text")
    helpful: Any = Field(None, description="Whether the reply was helpful")


class FeedbackResponse(BaseModel):
    """Response body from POST /feedback."""

    success: bool = True
    message: str = "Thank you for your feedback!"
