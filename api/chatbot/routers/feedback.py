"""
Feedback router — POST /feedback endpoint.

Fire-and-forget: the body is handed to the configured feedback sink and
acknowledged without validation. Missing and non-object bodies are accepted.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from chatbot.models.chat import ErrorResponse
from chatbot.models.feedback import FeedbackRequest, FeedbackResponse
from chatbot.services.feedback import FeedbackSink

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedback"])


def get_feedback_sink(request: Request) -> FeedbackSink:
    return request.app.state.feedback_sink


def to_entry(payload: Any) -> dict[str, Any]:
    """Normalize any JSON body into a feedback entry."""
    if payload is None:
        return {}
    if isinstance(payload, dict):
        return FeedbackRequest.model_validate(payload).model_dump()
    return {"body": payload}


@router.post(
    "/feedback",
    response_model=FeedbackResponse,
    responses={500: {"model": ErrorResponse}},
)
async def feedback(
    payload: Any = Body(None),
    sink: FeedbackSink = Depends(get_feedback_sink),
):
    """Record user feedback about a reply. Body: ``{message, feedback, helpful}``."""
    try:
        await sink.record(to_entry(payload))
    except Exception:
        logger.exception("Failed to process feedback")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Failed to process feedback").model_dump(
                exclude_none=True
            ),
        )
    return FeedbackResponse()
