"""
Chat router — POST /chat endpoint.

Receives a user message, runs it through the chat orchestrator and maps
the outcome to an HTTP response.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from chatbot.models.chat import ChatRequest, ChatResponse, ErrorResponse
from chatbot.services.chat import ChatOrchestrator

router = APIRouter(tags=["chat"])


def get_chat_orchestrator(request: Request) -> ChatOrchestrator:
    """
    Dependency injection for the chat orchestrator.
    Initialized once in the app lifespan and stored in app.state.
    """
    return request.app.state.chat_orchestrator


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def chat(
    request: ChatRequest | None = None,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> JSONResponse:
    """
    Ask the Sikkim monasteries guide a question.

    Returns ``{success, message, timestamp}`` on success, or
    ``{success: false, error, details?}`` with a 4xx/5xx status.
    A missing body is treated like a missing message.
    """
    outcome = await orchestrator.handle(request.message if request else None)
    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.envelope.model_dump(exclude_none=True),
    )
