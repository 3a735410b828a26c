"""
Health router — GET /health endpoint.

Static liveness probe; does not touch configuration or providers.
"""

from fastapi import APIRouter

from chatbot.models.chat import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return a simple health status for probes."""
    return HealthResponse()
