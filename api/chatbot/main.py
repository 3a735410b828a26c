"""
FastAPI application entrypoint.

Registers routers, configures CORS and the JSON error envelopes,
initializes telemetry, and creates service instances on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatbot import __version__
from chatbot.core.config import Settings, get_settings
from chatbot.core.telemetry import setup_telemetry
from chatbot.models.chat import ErrorResponse
from chatbot.routers import chat, feedback, health
from chatbot.services.chat import ChatOrchestrator
from chatbot.services.feedback import LoggingFeedbackSink
from chatbot.services.providers import build_registry
from chatbot.services.search import BingSearchService

logger = logging.getLogger(__name__)

# Routes are served at the root and under the prefix the browser UI uses.
ROUTE_PREFIXES = ("", "/api")


def _error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error).model_dump(exclude_none=True),
    )


@asynccontextmanager
async def lifespan(application: FastAPI):
    """
    Application lifespan handler.
    Initializes service clients on startup, cleans up on shutdown.
    """
    settings: Settings = application.state.settings

    # Configure logging
    logging.basicConfig(level=settings.log_level)

    # Initialize telemetry
    setup_telemetry(settings)

    # Initialize services; missing keys only fail the requests that need them
    providers = build_registry(settings)
    search_service = BingSearchService(settings)
    application.state.chat_orchestrator = ChatOrchestrator(
        settings, providers, search_service
    )
    application.state.feedback_sink = LoggingFeedbackSink()

    logger.info(
        "Sikkim Monasteries Chatbot API started on port %d (provider: %s, web search: %s)",
        settings.port,
        providers.get(settings.provider_name).name,
        settings.use_web_search,
    )
    logger.info(
        "Keys: GROQ=%s, OPENAI=%s, BING=%s",
        "set" if settings.groq_api_key else "missing",
        "set" if settings.openai_api_key else "missing",
        "set" if settings.bing_api_key else "missing",
    )
    logger.info(
        "Rate limit placeholder: %d requests per %ds (not enforced)",
        settings.rate_limit_max_requests,
        settings.rate_limit_window_seconds,
    )
    yield
    logger.info("Sikkim Monasteries Chatbot API shutting down.")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function to create the FastAPI application."""
    settings = settings or get_settings()

    application = FastAPI(
        title="Sikkim Monasteries Chatbot API",
        description="Travel guide chatbot for Sikkim monasteries and Buddhist culture.",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = settings

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    for prefix in ROUTE_PREFIXES:
        for module in (health, chat, feedback):
            application.include_router(
                module.router, prefix=prefix, include_in_schema=not prefix
            )

    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return _error(404, "Endpoint not found")
        return _error(exc.status_code, str(exc.detail))

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Rejected request body on %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(500, "Internal server error")

    return application


app = create_app()
