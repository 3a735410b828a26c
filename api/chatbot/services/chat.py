"""
Chat orchestrator — core request pipeline.

Coordinates one chat turn:
1. Validate the message.
2. Select the provider adapter from configuration.
3. Check the provider credential before any network call.
4. Optionally run a web search (OpenAI provider with web search enabled).
5. Call the provider once and fall back to a fixed reply on empty output.
6. Classify any failure into a status code and error envelope.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from chatbot.core.config import Settings
from chatbot.core.errors import InvalidInputError, classify_error
from chatbot.core.telemetry import get_tracer
from chatbot.models.chat import ChatResponse, ErrorResponse
from chatbot.services.providers import GenerationParams, ProviderRegistry
from chatbot.services.search import BingSearchService, SearchResult

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Sorry, I could not generate a response."


@dataclass
class ChatOutcome:
    """HTTP status code plus the envelope to send back."""

    status_code: int
    envelope: ChatResponse | ErrorResponse


class ChatOrchestrator:
    """Routes a chat message to the configured provider."""

    def __init__(
        self,
        settings: Settings,
        providers: ProviderRegistry,
        search_service: BingSearchService,
    ) -> None:
        self._settings = settings
        self._providers = providers
        self._search = search_service
        self._tracer = get_tracer()

    async def handle(self, message: str | None) -> ChatOutcome:
        """
        Process one chat message.

        Never raises: every failure is returned as a ChatOutcome carrying an
        ErrorResponse and the matching status code.
        """
        with self._tracer.start_as_current_span("chat.handle") as span:
            try:
                reply = await self._generate(message)
            except Exception as exc:
                kind = classify_error(exc)
                span.set_attribute("chat.error_kind", kind.name)
                logger.error("Chat request failed (%s): %s", kind.name, exc)
                return ChatOutcome(
                    status_code=kind.status_code,
                    envelope=ErrorResponse(
                        error=kind.message,
                        details=None if self._settings.is_production else str(exc),
                    ),
                )

            return ChatOutcome(
                status_code=200,
                envelope=ChatResponse(
                    message=reply,
                    timestamp=datetime.now(timezone.utc).isoformat(),
                ),
            )

    async def _generate(self, message: str | None) -> str:
        if not message:
            raise InvalidInputError("Message is required")

        adapter = self._providers.get(self._settings.provider_name)
        adapter.require_credentials()

        context: list[SearchResult] | None = None
        if adapter.supports_retrieval and self._settings.use_web_search:
            context = await self._search.search(
                message, count=self._settings.search_result_count
            )

        params = GenerationParams(
            model=adapter.default_params.model,
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        reply = await adapter.generate(message, context=context, params=params)

        if not reply:
            logger.warning("Provider %s returned an empty reply", adapter.name)
            return FALLBACK_MESSAGE
        return reply
