"""
LLM provider adapters.

Each adapter wraps one outbound chat-completion call to a named provider.
Both providers expose an OpenAI-compatible API, so both use the OpenAI SDK;
Groq is reached through its OpenAI-compatible base URL.

Credentials are checked lazily: the server starts without any key and only
the first request that needs a missing key fails.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from openai import AsyncOpenAI

from chatbot.core.config import DEFAULT_PROVIDER, Settings
from chatbot.core.errors import ProviderUnconfiguredError
from chatbot.core.telemetry import get_tracer
from chatbot.services.prompts import SYSTEM_PROMPT, build_messages
from chatbot.services.search import SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationParams:
    """Per-call generation parameters."""

    model: str
    temperature: float = 0.7
    max_tokens: int = 1024


class ProviderAdapter(ABC):
    """
    Base class for LLM provider adapters.

    Subclasses set ``name`` and ``api_key_env`` and implement ``_create_client``.
    """

    name: str = ""
    api_key_env: str = ""
    supports_retrieval: bool = False

    def __init__(
        self,
        api_key: str,
        default_params: GenerationParams,
        system_prompt: str = SYSTEM_PROMPT,
        timeout: float = 60.0,
        client: Any = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self.default_params = default_params
        self.system_prompt = system_prompt
        self._client = client
        self._tracer = get_tracer()

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key) or self._client is not None

    def require_credentials(self) -> None:
        """Raise ProviderUnconfiguredError if no API key is available."""
        if not self.is_configured:
            raise ProviderUnconfiguredError(f"{self.api_key_env} is not configured")

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the SDK client. Only called once a key is known to exist."""

    @property
    def client(self) -> Any:
        if self._client is None:
            self.require_credentials()
            self._client = self._create_client()
        return self._client

    async def generate(
        self,
        message: str,
        context: Sequence[SearchResult] | None = None,
        params: GenerationParams | None = None,
    ) -> str | None:
        """
        Generate a reply to ``message``.

        Args:
            message: The user's message.
            context: Optional web search results to ground the reply.
            params: Generation parameters; adapter defaults when omitted.

        Returns:
            The first choice's text, or None if the provider returned no choices.
        """
        self.require_credentials()
        params = params or self.default_params

        with self._tracer.start_as_current_span("provider.generate") as span:
            span.set_attribute("provider.name", self.name)
            span.set_attribute("provider.model", params.model)
            span.set_attribute("provider.context_count", len(context or ()))

            completion = await self.client.chat.completions.create(
                model=params.model,
                messages=build_messages(message, context, self.system_prompt),
                temperature=params.temperature,
                max_tokens=params.max_tokens,
            )

            if not completion.choices:
                logger.warning("%s returned no choices", self.name)
                return None

            usage = getattr(completion, "usage", None)
            if usage is not None:
                span.set_attribute("provider.total_tokens", usage.total_tokens or 0)
                logger.info("%s completion: %d tokens used", self.name, usage.total_tokens or 0)

            return completion.choices[0].message.content or None


class GroqAdapter(ProviderAdapter):
    """Groq chat completions through its OpenAI-compatible endpoint."""

    name = "groq"
    api_key_env = "GROQ_API_KEY"

    def __init__(self, *args: Any, base_url: str = "", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._base_url = base_url

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            max_retries=0,
        )


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions. The only adapter used with web search."""

    name = "openai"
    api_key_env = "OPENAI_API_KEY"
    supports_retrieval = True

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self._api_key,
            timeout=self._timeout,
            max_retries=0,
        )


class ProviderRegistry:
    """Adapters keyed by lower-case provider name, with a default fallback."""

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        default: str = DEFAULT_PROVIDER,
    ) -> None:
        self._adapters = {adapter.name.lower(): adapter for adapter in adapters}
        if default.lower() not in self._adapters:
            raise KeyError(f"Default provider {default!r} is not registered")
        self._default = default.lower()

    def get(self, name: str | None) -> ProviderAdapter:
        """Look up an adapter case-insensitively; unknown names get the default."""
        key = (name or "").strip().lower()
        adapter = self._adapters.get(key)
        if adapter is None:
            if key:
                logger.warning(
                    "Unknown provider %r, falling back to %r", name, self._default
                )
            adapter = self._adapters[self._default]
        return adapter


def build_registry(settings: Settings) -> ProviderRegistry:
    """Create the Groq and OpenAI adapters from settings."""
    system_prompt = settings.system_prompt or SYSTEM_PROMPT
    groq = GroqAdapter(
        settings.groq_api_key,
        GenerationParams(
            model=settings.groq_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        ),
        system_prompt=system_prompt,
        timeout=settings.request_timeout_seconds,
        base_url=settings.groq_base_url,
    )
    openai = OpenAIAdapter(
        settings.openai_api_key,
        GenerationParams(
            model=settings.openai_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        ),
        system_prompt=system_prompt,
        timeout=settings.request_timeout_seconds,
    )
    return ProviderRegistry([groq, openai], default=DEFAULT_PROVIDER)
