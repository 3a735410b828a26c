"""
Unit tests for the chat orchestrator.

Tests the routing pipeline with mocked provider and search services.
"""

import pytest

from chatbot.core.config import Settings
from chatbot.core.errors import SearchUnavailableError, SearchUnconfiguredError
from chatbot.services.chat import FALLBACK_MESSAGE, ChatOrchestrator
from chatbot.services.providers import GenerationParams, ProviderAdapter, ProviderRegistry
from chatbot.services.search import SearchResult


class MockAdapter(ProviderAdapter):
    """Provider adapter that records calls instead of hitting the network."""

    def __init__(self, name, reply="Test reply", api_key="test-key", error=None, retrieval=False):
        super().__init__(api_key, GenerationParams(model=f"{name}-model"))
        self.name = name
        self.api_key_env = f"{name.upper()}_API_KEY"
        self.supports_retrieval = retrieval
        self._reply = reply
        self._error = error
        self.calls = []

    def _create_client(self):
        raise AssertionError("MockAdapter must not build a real client")

    async def generate(self, message, context=None, params=None):
        self.require_credentials()
        self.calls.append({"message": message, "context": context, "params": params})
        if self._error is not None:
            raise self._error
        return self._reply


class MockSearchService:
    """Mock Bing search service."""

    def __init__(self, results=None, error=None):
        self._results = results or []
        self._error = error
        self.calls = []

    async def search(self, query, count=3):
        self.calls.append((query, count))
        if self._error is not None:
            raise self._error
        return self._results[:count]


def make_settings(**overrides):
    values = {
        "provider": "groq",
        "groq_api_key": "",
        "openai_api_key": "",
        "bing_api_key": "",
        "use_web_search": False,
        "environment": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_orchestrator(settings, groq=None, openai=None, search=None):
    groq = groq or MockAdapter("groq")
    openai = openai or MockAdapter("openai", retrieval=True)
    registry = ProviderRegistry([groq, openai], default="groq")
    return ChatOrchestrator(settings, registry, search or MockSearchService())


@pytest.fixture
def sample_results():
    return [
        SearchResult(
            title="Rumtek Monastery - Wikipedia",
            snippet="Rumtek Monastery is a gompa located in Sikkim.",
            url="https://en.wikipedia.org/wiki/Rumtek_Monastery",
        ),
        SearchResult(
            title="Enchey Monastery",
            snippet="Enchey Monastery was established in 1909.",
            url="https://sikkimtourism.gov.in/enchey",
        ),
    ]


@pytest.mark.asyncio
async def test_successful_reply():
    """A provider reply is wrapped in a success envelope with a timestamp."""
    groq = MockAdapter("groq", reply="Rumtek Monastery is...")
    orchestrator = make_orchestrator(make_settings(), groq=groq)

    outcome = await orchestrator.handle("Tell me about Rumtek Monastery")

    assert outcome.status_code == 200
    assert outcome.envelope.success is True
    assert outcome.envelope.message == "Rumtek Monastery is..."
    assert outcome.envelope.timestamp
    assert len(groq.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [None, ""])
async def test_empty_message_rejected_before_provider(message):
    groq = MockAdapter("groq")
    search = MockSearchService()
    orchestrator = make_orchestrator(make_settings(), groq=groq, search=search)

    outcome = await orchestrator.handle(message)

    assert outcome.status_code == 400
    assert outcome.envelope.success is False
    assert outcome.envelope.error == "Message is required"
    assert groq.calls == []
    assert search.calls == []


@pytest.mark.asyncio
async def test_whitespace_message_reaches_provider():
    groq = MockAdapter("groq")
    orchestrator = make_orchestrator(make_settings(), groq=groq)

    outcome = await orchestrator.handle("   ")

    assert outcome.status_code == 200
    assert groq.calls[0]["message"] == "   "


@pytest.mark.asyncio
async def test_missing_credential_is_unauthorized_without_search():
    openai = MockAdapter("openai", api_key="", retrieval=True)
    search = MockSearchService()
    settings = make_settings(provider="openai", use_web_search=True)
    orchestrator = make_orchestrator(settings, openai=openai, search=search)

    outcome = await orchestrator.handle("Best time to visit Pemayangtse?")

    assert outcome.status_code == 401
    assert outcome.envelope.success is False
    assert "API key" in outcome.envelope.error
    assert search.calls == []
    assert openai.calls == []


@pytest.mark.asyncio
async def test_search_failure_short_circuits_generation():
    openai = MockAdapter("openai", retrieval=True)
    search = MockSearchService(error=SearchUnavailableError())
    settings = make_settings(provider="openai", use_web_search=True)
    orchestrator = make_orchestrator(settings, openai=openai, search=search)

    outcome = await orchestrator.handle("Is Rumtek open today?")

    assert outcome.status_code == 500
    assert outcome.envelope.success is False
    assert outcome.envelope.error == "Search service unavailable"
    assert openai.calls == []


@pytest.mark.asyncio
async def test_search_unconfigured_short_circuits_generation():
    openai = MockAdapter("openai", retrieval=True)
    search = MockSearchService(error=SearchUnconfiguredError())
    settings = make_settings(provider="openai", use_web_search=True)
    orchestrator = make_orchestrator(settings, openai=openai, search=search)

    outcome = await orchestrator.handle("Is Rumtek open today?")

    assert outcome.status_code == 500
    assert outcome.envelope.success is False
    assert openai.calls == []


@pytest.mark.asyncio
async def test_search_results_passed_to_openai(sample_results):
    openai = MockAdapter("openai", retrieval=True)
    search = MockSearchService(results=sample_results)
    settings = make_settings(provider="OpenAI", use_web_search=True, search_result_count=2)
    orchestrator = make_orchestrator(settings, openai=openai, search=search)

    outcome = await orchestrator.handle("Tell me about Rumtek")

    assert outcome.status_code == 200
    assert search.calls == [("Tell me about Rumtek", 2)]
    assert openai.calls[0]["context"] == sample_results


@pytest.mark.asyncio
async def test_groq_never_uses_web_search():
    groq = MockAdapter("groq")
    search = MockSearchService()
    settings = make_settings(provider="groq", use_web_search=True)
    orchestrator = make_orchestrator(settings, groq=groq, search=search)

    outcome = await orchestrator.handle("Hello")

    assert outcome.status_code == 200
    assert search.calls == []
    assert groq.calls[0]["context"] is None


@pytest.mark.asyncio
async def test_web_search_disabled_skips_search():
    openai = MockAdapter("openai", retrieval=True)
    search = MockSearchService()
    orchestrator = make_orchestrator(make_settings(provider="openai"), openai=openai, search=search)

    await orchestrator.handle("Hello")

    assert search.calls == []
    assert openai.calls[0]["context"] is None


@pytest.mark.asyncio
async def test_unknown_provider_falls_back_to_groq():
    groq = MockAdapter("groq")
    openai = MockAdapter("openai", retrieval=True)
    orchestrator = make_orchestrator(make_settings(provider="anthropic"), groq=groq, openai=openai)

    outcome = await orchestrator.handle("Hello")

    assert outcome.status_code == 200
    assert len(groq.calls) == 1
    assert openai.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [None, ""])
async def test_empty_reply_uses_fallback(reply):
    groq = MockAdapter("groq", reply=reply)
    orchestrator = make_orchestrator(make_settings(), groq=groq)

    outcome = await orchestrator.handle("Hello")

    assert outcome.status_code == 200
    assert outcome.envelope.success is True
    assert outcome.envelope.message == FALLBACK_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, status",
    [
        (RuntimeError("Error code: 401 - invalid_api_key"), 401),
        (RuntimeError("Error code: 429 - rate_limit_exceeded"), 429),
        (RuntimeError("connect timeout"), 504),
        (RuntimeError("something else"), 500),
    ],
)
async def test_provider_errors_are_classified(error, status):
    groq = MockAdapter("groq", error=error)
    orchestrator = make_orchestrator(make_settings(), groq=groq)

    outcome = await orchestrator.handle("Hello")

    assert outcome.status_code == status
    assert outcome.envelope.success is False
    assert outcome.envelope.details == str(error)
    assert len(groq.calls) == 1


@pytest.mark.asyncio
async def test_details_hidden_in_production():
    groq = MockAdapter("groq", error=RuntimeError("boom"))
    orchestrator = make_orchestrator(make_settings(environment="production"), groq=groq)

    outcome = await orchestrator.handle("Hello")

    assert outcome.status_code == 500
    assert outcome.envelope.details is None
    assert "details" not in outcome.envelope.model_dump(exclude_none=True)


@pytest.mark.asyncio
async def test_generation_params_come_from_settings():
    groq = MockAdapter("groq")
    orchestrator = make_orchestrator(make_settings(temperature=0.3, max_tokens=512), groq=groq)

    await orchestrator.handle("Hello")

    params = groq.calls[0]["params"]
    assert params.model == "groq-model"
    assert params.temperature == 0.3
    assert params.max_tokens == 512
