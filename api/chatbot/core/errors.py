"""
Error kinds for the chat pipeline and the single place where caught
exceptions are mapped to HTTP status codes and user-facing text.
"""

from enum import Enum


class ChatbotError(Exception):
    """Base class for errors raised by the chatbot services."""


class InvalidInputError(ChatbotError):
    """The request message is empty or missing."""


class ProviderUnconfiguredError(ChatbotError):
    """The selected LLM provider has no API key configured."""


class SearchUnavailableError(ChatbotError):
    """The web-search call failed. Upstream detail is logged, never exposed."""

    def __init__(self, message: str = "Search service unavailable") -> None:
        super().__init__(message)


class SearchUnconfiguredError(SearchUnavailableError):
    """Web search is enabled but no search API key is configured."""

    def __init__(self, message: str = "BING_API_KEY is not configured") -> None:
        super().__init__(message)


class ErrorKind(Enum):
    """Classified failure: (HTTP status, user-facing error text)."""

    INVALID_INPUT = (400, "Message is required")
    UNAUTHORIZED = (401, "Invalid or missing API key. Please check your provider configuration.")
    RATE_LIMITED = (429, "Rate limit exceeded. Please try again later.")
    SEARCH_UNAVAILABLE = (500, "Search service unavailable")
    INTERNAL = (500, "An error occurred while processing your request")
    TIMEOUT = (504, "Request timeout. Please try again.")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


def classify_error(exc: BaseException) -> ErrorKind:
    """
    Map a caught exception to an ErrorKind.

    Typed errors raised by our own services are matched first. Anything else
    is classified by looking for "401", "429" or "timeout" in its message,
    which is what existing clients rely on for the status codes.
    """
    if isinstance(exc, InvalidInputError):
        return ErrorKind.INVALID_INPUT
    if isinstance(exc, ProviderUnconfiguredError):
        return ErrorKind.UNAUTHORIZED
    if isinstance(exc, SearchUnavailableError):
        return ErrorKind.SEARCH_UNAVAILABLE

    text = str(exc)
    if "401" in text:
        return ErrorKind.UNAUTHORIZED
    if "429" in text:
        return ErrorKind.RATE_LIMITED
    if "timeout" in text:
        return ErrorKind.TIMEOUT
    return ErrorKind.INTERNAL
