"""
Bing Web Search client wrapper.

Issues a single query per request and reduces the response to a short,
ordered list of title/snippet/url records.
"""

import logging
from dataclasses import dataclass

import httpx

from chatbot.core.config import Settings
from chatbot.core.errors import SearchUnavailableError, SearchUnconfiguredError
from chatbot.core.telemetry import get_tracer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """A single web search hit."""

    title: str
    snippet: str
    url: str


class BingSearchService:
    """Wrapper around the Bing Web Search v7 API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = settings.bing_api_key
        self._endpoint = settings.bing_endpoint
        self._market = settings.search_market
        self._timeout = settings.search_timeout_seconds
        self._transport = transport
        self._tracer = get_tracer()

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def search(self, query: str, count: int = 3) -> list[SearchResult]:
        """
        Run a web search.

        Args:
            query: The user's message, used verbatim as the search query.
            count: Maximum number of results to return.

        Returns:
            Up to ``count`` SearchResult, in the order Bing ranked them.

        Raises:
            SearchUnconfiguredError: No search API key is set.
            SearchUnavailableError: Transport failure or non-2xx response.
        """
        if not self.is_configured:
            raise SearchUnconfiguredError()

        with self._tracer.start_as_current_span("search.web") as span:
            span.set_attribute("search.count", count)
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    response = await client.get(
                        self._endpoint,
                        params={"q": query, "mkt": self._market, "count": count},
                        headers={"Ocp-Apim-Subscription-Key": self._api_key},
                    )
                    response.raise_for_status()
                    payload = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "Bing search error: %s %s",
                    exc.response.status_code,
                    exc.response.text,
                )
                raise SearchUnavailableError() from exc
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Bing search error: %s", exc)
                raise SearchUnavailableError() from exc

            results = self._parse_results(payload, count)

            span.set_attribute("search.results_count", len(results))
            logger.info("Web search returned %d results", len(results))
            return results

    @staticmethod
    def _parse_results(payload: object, count: int) -> list[SearchResult]:
        """Map ``webPages.value`` to SearchResult, skipping malformed entries."""
        web_pages = payload.get("webPages") if isinstance(payload, dict) else None
        pages = web_pages.get("value") if isinstance(web_pages, dict) else None
        if not isinstance(pages, list):
            return []

        results = []
        for page in pages:
            if len(results) >= count:
                break
            if not isinstance(page, dict):
                logger.warning("Skipping malformed search result: %r", page)
                continue
            results.append(
                SearchResult(
                    title=str(page.get("name") or ""),
                    snippet=str(page.get("snippet") or page.get("displayUrl") or ""),
                    url=str(page.get("url") or ""),
                )
            )
        return results
