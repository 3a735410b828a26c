"""
Prompt template for the Sikkim monasteries travel guide, and assembly of
the chat-completion message list.
"""

from collections.abc import Sequence

from chatbot.services.search import SearchResult

SYSTEM_PROMPT = """\
You are an expert travel guide assistant specialized in Sikkim monasteries \
and Buddhist culture.
You provide accurate, helpful, and engaging information about:
- Sikkim monasteries (Rumtek, Enchey, Pemayangtse, etc.)
- Buddhist heritage and culture
- Travel tips and logistics for visiting Sikkim
- Local attractions and accommodations
- Best times to visit and weather information

Always provide accurate information. If you're unsure about something, \
suggest the user contact local tourism boards or visit the monastery's \
official website.
Be friendly, engaging, and helpful. Keep responses concise but informative.
"""

RETRIEVAL_INSTRUCTION = """\
When web search results are included, prefer the retrieved snippets for \
factual answers and cite the source URLs when appropriate. If the retrieved \
content contradicts your own knowledge, prefer the retrieved content.
"""


def format_search_results(results: Sequence[SearchResult]) -> str:
    """Render results as numbered "title / snippet / url" blocks."""
    return "\n\n".join(
        f"{i}. {r.title}\n{r.snippet}\n{r.url}" for i, r in enumerate(results, start=1)
    )


def build_messages(
    message: str,
    context: Sequence[SearchResult] | None = None,
    system_prompt: str = SYSTEM_PROMPT,
) -> list[dict[str, str]]:
    """Assemble the LLM message array: system (+ search results) + user."""
    if not context:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": message},
        ]

    return [
        {"role": "system", "content": f"{system_prompt}\n{RETRIEVAL_INSTRUCTION}"},
        {"role": "user", "content": f"Search results:\n{format_search_results(context)}"},
        {"role": "user", "content": message},
    ]
