"""Context-free web tools: Tavily search and plain page fetch."""

import logging
import re

import httpx
from bs4 import BeautifulSoup

from autofound.config import settings
from autofound.core.errors import ToolExecutionError
from autofound.tools import register_tool

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; AutofoundBot/1.0)"
MAX_PAGE_CHARS = 3000

_WS_RE = re.compile(r"\s+")


def html_to_text(html: str) -> str:
    """Return the visible text of *html*: no scripts, styles or comments, entities decoded."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return _WS_RE.sub(" ", soup.get_text(" ", strip=True))


@register_tool(
    "web_search",
    "Search the web for current information. Use this when you need up-to-date facts, news, or "
    "information you don't have.",
    {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "The search query"},
            "max_results": {
                "type": "number",
                "description": "Maximum number of results (default 5)",
            },
        },
        "required": ["query"],
    },
)
def web_search(query: str, max_results: int | None = None) -> str:
    """Query Tavily and format the answer plus the top results."""
    if not settings.TAVILY_API_KEY:
        raise ToolExecutionError("web search is not configured (TAVILY_API_KEY is unset)")

    payload = {
        "api_key": settings.TAVILY_API_KEY,
        "query": query,
        "max_results": int(max_results or 5),
        "include_answer": True,
    }
    with httpx.Client(timeout=settings.HTTP_TIMEOUT) as client:
        resp = client.post(settings.TAVILY_API_URL, json=payload)
    if resp.is_error:
        raise ToolExecutionError(f"Tavily search failed: {resp.status_code}")

    data = resp.json()
    output = ""
    if data.get("answer"):
        output += f"Answer: {data['answer']}\n\n"
    for result in data.get("results") or []:
        snippet = (result.get("content") or "")[:200]
        output += f"**{result.get('title', '')}**\n{result.get('url', '')}\n{snippet}\n\n"
    return output.strip() or "No results found."


@register_tool(
    "web_fetch",
    "Fetch and read the content of a web page. Use this to get detailed information from a "
    "specific URL.",
    {
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "The URL to fetch"},
        },
        "required": ["url"],
    },
)
def web_fetch(url: str) -> str:
    """Fetch *url* and return its visible text, truncated."""
    with httpx.Client(timeout=settings.HTTP_TIMEOUT, follow_redirects=True) as client:
        resp = client.get(url, headers={"User-Agent": USER_AGENT})
    if resp.is_error:
        raise ToolExecutionError(f"Fetch failed: {resp.status_code} {resp.reason_phrase}")
    return html_to_text(resp.text)[:MAX_PAGE_CHARS]
