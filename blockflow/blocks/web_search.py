"""Web search block: DuckDuckGo, Brave or Google Custom Search via httpx."""

import logging
from typing import Any

import httpx

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import to_text
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec

logger = logging.getLogger(__name__)

DUCKDUCKGO_URL = "https://api.duckduckgo.com/"
BRAVE_URL = "https://api.search.brave.com/res/v1/web/search"
GOOGLE_URL = "https://www.googleapis.com/customsearch/v1"


async def search_duckduckgo(client: httpx.AsyncClient, query: str, max_results: int) -> list[dict]:
    """Instant Answer API; no key needed. Failures degrade to no results."""
    try:
        response = await client.get(
            DUCKDUCKGO_URL,
            params={"q": query, "format": "json", "no_html": "1", "skip_disambig": "1"},
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"DuckDuckGo search error: {e}")
        return []

    results = []
    if data.get("Abstract"):
        results.append(
            {
                "title": data.get("Heading") or query,
                "snippet": data["Abstract"],
                "url": data.get("AbstractURL") or f"https://duckduckgo.com/?q={query}",
            }
        )
    for topic in (data.get("RelatedTopics") or [])[: max(max_results - 1, 0)]:
        text = topic.get("Text") if isinstance(topic, dict) else None
        if text and topic.get("FirstURL"):
            results.append(
                {"title": text.split(" - ")[0] or text[:50], "snippet": text, "url": topic["FirstURL"]}
            )
    return results[:max_results]


async def search_brave(
    client: httpx.AsyncClient, query: str, api_key: str, max_results: int, safe_search: bool
) -> list[dict]:
    response = await client.get(
        BRAVE_URL,
        params={"q": query, "count": str(max_results), "safesearch": "strict" if safe_search else "off"},
        headers={"X-Subscription-Token": api_key, "Accept": "application/json"},
    )
    if response.status_code != 200:
        raise BlockError(f"Brave search failed: Brave API error: {response.status_code}")
    web = response.json().get("web") or {}
    return [
        {"title": r.get("title"), "snippet": r.get("description"), "url": r.get("url")}
        for r in web.get("results") or []
    ]


async def search_google(
    client: httpx.AsyncClient,
    query: str,
    api_key: str,
    engine_id: str,
    max_results: int,
    safe_search: bool,
) -> list[dict]:
    response = await client.get(
        GOOGLE_URL,
        params={
            "q": query,
            "key": api_key,
            "cx": engine_id,
            "num": str(min(max(max_results, 1), 10)),
            "safe": "active" if safe_search else "off",
        },
    )
    if response.status_code != 200:
        raise BlockError(f"Google search failed: Google API error: {response.status_code}")
    return [
        {"title": item.get("title"), "snippet": item.get("snippet"), "url": item.get("link")}
        for item in response.json().get("items") or []
    ]


@register_block()
class WebSearchBlock(BlockDefinition):
    """
    Search the web using the input as the query.

    ``result_format`` is ``summary`` (title/snippet/url), ``urls`` (list of
    URLs) or ``full`` (whatever the engine returned).
    """

    block_type = "webSearch"
    label = "Web Search"
    description = "Search the web and return results"
    default_config = {
        "search_engine": "duckduckgo",
        "api_key": "",
        "google_search_engine_id": "",
        "max_results": 5,
        "safe_search": True,
        "result_format": "summary",
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        engine = config.get("search_engine", "duckduckgo")
        api_key = config.get("api_key", "")
        max_results = int(config.get("max_results", 5))
        safe_search = bool(config.get("safe_search", True))

        query = to_text(input) if input is not None else ""
        if not query.strip():
            raise BlockError("Search query is required")

        try:
            async with context.http_client() as client:
                if engine == "duckduckgo":
                    results = await search_duckduckgo(client, query, max_results)
                elif engine == "brave":
                    if not api_key:
                        raise BlockError("Brave search requires an API key")
                    results = await search_brave(client, query, api_key, max_results, safe_search)
                elif engine == "google":
                    if not api_key:
                        raise BlockError("Google search requires an API key")
                    engine_id = config.get("google_search_engine_id", "")
                    if not engine_id:
                        raise BlockError("Google search requires a Search Engine ID (cx)")
                    results = await search_google(
                        client, query, api_key, engine_id, max_results, safe_search
                    )
                else:
                    raise BlockError(f"Unsupported search engine: {engine}")
        except BlockError as e:
            raise BlockError(f"Web search failed: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise BlockError(f"Web search failed: {e}") from e

        result_format = config.get("result_format", "summary")
        if result_format == "summary":
            return [{"title": r["title"], "snippet": r["snippet"], "url": r["url"]} for r in results]
        if result_format == "urls":
            return [r["url"] for r in results]
        return results
