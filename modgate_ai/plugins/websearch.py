"""Web search through the DuckDuckGo Instant Answer API.

No API key is needed. The API returns instant answers (abstracts, related
topics) rather than full web results, so it works best for well-known
people, places and concepts.

Search failures are returned as ``{"success": False, ...}`` values.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus

import httpx

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import BaseSchema, Capability

logger = logging.getLogger(__name__)

DUCKDUCKGO_API_URL = "https://api.duckduckgo.com/"
SEARCH_TIMEOUT = 10.0
MAX_RELATED_TOPICS = 5
MAX_RESULTS = 3


class SearchArgs(BaseSchema):
    query: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _fallback_url(query: str) -> str:
    return f"https://duckduckgo.com/?q={quote_plus(query)}"


def format_answer(query: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Turn a raw Instant Answer payload into text plus a list of sources."""
    lines: List[str] = []
    sources: List[Dict[str, str]] = []

    if data.get("Abstract"):
        lines.append(data["Abstract"])
        if data.get("AbstractURL"):
            source = data.get("AbstractSource") or "Source"
            sources.append({"title": source, "url": data["AbstractURL"], "type": "abstract"})
            lines.append(f"Source: {source} ({data['AbstractURL']})")
        lines.append("")

    topics = [t for t in data.get("RelatedTopics") or [] if t.get("Text") and t.get("FirstURL")]
    if topics:
        lines.append("Related topics:")
        for i, topic in enumerate(topics[:MAX_RELATED_TOPICS], start=1):
            lines.append(f"{i}. {topic['Text']}\n   {topic['FirstURL']}")
            sources.append({"title": topic["Text"][:100], "url": topic["FirstURL"], "type": "related"})
        lines.append("")

    results = data.get("Results") or []
    if results:
        if not lines:
            lines.append("Results:")
        for i, result in enumerate(results[:MAX_RESULTS], start=1):
            lines.append(f"{i}. {result.get('Text', '')}")
            if result.get("FirstURL"):
                lines.append(f"   {result['FirstURL']}")
                sources.append({"title": result.get("Text", ""), "url": result["FirstURL"], "type": "result"})

    text = "\n".join(lines).strip()
    if not text:
        text = (
            f'No detailed results found for "{query}". '
            "Try more specific or English terms.\n"
            f"Direct search: {_fallback_url(query)}"
        )

    return {
        "success": True,
        "service": "duckduckgo",
        "query": query,
        "result": text,
        "sources": sources,
        "rawData": {
            "hasAbstract": bool(data.get("Abstract")),
            "hasRelatedTopics": bool(data.get("RelatedTopics")),
            "hasResults": bool(results),
            "heading": data.get("Heading"),
            "abstractSource": data.get("AbstractSource"),
        },
        "timestamp": _now(),
    }


async def search_duckduckgo(query: str, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    """
    Query the Instant Answer API.

    Args:
        query: Search terms.
        client: Optional client to use (its lifetime is managed by the caller).

    Returns:
        The formatted answer, or a ``success: False`` payload on failure.
    """
    params = {"q": query, "format": "json", "no_html": "1", "skip_disambig": "1"}
    logger.debug(f"DuckDuckGo search: {query!r}")
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=SEARCH_TIMEOUT, follow_redirects=True) as own:
                response = await own.get(DUCKDUCKGO_API_URL, params=params)
        else:
            response = await client.get(DUCKDUCKGO_API_URL, params=params)
        response.raise_for_status()
        # DuckDuckGo serves JSON with a javascript content type.
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"DuckDuckGo search failed for {query!r}: {e}")
        return {
            "success": False,
            "error": f"DuckDuckGo search failed: {e}",
            "query": query,
            "fallbackUrl": _fallback_url(query),
            "timestamp": _now(),
        }
    return format_answer(query, data)


async def search(query: str) -> Dict[str, Any]:
    if not query.strip():
        return {"error": "Search query is required", "usage": "search <your query here>"}
    return await search_duckduckgo(query.strip())


async def status() -> Dict[str, Any]:
    probe = await search_duckduckgo("test")
    return {
        "service": "DuckDuckGo Instant Answer API",
        "status": "online" if probe.get("success") else "offline",
        "apiEndpoint": DUCKDUCKGO_API_URL,
        "apiKeyRequired": False,
    }


def help() -> Dict[str, Any]:
    return {
        "module": "Web Search",
        "service": "DuckDuckGo Instant Answer API",
        "commands": {
            "search <query>": "Search for information",
            "status": "Check if search is working",
            "help": "Show this help",
        },
        "tips": [
            "Best for famous people, places, concepts and definitions",
            "Limited for very recent events, niche topics and product searches",
            "Clear, specific English terms give the best results",
        ],
    }


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="websearch",
        name="Web Search Module (DuckDuckGo)",
        description="Web search using the DuckDuckGo Instant Answer API (no API key required)",
        capabilities=[Capability.read, Capability.search],
        commands={
            "search": CommandSpec("Search the web using DuckDuckGo Instant Answer API", search, SearchArgs),
            "status": CommandSpec("Check search service status", status),
            "help": CommandSpec("Show detailed help about web search", help),
        },
    )
