"""Medium-wide search tool."""

from __future__ import annotations

import json

from medium_mcp.models import dump
from medium_mcp.schemas import SearchArticlesInput
from medium_mcp.services.search_scraper import search_medium
from medium_mcp.utils.errors import tool_error


async def search_articles(arguments: dict) -> str:
    """Search all of Medium (scrapes the search results page)."""
    try:
        input_data = SearchArticlesInput(**arguments)
        response = await search_medium(input_data.query, limit=input_data.limit)
        return json.dumps(dump(response), indent=2, ensure_ascii=False)

    except Exception as e:
        raise tool_error("search_articles", e) from e
