"""Author listing tools (RSS feed or author page scraping)."""

from __future__ import annotations

import json

from medium_mcp.models import dump
from medium_mcp.schemas import ListAuthorArticlesInput, SearchAuthorArticlesInput
from medium_mcp.services.author_scraper import scrape_author_articles
from medium_mcp.services.rss_feed import (
    apply_keyword_filter,
    fetch_author_articles_from_rss,
    filter_articles_by_keyword,
)
from medium_mcp.utils.errors import tool_error


async def list_author_articles(arguments: dict) -> str:
    """List an author's articles, optionally filtered by keyword."""
    try:
        input_data = ListAuthorArticlesInput(**arguments)

        if input_data.source == "rss":
            response = await fetch_author_articles_from_rss(input_data.username)
        else:
            response = await scrape_author_articles(input_data.username, limit=input_data.limit)

        response = apply_keyword_filter(response, input_data.keyword)
        return json.dumps(dump(response), indent=2, ensure_ascii=False)

    except Exception as e:
        raise tool_error("list_author_articles", e) from e


async def search_author_articles(arguments: dict) -> str:
    """Keyword search within an author's recent (RSS) articles."""
    try:
        input_data = SearchAuthorArticlesInput(**arguments)
        response = await fetch_author_articles_from_rss(input_data.username)
        matches = filter_articles_by_keyword(response.articles, input_data.keyword)

        result = {
            "username": input_data.username,
            "keyword": input_data.keyword,
            "matchCount": len(matches),
            "articles": [dump(article) for article in matches],
            "note": "Search is limited to author's ~10 most recent articles from RSS feed",
        }
        return json.dumps(result, indent=2, ensure_ascii=False)

    except Exception as e:
        raise tool_error("search_author_articles", e) from e
