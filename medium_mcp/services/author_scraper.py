"""Author page scraping.

Returns more posts and metadata than the RSS feed, at the cost of a browser
round-trip and a higher chance of tripping bot detection.
"""

from __future__ import annotations

import logging
from typing import Optional

from medium_mcp.browser_manager import BrowserManager
from medium_mcp.config import TIMEOUTS, author_url
from medium_mcp.models import AuthorArticle, AuthorArticlesResponse, validate_result
from medium_mcp.services.listing import (
    CARD_SELECTOR,
    ListingItem,
    collect_cards,
    parse_cards,
    scroll_to_bottom,
)
from medium_mcp.utils.errors import MediumError

logger = logging.getLogger(__name__)

DEFAULT_SCROLL_COUNT = 3
SCROLL_DELAY_MS = 1500


async def scrape_author_articles(
    username: str,
    limit: int = 20,
    scroll_count: int = DEFAULT_SCROLL_COUNT,
    scroll_delay_ms: int = SCROLL_DELAY_MS,
    manager: Optional[BrowserManager] = None,
) -> AuthorArticlesResponse:
    """Scrape up to ``limit`` posts from ``https://medium.com/@username``."""
    url = author_url(username)
    logger.info("Scraping author page %s (limit=%d)", url, limit)

    manager = manager or await BrowserManager.get_instance()
    try:
        async with manager.open_page(
            url,
            ready_selector=CARD_SELECTOR,
            navigation_timeout_ms=TIMEOUTS.navigation,
            selector_timeout_ms=TIMEOUTS.selector,
        ) as page:
            for _ in range(scroll_count):
                await scroll_to_bottom(page)
                await page.wait_for_timeout(scroll_delay_ms)
            bundles = await collect_cards(page)
    except MediumError:
        raise
    except Exception as e:
        logger.error("Failed to scrape author page for %s: %s", username, e)
        raise MediumError.author_scraper(username, str(e) or "Unknown error", cause=e) from e

    items = parse_cards(bundles, limit)
    articles = [_to_record(item, username) for item in items]
    logger.info("Scraped %d article(s) for %s", len(articles), username)

    return validate_result(AuthorArticlesResponse, {
        "username": username,
        "article_count": len(articles),
        "articles": articles,
        "source": "scrape",
        "has_more": len(articles) >= limit,
    })


def _to_record(item: ListingItem, username: str) -> AuthorArticle:
    return validate_result(AuthorArticle, {
        "title": item.title,
        "url": item.url,
        "published_at": item.published_at,
        "author": item.author or username,
        "excerpt": item.excerpt,
        "categories": item.categories,
        "claps": item.claps,
        "reading_time": item.reading_time,
        "source": "scrape",
    })
