"""Medium-wide search via the search results page.

Medium renders ~10 results and a "Show more" button.  ``load_more_results``
clicks it until enough cards are loaded, the button disappears, the click
budget runs out, or a click stops adding results.
"""

from __future__ import annotations

import logging
from typing import Optional

from medium_mcp.browser_manager import BrowserManager
from medium_mcp.config import TIMEOUTS, max_show_more_clicks, search_url
from medium_mcp.models import SearchResponse, SearchResult, validate_result
from medium_mcp.services.listing import (
    CARD_SELECTOR,
    ListingItem,
    collect_cards,
    count_cards,
    parse_cards,
    scroll_to_bottom,
)
from medium_mcp.utils.errors import MediumError

logger = logging.getLogger(__name__)

SHOW_MORE_SELECTOR = 'button:has-text("Show more")'
SETTLE_DELAY_MS = 2000


async def load_more_results(
    page,
    target: int,
    max_clicks: int,
    settle_delay_ms: int = SETTLE_DELAY_MS,
    show_more_selector: str = SHOW_MORE_SELECTOR,
) -> int:
    """Click "Show more" until ``target`` cards are loaded. Returns the click count."""
    clicks = 0
    loaded = await count_cards(page)

    while loaded < target and clicks < max_clicks:
        button = page.locator(show_more_selector).first
        if await button.count() == 0 or not await button.is_visible():
            logger.debug("No visible 'Show more' control after %d click(s)", clicks)
            break

        await scroll_to_bottom(page)
        try:
            await button.click(timeout=TIMEOUTS.selector)
        except Exception as e:
            logger.debug("'Show more' click failed: %s", e)
            break
        await page.wait_for_timeout(settle_delay_ms)
        clicks += 1

        now_loaded = await count_cards(page)
        if now_loaded <= loaded:
            logger.info("Search results stopped growing at %d after %d click(s)", loaded, clicks)
            break
        loaded = now_loaded

    return clicks


async def search_medium(
    query: str,
    limit: int = 10,
    manager: Optional[BrowserManager] = None,
) -> SearchResponse:
    """Search all of Medium and return up to ``limit`` results."""
    url = search_url(query)
    logger.info("Searching Medium for %r (limit=%d)", query, limit)

    manager = manager or await BrowserManager.get_instance()
    try:
        async with manager.open_page(
            url,
            ready_selector=CARD_SELECTOR,
            navigation_timeout_ms=TIMEOUTS.navigation,
            selector_timeout_ms=TIMEOUTS.selector,
        ) as page:
            clicks = await load_more_results(page, limit, max_show_more_clicks(limit))
            bundles = await collect_cards(page)
    except MediumError:
        raise
    except Exception as e:
        logger.error("Search failed for %r: %s", query, e)
        raise MediumError.search_scraper(query, str(e) or "Unknown error", cause=e) from e

    results = [_to_record(item) for item in parse_cards(bundles, limit)]
    logger.info("Search for %r returned %d result(s) after %d click(s)", query, len(results), clicks)

    return validate_result(SearchResponse, {
        "query": query,
        "result_count": len(results),
        "results": results,
        "has_more": len(results) >= limit,
    })


def _to_record(item: ListingItem) -> SearchResult:
    return validate_result(SearchResult, {
        "title": item.title,
        "url": item.url,
        "author": item.author,
        "published_at": item.published_at,
        "excerpt": item.excerpt,
        "claps": item.claps,
        "reading_time": item.reading_time,
        "publication": item.publication,
    })
