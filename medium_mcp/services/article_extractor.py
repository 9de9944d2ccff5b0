"""Article extraction: rendered page -> readability -> Markdown -> ``Article``.

Flow:
1. Open the URL in a headless context carrying the saved login state
2. Snapshot the rendered HTML
3. Isolate the main content with readability (rooted at the article URL)
4. Convert it to Markdown (ATX headings, fenced code)
5. Enrich with ``author`` / ``article:published_time`` meta tags
6. Validate the assembled record
"""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup

from medium_mcp.browser_manager import BrowserManager, is_challenge_title
from medium_mcp.config import TIMEOUTS
from medium_mcp.models import Article, validate_result
from medium_mcp.utils.errors import ErrorKind, MediumError
from medium_mcp.utils.parser import html_to_markdown, meta_content
from medium_mcp.utils.readability import parse_readable

logger = logging.getLogger(__name__)


def build_article(url: str, html: str) -> Article:
    """Turn a rendered article page into a validated ``Article``."""
    head = BeautifulSoup(html, "lxml")
    page_title = head.title.get_text(strip=True) if head.title else None
    if is_challenge_title(page_title):
        raise MediumError.article_extraction(
            url, f"Blocked by a bot challenge page ({page_title!r})"
        )

    readable = parse_readable(html, url)
    if readable is None:
        raise MediumError.article_extraction(url, "Failed to extract article content")

    markdown = html_to_markdown(readable.content_html, base_url=url)
    if not markdown.strip():
        raise MediumError.article_extraction(url, "Extracted article content is empty")

    author_meta = meta_content(head, name="author")
    published_meta = meta_content(head, property="article:published_time")

    return validate_result(Article, {
        "title": readable.title or "Untitled",
        "author": author_meta or readable.byline,
        "published_at": published_meta,
        "content": markdown,
        "excerpt": readable.excerpt,
        "url": url,
    })


async def extract_article(url: str, manager: Optional[BrowserManager] = None) -> Article:
    """Fetch ``url`` in the shared browser and extract the article."""
    manager = manager or await BrowserManager.get_instance()
    logger.info("Extracting article %s", url)

    try:
        async with manager.open_page(
            url,
            use_session=True,
            ready_selector="article",
            navigation_timeout_ms=TIMEOUTS.article_navigation,
            selector_timeout_ms=TIMEOUTS.article_selector,
        ) as page:
            html = await page.content()
        article = build_article(url, html)
    except MediumError as e:
        if e.kind is not ErrorKind.VALIDATION:
            logger.warning("Article extraction failed for %s: %s", url, e.message)
        raise
    except Exception as e:
        logger.error("Article extraction failed for %s: %s", url, e)
        raise MediumError.article_extraction(url, str(e) or "Unknown error", cause=e) from e

    logger.info("Extracted %r (%d chars of markdown)", article.title, len(article.content))
    return article
