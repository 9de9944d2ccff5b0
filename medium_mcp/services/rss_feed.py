"""Author RSS feed: fast and stable, but only the ~10 most recent posts."""

from __future__ import annotations

import logging
from typing import Optional

import feedparser
import httpx

from medium_mcp.config import USER_AGENT, author_feed_url
from medium_mcp.models import AuthorArticle, AuthorArticlesResponse, validate_result
from medium_mcp.utils.errors import MediumError
from medium_mcp.utils.parser import html_to_text

logger = logging.getLogger(__name__)

_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/rss+xml, application/xml;q=0.9, */*;q=0.8",
}
_SNIPPET_LENGTH = 300
_TIMEOUT_SECONDS = 15.0


def _snippet(html: Optional[str]) -> Optional[str]:
    if not html:
        return None
    text = " ".join(html_to_text(html).split())
    if not text:
        return None
    if len(text) > _SNIPPET_LENGTH:
        text = text[:_SNIPPET_LENGTH].rsplit(" ", 1)[0] + "…"
    return text


def _entry_to_record(entry) -> Optional[AuthorArticle]:
    link = entry.get("link")
    if not link:
        logger.warning("Skipping feed entry without a link: %r", entry.get("title"))
        return None

    content = None
    if entry.get("content"):
        content = entry["content"][0].get("value") or None

    return validate_result(AuthorArticle, {
        "title": entry.get("title") or "Untitled",
        "url": link,
        "published_at": entry.get("published"),
        # feedparser answers "updated" with the publish date when the entry has none
        "updated_at": entry["updated"] if "updated" in entry else None,
        "author": entry.get("author"),
        "excerpt": _snippet(entry.get("summary") or content),
        "categories": [tag.get("term") for tag in entry.get("tags", []) if tag.get("term")],
        "content": content,
        "source": "rss",
    })


async def fetch_author_articles_from_rss(
    username: str, client: Optional[httpx.AsyncClient] = None
) -> AuthorArticlesResponse:
    """Fetch ``https://medium.com/feed/@username`` and map its entries."""
    feed_url = author_feed_url(username)
    logger.info("Fetching RSS feed %s", feed_url)

    try:
        if client is None:
            async with httpx.AsyncClient(
                headers=_HEADERS, timeout=_TIMEOUT_SECONDS, follow_redirects=True
            ) as own_client:
                response = await own_client.get(feed_url)
        else:
            response = await client.get(feed_url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Failed to fetch RSS feed for %s: %s", username, e)
        raise MediumError.rss_feed(username, f"Failed to fetch RSS feed: {e}", cause=e) from e

    feed = feedparser.parse(response.content)
    if feed.bozo and not feed.entries:
        logger.error("Unparseable RSS feed for %s: %s", username, feed.get("bozo_exception"))
        raise MediumError.rss_feed(
            username, f"Invalid RSS feed: {feed.get('bozo_exception')}", cause=feed.get("bozo_exception")
        )
    if feed.bozo:
        logger.warning("RSS feed for %s parsed with warnings: %s", username, feed.get("bozo_exception"))

    articles = [record for record in map(_entry_to_record, feed.entries) if record is not None]
    logger.info("RSS feed for %s returned %d article(s)", username, len(articles))

    # The platform caps feeds to the most recent posts, so more may exist
    return validate_result(AuthorArticlesResponse, {
        "username": username,
        "article_count": len(articles),
        "articles": articles,
        "source": "rss",
        "has_more": True,
    })


def filter_articles_by_keyword(articles: list[AuthorArticle], keyword: str) -> list[AuthorArticle]:
    """Case-insensitive substring match on title, excerpt or categories."""
    needle = keyword.lower()
    return [
        article for article in articles
        if needle in article.title.lower()
        or (article.excerpt and needle in article.excerpt.lower())
        or any(needle in category.lower() for category in article.categories)
    ]


def apply_keyword_filter(response: AuthorArticlesResponse, keyword: Optional[str]) -> AuthorArticlesResponse:
    if not keyword:
        return response
    articles = filter_articles_by_keyword(response.articles, keyword)
    return response.model_copy(update={"articles": articles, "article_count": len(articles)})
