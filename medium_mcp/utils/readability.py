"""Readable-article isolation.

Wraps ``readability-lxml`` to isolate the main content subtree of a rendered
page, and derives the pieces it does not report itself: a display title,
the byline and a short excerpt.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup, Tag
from readability import Document
from readability.readability import Unparseable

from medium_mcp.utils.parser import meta_content

logger = logging.getLogger(__name__)

_BYLINE_RE = re.compile(r"byline|author|writtenby|p-author", re.IGNORECASE)
_MAX_BYLINE_LENGTH = 100
_MAX_EXCERPT_LENGTH = 300
# Same floor readability-lxml uses before retrying with a less strict pass
MIN_TEXT_LENGTH = 250
_CHROME_TAGS = ("nav", "header", "footer", "aside")


@dataclass(frozen=True)
class ReadableArticle:
    title: str
    content_html: str
    text_length: int
    byline: Optional[str] = None
    excerpt: Optional[str] = None


def parse_readable(html: str, url: str) -> Optional[ReadableArticle]:
    """Run readability over ``html``; ``None`` when no main content is found.

    ``url`` roots the document so relative links in the content become
    absolute.
    """
    if not html or not html.strip():
        return None

    doc = Document(html, url=url)
    try:
        content_html = doc.summary(html_partial=True)
    except Unparseable as e:
        logger.warning("Readability could not parse %s: %s", url, e)
        return None

    content = BeautifulSoup(content_html, "lxml")
    # readability falls back to the whole <body> when it finds no article
    for tag in content(_CHROME_TAGS):
        tag.decompose()
    text = content.get_text(" ", strip=True)
    if len(text) < MIN_TEXT_LENGTH:
        logger.info("No readable main body on %s (%d chars of text)", url, len(text))
        return None

    page = BeautifulSoup(html, "lxml")
    return ReadableArticle(
        title=_title(page, doc),
        content_html=str(content),
        text_length=len(text),
        byline=_byline(page),
        excerpt=_excerpt(page, content),
    )


def _title(page: BeautifulSoup, doc: Document) -> str:
    title = meta_content(page, property="og:title") or meta_content(page, name="twitter:title")
    if title:
        return title
    try:
        return doc.short_title().strip()
    except Exception as e:
        logger.debug("short_title failed: %s", e)
        return ""


def _byline(page: BeautifulSoup) -> Optional[str]:
    """Find the visible author line the way Mozilla's Readability does."""
    candidates = page.select('[rel="author"], [itemprop~="author"]')
    candidates += [
        tag for tag in page.find_all(True)
        if _BYLINE_RE.search(" ".join(tag.get("class") or []) + " " + (tag.get("id") or ""))
    ]
    for tag in candidates:
        if not isinstance(tag, Tag) or tag.name == "meta":
            continue
        text = tag.get_text(" ", strip=True)
        if text and len(text) <= _MAX_BYLINE_LENGTH:
            return text
    return None


def _excerpt(page: BeautifulSoup, content: BeautifulSoup) -> Optional[str]:
    excerpt = meta_content(page, name="description") or meta_content(page, property="og:description")
    if not excerpt:
        first = content.find("p")
        excerpt = first.get_text(" ", strip=True) if isinstance(first, Tag) else None
    if not excerpt:
        return None
    if len(excerpt) > _MAX_EXCERPT_LENGTH:
        excerpt = excerpt[:_MAX_EXCERPT_LENGTH].rsplit(" ", 1)[0] + "…"
    return excerpt
