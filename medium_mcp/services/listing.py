"""Listing extraction shared by the author page and search scrapers.

The browser side is one ``page.evaluate`` call returning a raw bundle per
result card.  Everything else (link choice, URL normalisation, date and
clap parsing, dedup, limit) is plain Python over those bundles.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

from medium_mcp.config import MEDIUM_BASE_URL

logger = logging.getLogger(__name__)

CARD_SELECTOR = "article"

# Returns [{title, headingHref, links: [{href, text}], excerpt, datetime, text, claps}]
COLLECT_CARDS_JS = """
(cardSelector) => {
    const clean = (s) => (s || '').replace(/\\s+/g, ' ').trim();
    const bundles = [];
    document.querySelectorAll(cardSelector).forEach((card) => {
        const heading = card.querySelector('h2, h3');
        const headingLink = heading ? heading.closest('a') || heading.querySelector('a') : null;

        const links = Array.from(card.querySelectorAll('a[href]')).map((a) => ({
            href: a.getAttribute('href'),
            text: clean(a.textContent),
        }));

        let excerpt = null;
        for (const el of card.querySelectorAll('p, h3, h4')) {
            if (el === heading) continue;
            const t = clean(el.textContent);
            if (t) { excerpt = t; break; }
        }

        const time = card.querySelector('time');

        let claps = null;
        const clapIcon = card.querySelector('[aria-label*="clap" i], svg[class*="clap" i]');
        if (clapIcon) {
            let holder = clapIcon.parentElement;
            for (let i = 0; i < 3 && holder && claps === null; i++) {
                for (const span of holder.querySelectorAll('span, p')) {
                    const t = clean(span.textContent);
                    if (/^\\d[\\d.,]*[KkMm]?$/.test(t)) { claps = t; break; }
                }
                holder = holder.parentElement;
            }
        }

        bundles.push({
            title: heading ? clean(heading.textContent) : null,
            headingHref: headingLink ? headingLink.getAttribute('href') : null,
            links: links,
            excerpt: excerpt,
            datetime: time ? time.getAttribute('datetime') : null,
            text: clean(card.innerText || card.textContent),
            claps: claps,
        });
    });
    return bundles;
}
"""

COUNT_CARDS_JS = "(cardSelector) => document.querySelectorAll(cardSelector).length"

SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"

# "/@user/some-slug-1a2b3c", "/p/1a2b3c", "/publication/some-slug-1a2b3c"
_POST_PATH_RE = re.compile(r"^/(?:p/[^/]+|@[^/]+/[^/]+|[^@/][^/]*/[^/]+-[0-9a-f]{6,})/?$")
_PROFILE_PATH_RE = re.compile(r"^/@([^/?#]+)/?$")
_USERNAME_RE = re.compile(r"@([^/?#]+)")
_RELATIVE_DATE_RE = re.compile(
    r"\b(\d+)\s*(?:([smhdwy])|(sec|second|min|minute|hour|day|week|month|year)s?)\s+ago\b",
    re.IGNORECASE,
)
_CALENDAR_DATE_RE = re.compile(
    r"\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2}(?:,\s*\d{4})?\b"
)
_READING_TIME_RE = re.compile(r"(\d+)\s*min read", re.IGNORECASE)
_CLAPS_RE = re.compile(r"^(\d+(?:[.,]\d+)?)\s*([KkMm]?)$")
_NON_PUBLICATION_SEGMENTS = {"p", "m", "tag", "search", "me", "plans", "membership"}


@dataclass
class ListingItem:
    """One scraped result card, before it becomes an API record."""

    title: str
    url: str
    author: Optional[str] = None
    excerpt: Optional[str] = None
    published_at: Optional[str] = None
    reading_time: Optional[str] = None
    claps: Optional[int] = None
    publication: Optional[str] = None
    categories: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def normalize_url(href: Optional[str], base: str = MEDIUM_BASE_URL) -> Optional[str]:
    """Absolute URL with query string and fragment removed."""
    if not href or href.startswith(("javascript:", "mailto:", "#")):
        return None
    parsed = urlparse(urljoin(base + "/", href))
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return urlunparse(parsed._replace(query="", fragment="", params=""))


def _path(href: str) -> str:
    return urlparse(urljoin(MEDIUM_BASE_URL + "/", href)).path


def pick_post_link(heading_href: Optional[str], links: list[dict]) -> Optional[str]:
    """Choose the card's post link.

    The anchor wrapping the heading wins, then the first anchor whose path
    looks like a post, then the first author-profile or ``/p/`` anchor.
    """
    hrefs = [link.get("href") for link in links if link.get("href")]
    if heading_href and _POST_PATH_RE.match(_path(heading_href)):
        return heading_href
    for href in hrefs:
        if _POST_PATH_RE.match(_path(href)):
            return href
    for href in hrefs:
        if "/@" in href or "/p/" in href:
            return href
    return heading_href


def username_from_href(href: Optional[str]) -> Optional[str]:
    if not href:
        return None
    match = _USERNAME_RE.search(href)
    return match.group(1) if match else None


def author_from_links(links: list[dict]) -> Optional[str]:
    """Visible text of the first profile link, else the username in its path."""
    profile_href = None
    for link in links:
        href = link.get("href") or ""
        if not _PROFILE_PATH_RE.match(_path(href)):
            continue
        text = (link.get("text") or "").strip()
        if text:
            return text
        profile_href = profile_href or href
    return username_from_href(profile_href)


def parse_published(datetime_attr: Optional[str], text: Optional[str]) -> Optional[str]:
    """``<time datetime>`` when present, else a date-looking token in the card text."""
    if datetime_attr:
        return datetime_attr.strip() or None
    if not text:
        return None
    for pattern in (_RELATIVE_DATE_RE, _CALENDAR_DATE_RE):
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def parse_reading_time(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    match = _READING_TIME_RE.search(text)
    return f"{match.group(1)} min read" if match else None


def parse_claps(raw: Optional[str]) -> Optional[int]:
    """``"1.2K"`` -> 1200, ``"87"`` -> 87."""
    if not raw:
        return None
    match = _CLAPS_RE.match(raw.strip())
    if not match:
        return None
    number = float(match.group(1).replace(",", "."))
    multiplier = {"k": 1_000, "m": 1_000_000}.get(match.group(2).lower(), 1)
    return int(round(number * multiplier))


def publication_from(links: list[dict], post_url: str) -> Optional[str]:
    for link in links:
        href = link.get("href") or ""
        text = (link.get("text") or "").strip()
        if "/publication/" in href and text:
            return text

    segments = [s for s in urlparse(post_url).path.split("/") if s]
    if len(segments) >= 2 and not segments[0].startswith("@") and segments[0] not in _NON_PUBLICATION_SEGMENTS:
        return segments[0]
    return None


# ---------------------------------------------------------------------------
# Bundles -> items
# ---------------------------------------------------------------------------

def parse_card(bundle: dict, base_url: str = MEDIUM_BASE_URL) -> Optional[ListingItem]:
    title = (bundle.get("title") or "").strip()
    links = bundle.get("links") or []
    url = normalize_url(pick_post_link(bundle.get("headingHref"), links), base_url)
    if not title or not url:
        return None

    text = bundle.get("text") or ""
    return ListingItem(
        title=title,
        url=url,
        author=author_from_links(links),
        excerpt=(bundle.get("excerpt") or "").strip() or None,
        published_at=parse_published(bundle.get("datetime"), text),
        reading_time=parse_reading_time(text),
        claps=parse_claps(bundle.get("claps")),
        publication=publication_from(links, url),
    )


def parse_cards(bundles: list[dict], limit: int, base_url: str = MEDIUM_BASE_URL) -> list[ListingItem]:
    """Parse bundles in document order, dropping incomplete and duplicate cards."""
    items: list[ListingItem] = []
    seen: set[str] = set()

    for index, bundle in enumerate(bundles):
        if len(items) >= limit:
            break
        try:
            item = parse_card(bundle, base_url)
        except Exception as e:
            logger.debug("Skipping card %d: %s", index, e)
            continue
        if item is None or item.url in seen:
            continue
        seen.add(item.url)
        items.append(item)

    return items


# ---------------------------------------------------------------------------
# Page helpers
# ---------------------------------------------------------------------------

async def collect_cards(page, card_selector: str = CARD_SELECTOR) -> list[dict]:
    bundles = await page.evaluate(COLLECT_CARDS_JS, card_selector)
    return bundles or []


async def count_cards(page, card_selector: str = CARD_SELECTOR) -> int:
    return int(await page.evaluate(COUNT_CARDS_JS, card_selector) or 0)


async def scroll_to_bottom(page) -> None:
    await page.evaluate(SCROLL_TO_BOTTOM_JS)
