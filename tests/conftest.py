"""Pytest configuration and fixtures for medium-mcp tests."""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, Mock

import pytest

from medium_mcp import config
from medium_mcp.browser_manager import BrowserManager
from medium_mcp.services.listing import COLLECT_CARDS_JS, COUNT_CARDS_JS


@pytest.fixture(autouse=True)
def medium_home(tmp_path, monkeypatch):
    """Point the config directory at a temp dir and reset cached state."""
    home = tmp_path / "medium-home"
    monkeypatch.setenv(config.HOME_ENV, str(home))
    monkeypatch.delenv(config.DOMAINS_ENV, raising=False)
    config.invalidate_domain_cache()
    yield home
    config.invalidate_domain_cache()
    BrowserManager._instance = None


class FakePage:
    """Stand-in for a Playwright page driven by canned card counts."""

    def __init__(self, counts=(0,), bundles=None, html="", button_visible=False):
        self.counts = list(counts)
        self.bundles = bundles or []
        self.html = html
        self.button = Mock()
        self.button.count = AsyncMock(return_value=1 if button_visible else 0)
        self.button.is_visible = AsyncMock(return_value=button_visible)
        self.button.click = AsyncMock()
        self.wait_for_timeout = AsyncMock()

    def locator(self, selector):
        locator = Mock()
        locator.first = self.button
        return locator

    async def evaluate(self, script, *args):
        if script == COUNT_CARDS_JS:
            return self.counts.pop(0) if len(self.counts) > 1 else self.counts[0]
        if script == COLLECT_CARDS_JS:
            return self.bundles
        return None

    async def content(self):
        return self.html


class FakeManager:
    """Records ``open_page`` calls and yields a canned page."""

    def __init__(self, page=None, error=None):
        self.page = page
        self.error = error
        self.calls = []

    @asynccontextmanager
    async def open_page(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        yield self.page


@pytest.fixture
def fake_page():
    return FakePage


@pytest.fixture
def fake_manager():
    return FakeManager


@pytest.fixture
def article_html() -> str:
    """A rendered Medium article page."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <title>Async Python in Practice | by Jane Doe | Medium</title>
        <meta name="author" content="Jane Meta">
        <meta name="description" content="A practical tour of asyncio for everyday services.">
        <meta property="og:title" content="Async Python in Practice">
        <meta property="article:published_time" content="2024-03-05T10:00:00.000Z">
    </head>
    <body>
        <nav><a href="/">Medium</a><a href="/m/signin">Sign in</a></nav>
        <article>
            <div class="post-body">
                <h1>Async Python in Practice</h1>
                <a rel="author" href="/@janedoe">Jane Byline</a>
                <p>Asynchronous programming in Python has matured a lot over the last few
                releases, and asyncio is now the default choice for network services.</p>
                <p>In this article we walk through event loops, tasks and cancellation,
                with examples taken from real services that handle thousands of requests.</p>
                <p>By the end you should be comfortable reading and writing async code,
                and you will know which pitfalls to avoid when mixing it with threads.</p>
            </div>
        </article>
        <footer><p>Sign up for the newsletter</p></footer>
    </body>
    </html>
    """


@pytest.fixture
def rss_xml() -> str:
    """An author feed with three posts."""
    return """<?xml version="1.0" encoding="UTF-8"?>
    <rss version="2.0"
         xmlns:dc="http://purl.org/dc/elements/1.1/"
         xmlns:content="http://purl.org/rss/1.0/modules/content/"
         xmlns:atom="http://www.w3.org/2005/Atom">
    <channel>
        <title>Stories by Alice on Medium</title>
        <link>https://medium.com/@alice</link>
        <description>Stories by Alice on Medium</description>
        <item>
            <title>Scaling Python Services</title>
            <link>https://medium.com/@alice/scaling-python-services-1a2b3c4d5e6f</link>
            <guid isPermaLink="false">https://medium.com/p/1a2b3c4d5e6f</guid>
            <category>python</category>
            <category>scalability</category>
            <dc:creator>Alice</dc:creator>
            <pubDate>Tue, 05 Mar 2024 10:00:00 GMT</pubDate>
            <atom:updated>2024-03-06T08:00:00.000Z</atom:updated>
            <content:encoded><![CDATA[<p>How we scaled our Python services to a million users.</p>]]></content:encoded>
        </item>
        <item>
            <title>Notes on Rust</title>
            <link>https://medium.com/@alice/notes-on-rust-abcdef123456</link>
            <guid isPermaLink="false">https://medium.com/p/abcdef123456</guid>
            <category>rust</category>
            <dc:creator>Alice</dc:creator>
            <pubDate>Mon, 04 Mar 2024 10:00:00 GMT</pubDate>
            <content:encoded><![CDATA[<p>Things I learned writing Rust for a year.</p>]]></content:encoded>
        </item>
        <item>
            <title>Writing Better Tests</title>
            <link>https://medium.com/@alice/writing-better-tests-0f0f0f0f0f0f</link>
            <guid isPermaLink="false">https://medium.com/p/0f0f0f0f0f0f</guid>
            <category>testing</category>
            <dc:creator>Alice</dc:creator>
            <pubDate>Sun, 03 Mar 2024 10:00:00 GMT</pubDate>
            <content:encoded><![CDATA[<p>Pytest fixtures and the art of small tests.</p>]]></content:encoded>
        </item>
    </channel>
    </rss>
    """


@pytest.fixture
def card_bundles() -> list[dict]:
    """Raw card bundles as returned by the listing script."""
    return [
        {
            "title": "First Post",
            "headingHref": "/@alice/first-post-abc123def?source=home",
            "links": [
                {"href": "/@alice?source=post_page", "text": "Alice"},
                {"href": "/@alice/first-post-abc123def?source=home", "text": "First Post"},
            ],
            "excerpt": "An opening excerpt",
            "datetime": None,
            "text": "Alice · 5 min read · 3 days ago",
            "claps": "1.2K",
        },
        {
            # Same post reached through a different tracking query
            "title": "First Post",
            "headingHref": "/@alice/first-post-abc123def?source=search",
            "links": [{"href": "/@alice/first-post-abc123def?source=search", "text": "First Post"}],
            "excerpt": None,
            "datetime": None,
            "text": "",
            "claps": None,
        },
        {
            "title": "",
            "headingHref": "/@alice/untitled-0123456789",
            "links": [],
            "excerpt": None,
            "datetime": None,
            "text": "",
            "claps": None,
        },
        {
            "title": "No Link Here",
            "headingHref": None,
            "links": [],
            "excerpt": None,
            "datetime": None,
            "text": "",
            "claps": None,
        },
        {
            "title": "Data Pipelines",
            "headingHref": None,
            "links": [
                {"href": "/@bob", "text": ""},
                {"href": "https://medium.com/towards-data-science/data-pipelines-1a2b3c4d", "text": "Data Pipelines"},
            ],
            "excerpt": "Building reliable pipelines",
            "datetime": "2024-01-05T00:00:00.000Z",
            "text": "Bob in Towards Data Science · 12 min read",
            "claps": "87",
        },
    ]
