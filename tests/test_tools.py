"""Tests for the MCP tool handlers and their error envelopes."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from fastmcp.exceptions import ToolError

from medium_mcp import config, session_store
from medium_mcp.models import Article, AuthorArticle, AuthorArticlesResponse, SearchResponse
from medium_mcp.tools import articles, auth, authors, domains, search
from medium_mcp.utils.errors import MediumError

ARTICLE_URL = "https://medium.com/@alice/a-post-1a2b3c4d5e6f"


def _payload(exc_info) -> dict:
    return json.loads(str(exc_info.value))


def _author_response(source: str = "rss") -> AuthorArticlesResponse:
    items = [
        AuthorArticle(
            title="Scaling Python Services",
            url="https://medium.com/@alice/scaling-1a2b3c",
            categories=["python"],
            source=source,
        ),
        AuthorArticle(
            title="Notes on Rust",
            url="https://medium.com/@alice/rust-4d5e6f",
            excerpt="A year of Rust",
            source=source,
        ),
    ]
    return AuthorArticlesResponse(
        username="alice",
        article_count=len(items),
        articles=items,
        source=source,
        has_more=source == "rss",
    )


class TestReadArticle:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        article = Article(
            title="A Post",
            author="Alice",
            published_at="2024-03-05T10:00:00.000Z",
            content="# A Post\n\nBody",
            url=ARTICLE_URL,
        )
        with patch("medium_mcp.tools.articles.extract_article", AsyncMock(return_value=article)) as mock_extract:
            result = json.loads(await articles.read_article({"url": ARTICLE_URL}))

        mock_extract.assert_awaited_once_with(ARTICLE_URL)
        assert result["title"] == "A Post"
        assert result["publishedAt"] == "2024-03-05T10:00:00.000Z"
        assert result["content"].startswith("# A Post")

    @pytest.mark.asyncio
    async def test_rejects_non_medium_url(self) -> None:
        with patch("medium_mcp.tools.articles.extract_article", AsyncMock()) as mock_extract:
            with pytest.raises(ToolError) as exc_info:
                await articles.read_article({"url": "https://example.com/post"})

        assert "Invalid URL" in _payload(exc_info)["error"]
        mock_extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_relative_url(self) -> None:
        with pytest.raises(ToolError) as exc_info:
            await articles.read_article({"url": "/@alice/post"})

        assert _payload(exc_info)["error"] == "Invalid input"

    @pytest.mark.asyncio
    async def test_extraction_failure_envelope(self) -> None:
        error = MediumError.article_extraction(ARTICLE_URL, "Failed to extract article content")
        with patch("medium_mcp.tools.articles.extract_article", AsyncMock(side_effect=error)):
            with pytest.raises(ToolError) as exc_info:
                await articles.read_article({"url": ARTICLE_URL})

        payload = _payload(exc_info)
        assert payload["error"] == "Failed to extract article content"
        assert "Member-only content" in payload["details"]

    @pytest.mark.asyncio
    async def test_custom_domain_allowed_after_add(self) -> None:
        await domains.add_domain({"domain": "blog.example.com"})
        article = Article(title="T", content="Body", url="https://blog.example.com/post-1a2b3c")

        with patch("medium_mcp.tools.articles.extract_article", AsyncMock(return_value=article)):
            result = json.loads(await articles.read_article({"url": "https://blog.example.com/post-1a2b3c"}))

        assert result["url"] == "https://blog.example.com/post-1a2b3c"


class TestAuthorTools:
    @pytest.mark.asyncio
    async def test_list_from_rss(self) -> None:
        with patch(
            "medium_mcp.tools.authors.fetch_author_articles_from_rss",
            AsyncMock(return_value=_author_response()),
        ) as mock_fetch:
            result = json.loads(await authors.list_author_articles({"username": "@alice"}))

        mock_fetch.assert_awaited_once_with("alice")
        assert result["articleCount"] == 2
        assert result["source"] == "rss"
        assert result["hasMore"] is True

    @pytest.mark.asyncio
    async def test_list_by_scraping_with_keyword(self) -> None:
        with patch(
            "medium_mcp.tools.authors.scrape_author_articles",
            AsyncMock(return_value=_author_response("scrape")),
        ) as mock_scrape:
            result = json.loads(await authors.list_author_articles({
                "username": "alice", "source": "scrape", "limit": 5, "keyword": "rust",
            }))

        mock_scrape.assert_awaited_once_with("alice", limit=5)
        assert result["articleCount"] == 1
        assert result["articles"][0]["title"] == "Notes on Rust"

    @pytest.mark.asyncio
    async def test_list_invalid_limit(self) -> None:
        with pytest.raises(ToolError) as exc_info:
            await authors.list_author_articles({"username": "alice", "limit": 0})

        assert _payload(exc_info)["error"] == "Invalid input"

    @pytest.mark.asyncio
    async def test_list_rss_failure(self) -> None:
        error = MediumError.rss_feed("ghost", "Failed to fetch RSS feed: 404")
        with patch("medium_mcp.tools.authors.fetch_author_articles_from_rss", AsyncMock(side_effect=error)):
            with pytest.raises(ToolError) as exc_info:
                await authors.list_author_articles({"username": "ghost"})

        assert "Username: ghost" in _payload(exc_info)["details"]

    @pytest.mark.asyncio
    async def test_search_author_articles(self) -> None:
        with patch(
            "medium_mcp.tools.authors.fetch_author_articles_from_rss",
            AsyncMock(return_value=_author_response()),
        ):
            result = json.loads(await authors.search_author_articles({
                "username": "alice", "keyword": "Python",
            }))

        assert result["username"] == "alice"
        assert result["keyword"] == "Python"
        assert result["matchCount"] == 1
        assert result["articles"][0]["categories"] == ["python"]
        assert "RSS" in result["note"]


class TestSearchTool:
    @pytest.mark.asyncio
    async def test_search(self) -> None:
        response = SearchResponse(query="python", result_count=0, results=[], has_more=False)
        with patch("medium_mcp.tools.search.search_medium", AsyncMock(return_value=response)) as mock_search:
            result = json.loads(await search.search_articles({"query": "python", "limit": 20}))

        mock_search.assert_awaited_once_with("python", limit=20)
        assert result == {"query": "python", "resultCount": 0, "results": [], "hasMore": False}

    @pytest.mark.asyncio
    async def test_limit_out_of_range(self) -> None:
        with pytest.raises(ToolError):
            await search.search_articles({"query": "python", "limit": 21})


class TestDomainTools:
    @pytest.mark.asyncio
    async def test_add_list_remove(self) -> None:
        result = json.loads(await domains.add_domain({"domain": "Blog.Example.com"}))
        assert result["domain"] == "blog.example.com"
        assert "blog.example.com" in result["allDomains"]
        assert config.load_settings().additional_domains == ["blog.example.com"]

        listing = json.loads(await domains.list_domains({}))
        assert listing["customDomains"] == ["blog.example.com"]
        assert listing["defaultDomains"] == list(config.DEFAULT_MEDIUM_DOMAINS)
        assert listing["configPath"] == str(config.settings_path())

        result = json.loads(await domains.remove_domain({"domain": "blog.example.com"}))
        assert "blog.example.com" not in result["allDomains"]
        assert config.load_settings().additional_domains == []
        assert not config.is_valid_medium_url("https://blog.example.com/post")

    @pytest.mark.asyncio
    async def test_add_existing_is_noop(self) -> None:
        await domains.add_domain({"domain": "blog.example.com"})
        result = json.loads(await domains.add_domain({"domain": "blog.example.com"}))

        assert "already exists" in result["message"]
        assert config.load_settings().additional_domains == ["blog.example.com"]

    @pytest.mark.asyncio
    async def test_add_default_does_not_write(self) -> None:
        result = json.loads(await domains.add_domain({"domain": "medium.com"}))

        assert "default domain" in result["message"]
        assert not config.settings_path().exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("domain", ["localhost", "ab", "  a  "])
    async def test_add_invalid(self, domain: str) -> None:
        with pytest.raises(ToolError):
            await domains.add_domain({"domain": domain})
        assert not config.settings_path().exists()

    @pytest.mark.asyncio
    async def test_remove_default_rejected(self) -> None:
        with pytest.raises(ToolError) as exc_info:
            await domains.remove_domain({"domain": "towardsdatascience.com"})

        assert "default domain" in _payload(exc_info)["error"]
        assert "towardsdatascience.com" in config.get_valid_domains()

    @pytest.mark.asyncio
    async def test_remove_unknown_rejected(self) -> None:
        with pytest.raises(ToolError) as exc_info:
            await domains.remove_domain({"domain": "nowhere.dev"})

        assert "not found" in _payload(exc_info)["error"]

    @pytest.mark.asyncio
    async def test_list_includes_environment(self, monkeypatch) -> None:
        monkeypatch.setenv(config.DOMAINS_ENV, "env.dev")
        config.invalidate_domain_cache()

        listing = json.loads(await domains.list_domains({}))

        assert listing["envDomains"] == ["env.dev"]
        assert listing["allDomains"][-1] == "env.dev"


class TestAuthTools:
    @pytest.mark.asyncio
    async def test_login_status(self) -> None:
        status = json.loads(await auth.login_status({}))
        assert status["loggedIn"] is False
        assert status["storagePath"] == str(session_store.path())

        session_store.write({"cookies": []})
        status = json.loads(await auth.login_status({}))
        assert status["loggedIn"] is True

    @pytest.mark.asyncio
    async def test_logout(self) -> None:
        assert await auth.logout({}) == "No login state found."
        session_store.write({"cookies": []})
        assert await auth.logout({}) == "Login state cleared successfully."

    @pytest.mark.asyncio
    async def test_save_login_without_window(self) -> None:
        with pytest.raises(ToolError) as exc_info:
            await auth.save_login({})

        assert "login" in _payload(exc_info)["details"]

    @pytest.mark.asyncio
    async def test_login_launch_failure(self) -> None:
        with patch(
            "medium_mcp.browser_manager.BrowserManager.open_interactive_login",
            AsyncMock(side_effect=MediumError.browser_launch(RuntimeError("no display"))),
        ):
            with pytest.raises(ToolError) as exc_info:
                await auth.login({})

        assert "playwright install chromium" in _payload(exc_info)["details"]
