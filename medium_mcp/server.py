"""FastMCP server exposing the Medium reading, listing, search and login tools."""

from contextlib import asynccontextmanager
from typing import Optional

from fastmcp import FastMCP

from medium_mcp.browser_manager import BrowserManager
from medium_mcp.tools import articles, auth, authors, domains, search


@asynccontextmanager
async def lifespan(server):
    try:
        yield
    finally:
        manager = await BrowserManager.get_instance()
        await manager.release()


# Create MCP server
mcp = FastMCP("medium-mcp", lifespan=lifespan)


# Register article tools
@mcp.tool()
async def read_article(url: str) -> str:
    """Read a Medium article and return its title, author, date and Markdown content.

    Member-only articles need a saved session (see 'login').

    Args:
        url: Medium article URL (medium.com, a subdomain or a configured custom domain)
    """
    return await articles.read_article({"url": url})


# Register login tools
@mcp.tool()
async def login() -> str:
    """Open a visible browser on the Medium sign-in page.

    Complete the sign-in in that window, then call 'save_login'.
    """
    return await auth.login({})


@mcp.tool()
async def save_login() -> str:
    """Save the session from the open login window and close the browser."""
    return await auth.save_login({})


@mcp.tool()
async def logout() -> str:
    """Delete the saved Medium session."""
    return await auth.logout({})


@mcp.tool()
async def login_status() -> str:
    """Report whether a saved Medium session exists."""
    return await auth.login_status({})


# Register author tools
@mcp.tool()
async def list_author_articles(
    username: str,
    source: str = "rss",
    limit: int = 10,
    keyword: Optional[str] = None,
) -> str:
    """List an author's articles.

    Args:
        username: Medium username, with or without the leading '@'
        source: 'rss' (fast, ~10 most recent posts) or 'scrape' (author page, more posts)
        limit: Maximum number of articles to scrape (1-50, only used with source='scrape')
        keyword: Optional case-insensitive filter on title, excerpt and categories
    """
    return await authors.list_author_articles({
        "username": username,
        "source": source,
        "limit": limit,
        "keyword": keyword,
    })


@mcp.tool()
async def search_author_articles(username: str, keyword: str) -> str:
    """Search an author's recent articles (RSS feed) by keyword.

    Args:
        username: Medium username, with or without the leading '@'
        keyword: Case-insensitive keyword matched against title, excerpt and categories
    """
    return await authors.search_author_articles({"username": username, "keyword": keyword})


# Register search tools
@mcp.tool()
async def search_articles(query: str, limit: int = 10) -> str:
    """Search all of Medium.

    Args:
        query: Search query
        limit: Maximum number of results (1-20)
    """
    return await search.search_articles({"query": query, "limit": limit})


# Register domain tools
@mcp.tool()
async def add_domain(domain: str) -> str:
    """Allow a custom Medium publication domain for 'read_article'.

    Args:
        domain: Domain name, e.g. 'blog.example.com'
    """
    return await domains.add_domain({"domain": domain})


@mcp.tool()
async def remove_domain(domain: str) -> str:
    """Remove a custom domain. Default Medium domains cannot be removed.

    Args:
        domain: Domain name previously added with 'add_domain'
    """
    return await domains.remove_domain({"domain": domain})


@mcp.tool()
async def list_domains() -> str:
    """List default, custom, environment and merged allowed domains."""
    return await domains.list_domains({})
