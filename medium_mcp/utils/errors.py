"""Error types and formatting for MCP tool responses.

Every failure the core raises is a ``MediumError`` tagged with an
``ErrorKind``.  Turning an error into something a user can act on is a pure
function of that kind (``user_message`` / ``error_payload``), so tool
handlers never have to branch on exception classes.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Optional

from fastmcp.exceptions import ToolError
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    BROWSER_LAUNCH = "browser_launch"
    NO_ACTIVE_SESSION = "no_active_session"
    ARTICLE_EXTRACTION = "article_extraction"
    AUTHOR_SCRAPER = "author_scraper"
    SEARCH_SCRAPER = "search_scraper"
    RSS_FEED = "rss_feed"
    VALIDATION = "validation"


class MediumError(Exception):
    """A failure raised by the browser, extraction or feed layers."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        url: Optional[str] = None,
        username: Optional[str] = None,
        query: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.url = url
        self.username = username
        self.query = query
        self.cause = cause

    def __repr__(self) -> str:
        return f"MediumError(kind={self.kind.value!r}, message={self.message!r})"

    @classmethod
    def browser_launch(cls, cause: BaseException) -> "MediumError":
        return cls(ErrorKind.BROWSER_LAUNCH, f"Failed to launch browser: {cause}", cause=cause)

    @classmethod
    def no_active_session(
        cls,
        message: str = "No browser session found. Please run 'login' first.",
        cause: Optional[BaseException] = None,
    ) -> "MediumError":
        return cls(ErrorKind.NO_ACTIVE_SESSION, message, cause=cause)

    @classmethod
    def article_extraction(
        cls, url: str, message: str, cause: Optional[BaseException] = None
    ) -> "MediumError":
        return cls(ErrorKind.ARTICLE_EXTRACTION, message, url=url, cause=cause)

    @classmethod
    def author_scraper(
        cls, username: str, message: str, cause: Optional[BaseException] = None
    ) -> "MediumError":
        return cls(ErrorKind.AUTHOR_SCRAPER, message, username=username, cause=cause)

    @classmethod
    def search_scraper(
        cls, query: str, message: str, cause: Optional[BaseException] = None
    ) -> "MediumError":
        return cls(ErrorKind.SEARCH_SCRAPER, message, query=query, cause=cause)

    @classmethod
    def rss_feed(
        cls, username: str, message: str, cause: Optional[BaseException] = None
    ) -> "MediumError":
        return cls(ErrorKind.RSS_FEED, message, username=username, cause=cause)

    @classmethod
    def validation(cls, model_name: str, cause: ValidationError) -> "MediumError":
        return cls(
            ErrorKind.VALIDATION,
            f"Extracted {model_name} failed validation ({cause.error_count()} error(s))",
            cause=cause,
        )


def user_message(error: MediumError) -> str:
    """Build the longer "possible causes" text shown next to the error."""
    kind = error.kind
    if kind is ErrorKind.ARTICLE_EXTRACTION:
        return (
            f"{error.message}\n\n"
            f"URL: {error.url}\n"
            "Possible causes:\n"
            "- The URL is not a valid article\n"
            "- Member-only content (login required)\n"
            "- Medium bot detection blocked the page\n"
            "- Unsupported Medium page layout\n\n"
            "For member-only content, run the 'login' tool first."
        )
    if kind is ErrorKind.AUTHOR_SCRAPER:
        return (
            f"{error.message}\n\n"
            f"Username: {error.username}\n"
            "Possible causes:\n"
            "- The author does not exist\n"
            "- Medium bot detection blocked the page\n"
            "- The author page layout changed\n\n"
            "Try source='rss' instead."
        )
    if kind is ErrorKind.SEARCH_SCRAPER:
        return (
            f"{error.message}\n\n"
            f"Query: {error.query}\n"
            "Possible causes:\n"
            "- Medium bot detection blocked the search page\n"
            "- Network problem or timeout\n\n"
            "If you know the author, try 'search_author_articles' (RSS based)."
        )
    if kind is ErrorKind.RSS_FEED:
        return (
            f"{error.message}\n\n"
            f"Username: {error.username}\n"
            "Possible causes:\n"
            "- The author does not exist or has no public posts\n"
            "- Network problem\n\n"
            "Check the username (without the @ prefix) and try again."
        )
    if kind is ErrorKind.BROWSER_LAUNCH:
        return (
            f"{error.message}\n\n"
            "Make sure Chromium is installed: `playwright install chromium`."
        )
    if kind is ErrorKind.NO_ACTIVE_SESSION:
        return f"{error.message}\n\nRun 'login', sign in in the opened window, then run 'save_login'."
    # VALIDATION is an internal consistency failure: the extractor produced
    # a structurally invalid record.
    detail = str(error.cause) if error.cause else ""
    return f"{error.message}\n\nThis is a bug in the extractor, please report it.\n{detail}".rstrip()


def error_payload(error: BaseException) -> dict:
    """Map any exception to the ``{error, details}`` envelope body."""
    if isinstance(error, MediumError):
        return {"error": error.message, "details": user_message(error)}
    if isinstance(error, ValidationError):
        return {"error": "Invalid input", "details": str(error)}
    return {"error": str(error) or "Unknown error occurred"}


def tool_error(tool_name: str, error: BaseException) -> ToolError:
    """Wrap an exception into the ``ToolError`` FastMCP reports with ``isError``."""
    if isinstance(error, MediumError) and error.kind is ErrorKind.VALIDATION:
        logger.error("%s produced an invalid result: %s", tool_name, error.cause)
    elif not isinstance(error, (MediumError, ValueError)):
        logger.exception("Unexpected error in %s", tool_name)
    return ToolError(json.dumps(error_payload(error), indent=2))
