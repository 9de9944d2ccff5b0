"""Pydantic models for everything the extractors hand back to tools.

Records are serialised with camelCase keys (``publishedAt``, ``hasMore``...)
and validated on construction through ``validate_result``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, TypeVar
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from medium_mcp.utils.errors import MediumError


def _absolute_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"not an absolute http(s) URL: {value!r}")
    return value


AbsoluteUrl = Annotated[str, AfterValidator(_absolute_url)]
NonEmptyStr = Annotated[str, Field(min_length=1)]


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )


class Article(_Record):
    title: NonEmptyStr
    author: Optional[str] = None
    published_at: Optional[str] = None
    content: NonEmptyStr
    excerpt: Optional[str] = None
    url: AbsoluteUrl


class AuthorArticle(_Record):
    title: NonEmptyStr
    url: AbsoluteUrl
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    author: Optional[str] = None
    excerpt: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    content: Optional[str] = None
    claps: Optional[int] = None
    reading_time: Optional[str] = None
    source: Literal["rss", "scrape"]


class AuthorArticlesResponse(_Record):
    username: str
    article_count: int = Field(ge=0)
    articles: list[AuthorArticle]
    source: Literal["rss", "scrape", "mixed"]
    has_more: bool


class SearchResult(_Record):
    title: NonEmptyStr
    url: AbsoluteUrl
    author: Optional[str] = None
    published_at: Optional[str] = None
    excerpt: Optional[str] = None
    claps: Optional[int] = None
    reading_time: Optional[str] = None
    publication: Optional[str] = None


class SearchResponse(_Record):
    query: str
    result_count: int = Field(ge=0)
    results: list[SearchResult]
    has_more: bool


M = TypeVar("M", bound=BaseModel)


def validate_result(model: type[M], data: dict) -> M:
    """Build ``model`` from ``data``; a failure is an internal consistency error."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MediumError.validation(model.__name__, e) from e


def dump(record: BaseModel) -> dict:
    return record.model_dump(mode="json", by_alias=True)
