"""Pydantic schemas for tool input validation."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal


def _strip_at(value: str) -> str:
    username = value.strip().lstrip("@")
    if not username:
        raise ValueError("username must not be empty")
    return username


# Article tool schemas
class ReadArticleInput(BaseModel):
    url: str = Field(description="Medium article URL to read")

    @field_validator("url")
    @classmethod
    def check_absolute(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("url must be an absolute http(s) URL")
        return value


# Author tool schemas
class ListAuthorArticlesInput(BaseModel):
    username: str = Field(min_length=1, description="Medium username (without @ prefix)")
    source: Literal["rss", "scrape"] = Field(
        default="rss",
        description="Data source: 'rss' (fast, ~10 recent) or 'scrape' (more articles, slower)"
    )
    limit: int = Field(default=10, ge=1, le=50, description="Maximum number of articles (scrape mode)")
    keyword: Optional[str] = Field(
        default=None,
        description="Filter articles by keyword in title, excerpt, or tags"
    )

    @field_validator("username")
    @classmethod
    def clean_username(cls, value: str) -> str:
        return _strip_at(value)


class SearchAuthorArticlesInput(BaseModel):
    username: str = Field(min_length=1, description="Medium username (without @ prefix)")
    keyword: str = Field(min_length=1, description="Keyword to search for")

    @field_validator("username")
    @classmethod
    def clean_username(cls, value: str) -> str:
        return _strip_at(value)


# Search tool schemas
class SearchArticlesInput(BaseModel):
    query: str = Field(min_length=1, description="Search query")
    limit: int = Field(default=10, ge=1, le=20, description="Maximum number of results")


# Domain tool schemas
class DomainInput(BaseModel):
    domain: str = Field(min_length=3, description="Domain, e.g. stackademic.com")

    @field_validator("domain", mode="before")
    @classmethod
    def normalize_domain(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value
