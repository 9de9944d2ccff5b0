"""Article reading tool."""

from __future__ import annotations

import json

from medium_mcp.config import is_valid_medium_url
from medium_mcp.models import dump
from medium_mcp.schemas import ReadArticleInput
from medium_mcp.services.article_extractor import extract_article
from medium_mcp.utils.errors import tool_error


async def read_article(arguments: dict) -> str:
    """Read a Medium article and return it as JSON with Markdown content."""
    try:
        input_data = ReadArticleInput(**arguments)
        if not is_valid_medium_url(input_data.url):
            raise ValueError(
                "Invalid URL. Please provide a Medium article URL "
                "(use 'add_domain' for custom publication domains)."
            )

        article = await extract_article(input_data.url)
        return json.dumps(dump(article), indent=2, ensure_ascii=False)

    except Exception as e:
        raise tool_error("read_article", e) from e
