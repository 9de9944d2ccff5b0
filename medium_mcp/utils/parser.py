"""HTML conversion utilities.

- HTML -> Markdown (ATX headings, fenced code blocks, lists, tables, quotes)
- HTML -> plain text with paragraph breaks
- Best-effort ``<meta>`` lookups that return ``None`` instead of raising
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag

_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_DROP_TAGS = ("script", "style", "noscript", "template", "button", "svg")
_BLOCK_TAGS = (
    "p", "div", "br", "hr", *_HEADINGS, "li", "tr", "blockquote",
    "pre", "table", "section", "article", "figure", "figcaption",
)


# ---------------------------------------------------------------------------
# Meta tags
# ---------------------------------------------------------------------------

def meta_content(
    soup: BeautifulSoup, name: Optional[str] = None, property: Optional[str] = None
) -> Optional[str]:
    """Return the stripped ``content`` of a ``<meta>`` tag, or ``None``."""
    attrs = {"name": name} if name else {"property": property}
    tag = soup.find("meta", attrs=attrs)
    if not isinstance(tag, Tag):
        return None
    value = tag.get("content")
    if not isinstance(value, str):
        return None
    return value.strip() or None


# ---------------------------------------------------------------------------
# HTML -> Plain Text
# ---------------------------------------------------------------------------

def html_to_text(html: str) -> str:
    """Convert HTML to plain text, keeping one blank line between blocks."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_DROP_TAGS):
        tag.decompose()

    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")

    text = re.sub(r"[^\S\n]+", " ", soup.get_text())
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


# ---------------------------------------------------------------------------
# HTML -> Markdown
# ---------------------------------------------------------------------------

def html_to_markdown(html: str, base_url: Optional[str] = None) -> str:
    """Convert an HTML fragment to Markdown.

    Links and images are resolved against ``base_url`` when given.
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_DROP_TAGS):
        tag.decompose()

    converter = _MarkdownConverter(base_url)
    result = converter.block(soup)

    result = "\n".join(line.rstrip() for line in result.splitlines())
    result = re.sub(r"\n{3,}", "\n\n", result)
    return result.strip()


class _MarkdownConverter:
    def __init__(self, base_url: Optional[str]):
        self.base_url = base_url

    def _url(self, href: str) -> str:
        href = href.strip()
        if self.base_url:
            return urljoin(self.base_url, href)
        return href

    # --- block level ---

    def block(self, node, depth: int = 0) -> str:
        if isinstance(node, (Comment, Doctype)):
            return ""
        if isinstance(node, NavigableString):
            return re.sub(r"\s+", " ", str(node))
        if not isinstance(node, Tag):
            return ""

        name = (node.name or "").lower()

        if name in _HEADINGS:
            text = self.inline(node).strip()
            return f"\n\n{'#' * int(name[1])} {text}\n\n" if text else ""

        if name == "p":
            text = self.inline(node).strip()
            return f"\n\n{text}\n\n" if text else ""

        if name == "pre":
            return self._code_block(node)

        if name == "blockquote":
            inner = re.sub(r"\n{3,}", "\n\n", self.children(node, depth).strip())
            quoted = "\n".join(f"> {line}" if line.strip() else ">" for line in inner.splitlines())
            return f"\n\n{quoted}\n\n"

        if name in ("ul", "ol"):
            return self._list(node, ordered=name == "ol", depth=depth)

        if name == "table":
            return self._table(node)

        if name == "hr":
            return "\n\n---\n\n"

        if name == "br":
            return "\n"

        if name == "figure":
            return self._figure(node, depth)

        if name in ("a", "strong", "b", "em", "i", "code", "img", "span"):
            return self.inline_node(node)

        return self.children(node, depth)

    def children(self, node: Tag, depth: int = 0) -> str:
        return "".join(self.block(child, depth) for child in node.children)

    def _code_block(self, node: Tag) -> str:
        code = node.find("code")
        source = code if isinstance(code, Tag) else node
        # Medium renders each line of a code block as its own <span> or <br>
        for br in source.find_all("br"):
            br.replace_with("\n")
        text = source.get_text()

        lang = ""
        for cls in (source.get("class") or []) + (node.get("class") or []):
            if cls.startswith(("language-", "lang-")):
                lang = cls.split("-", 1)[1]
                break
        lang = lang or node.get("data-code-block-lang", "")

        fence = "````" if "```" in text else "```"
        return f"\n\n{fence}{lang}\n{text.strip(chr(10)).rstrip()}\n{fence}\n\n"

    def _list(self, node: Tag, ordered: bool, depth: int) -> str:
        indent = "  " * depth
        lines: list[str] = []
        for idx, li in enumerate(node.find_all("li", recursive=False), 1):
            nested = [c for c in li.children if isinstance(c, Tag) and c.name in ("ul", "ol")]
            text = " ".join(
                part for part in (
                    self.inline(c).strip() if isinstance(c, Tag) else re.sub(r"\s+", " ", str(c)).strip()
                    for c in li.children
                    if not (isinstance(c, Tag) and c.name in ("ul", "ol"))
                ) if part
            )
            marker = f"{idx}." if ordered else "-"
            lines.append(f"{indent}{marker} {text}")
            for sub in nested:
                lines.append(self._list(sub, ordered=sub.name == "ol", depth=depth + 1).strip("\n"))
        return "\n\n" + "\n".join(lines) + "\n\n"

    def _table(self, table: Tag) -> str:
        rows = [
            [cell.get_text(" ", strip=True).replace("|", "\\|") for cell in tr.find_all(["th", "td"])]
            for tr in table.find_all("tr")
        ]
        rows = [row for row in rows if row]
        if not rows:
            return ""
        width = max(len(row) for row in rows)
        rows = [row + [""] * (width - len(row)) for row in rows]

        lines = ["| " + " | ".join(rows[0]) + " |", "| " + " | ".join(["---"] * width) + " |"]
        lines.extend("| " + " | ".join(row) + " |" for row in rows[1:])
        return "\n\n" + "\n".join(lines) + "\n\n"

    def _figure(self, node: Tag, depth: int) -> str:
        parts = []
        img = node.find("img")
        if isinstance(img, Tag) and img.get("src"):
            parts.append(self.inline_node(img))
        caption = node.find("figcaption")
        if isinstance(caption, Tag):
            text = caption.get_text(" ", strip=True)
            if text:
                parts.append(f"*{text}*")
        if parts:
            return "\n\n" + "\n".join(parts) + "\n\n"
        return self.children(node, depth)

    # --- inline level ---

    def inline(self, node: Tag) -> str:
        return "".join(self.inline_node(child) for child in node.children)

    def inline_node(self, node) -> str:
        if isinstance(node, (Comment, Doctype)):
            return ""
        if isinstance(node, NavigableString):
            return re.sub(r"[ \t\r\n]+", " ", str(node))
        if not isinstance(node, Tag):
            return ""

        name = (node.name or "").lower()
        if name == "a":
            text = self.inline(node).strip()
            href = node.get("href", "")
            if text and href and not href.startswith(("javascript:", "#")):
                return f"[{text}]({self._url(href)})"
            return text
        if name in ("strong", "b"):
            text = self.inline(node).strip()
            return f"**{text}**" if text else ""
        if name in ("em", "i"):
            text = self.inline(node).strip()
            return f"*{text}*" if text else ""
        if name == "code":
            text = node.get_text().strip()
            return f"`{text}`" if text else ""
        if name == "br":
            return "\n"
        if name == "img":
            alt = (node.get("alt") or "").strip()
            src = node.get("src") or ""
            if src:
                return f"![{alt}]({self._url(src)})"
            return f"[Image: {alt}]" if alt else ""
        return self.inline(node)
