from __future__ import annotations

import re
from typing import List
from urllib.parse import urljoin, urlparse

from bs4.element import NavigableString, PreformattedString, Tag

# Tags whose boundaries start a new line in rendered text.
_BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "dd", "details", "div", "dl",
    "dt", "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2",
    "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p",
    "pre", "section", "summary", "table", "tbody", "thead", "tfoot", "tr", "ul",
})
_SKIP_TAGS = frozenset({"script", "style", "noscript", "template", "head", "title"})
_HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.I)

_BREAK = object()


def resolve_url(base_url: str, href: str | None) -> str:
    """Absolute form of ``href`` relative to the page, or "" when there is nothing to resolve."""
    href = (href or "").strip()
    if not href:
        return ""
    return urljoin(base_url, href)


def is_http_url(url: str | None) -> bool:
    return urlparse(url or "").scheme.lower() in ("http", "https")


def is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden"):
        return True
    if tag.name == "input" and str(tag.get("type", "")).lower() == "hidden":
        return True
    return bool(_HIDDEN_STYLE.search(str(tag.get("style", ""))))


def visible_text(node: Tag) -> str:
    """
    Approximate the browser's innerText for a parsed element.

    Block elements and <br> break lines; non-rendered and hidden subtrees are
    dropped. Whitespace is collapsed per line and blank lines are removed.
    Walks iteratively so deeply nested markup cannot hit the recursion limit.
    """
    if is_hidden(node):
        return ""

    parts: List[str] = []
    stack: List[object] = [node]
    while stack:
        item = stack.pop()
        if item is _BREAK:
            parts.append("\n")
            continue
        if isinstance(item, NavigableString):
            if not isinstance(item, PreformattedString):  # comments, doctype, cdata
                parts.append(str(item))
            continue
        if not isinstance(item, Tag):
            continue
        if item is not node and (item.name in _SKIP_TAGS or is_hidden(item)):
            continue
        if item.name == "br":
            parts.append("\n")
            continue
        if item.name in _BLOCK_TAGS:
            parts.append("\n")
            stack.append(_BREAK)
        stack.extend(reversed(item.contents))

    lines = (" ".join(line.split()) for line in "".join(parts).split("\n"))
    return "\n".join(line for line in lines if line)
