"""HTML loading and field extraction.

Uses BeautifulSoup with the stdlib ``html.parser`` backend, which is lenient
enough that almost any file decodes into a tree.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from bs4 import BeautifulSoup

from docsearch.config import (
    DEFAULT_DESCRIPTION_CHARS,
    DEFAULT_DESCRIPTION_SELECTORS,
    DEFAULT_TITLE_SELECTORS,
)
from docsearch.models import ExtractedText
from docsearch.utils.text import collapse_whitespace, truncate

LOGGER = logging.getLogger(__name__)

# Elements whose text never describes the page itself.
_NON_CONTENT_TAGS = ["script", "style", "nav", "header", "footer", "aside", "noscript"]


def _select_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    """Return the text of the first element matching the highest-priority selector."""
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = collapse_whitespace(element.get_text(" "))
        if text:
            return text
    return ""


def parse_html(
    content: str,
    *,
    fallback_title: str,
    index_body: bool = False,
    title_selectors: Sequence[str] = DEFAULT_TITLE_SELECTORS,
    description_selectors: Sequence[str] = DEFAULT_DESCRIPTION_SELECTORS,
    description_chars: int = DEFAULT_DESCRIPTION_CHARS,
) -> ExtractedText:
    """Extract title, description and indexable text from an HTML string.

    The indexable text is title plus description. With ``index_body`` the
    visible body text is appended as well, trading precision for recall.
    """
    soup = BeautifulSoup(content, "html.parser")

    title = _select_text(soup, title_selectors) or fallback_title
    description = truncate(_select_text(soup, description_selectors), description_chars)

    parts = [title, description]
    if index_body:
        for element in soup.find_all(_NON_CONTENT_TAGS):
            element.decompose()
        body = soup.body or soup
        parts.append(collapse_whitespace(body.get_text(" ")))

    return ExtractedText(title=title, description=description, text=" ".join(parts))


def extract_document(
    path: Path,
    *,
    index_body: bool = False,
    title_selectors: Sequence[str] = DEFAULT_TITLE_SELECTORS,
    description_selectors: Sequence[str] = DEFAULT_DESCRIPTION_SELECTORS,
    description_chars: int = DEFAULT_DESCRIPTION_CHARS,
) -> ExtractedText | None:
    """Read and parse one HTML file. Returns None when the file is not indexable."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Failed to read %s: %s", path, exc)
        return None

    return parse_html(
        content,
        fallback_title=path.stem,
        index_body=index_body,
        title_selectors=title_selectors,
        description_selectors=description_selectors,
        description_chars=description_chars,
    )
