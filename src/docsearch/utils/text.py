"""Text helpers: tokenization and whitespace handling."""

from __future__ import annotations

import re
from typing import List

MIN_TERM_LENGTH = 3
ELLIPSIS = "..."

# Runs of letters and digits; underscore and everything else separates terms.
_TERM_RE = re.compile(r"[^\W_]+")


def tokenize(text: str, *, min_length: int = MIN_TERM_LENGTH) -> List[str]:
    """Split text into lower-cased alphanumeric terms.

    Terms shorter than ``min_length`` characters are discarded. Duplicates and
    order are preserved. Documents and queries must go through this same
    function with the same ``min_length`` or scores will not line up.
    """
    if not text:
        return []
    return [term for term in _TERM_RE.findall(text.lower()) if len(term) >= min_length]


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run into a single space."""
    return " ".join(text.split())


def truncate(text: str, max_chars: int) -> str:
    """Cut text to ``max_chars`` characters, marking the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS
