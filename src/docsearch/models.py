"""Core DocSearch data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True, slots=True)
class ExtractedText:
    """Fields pulled out of a single document file."""

    title: str
    description: str
    text: str


@dataclass(frozen=True, slots=True)
class IndexedDocument:
    """One document of the index with its normalised term frequencies."""

    path: str
    title: str
    description: str
    term_frequencies: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SearchIndex:
    """Documents in discovery order plus corpus-wide inverse document frequencies."""

    fingerprint: str
    documents: Tuple[IndexedDocument, ...] = ()
    idf: Dict[str, float] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.documents)
