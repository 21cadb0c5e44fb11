"""TF-IDF ranking and the searcher facade used by callers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

import numpy as np

from docsearch.config import DEFAULT_TOP_K, AppConfig
from docsearch.index.lifecycle import Building, Failed, IndexLifecycle, IndexState, Ready, load_or_build
from docsearch.index.storage import IndexCache
from docsearch.models import SearchIndex
from docsearch.utils.text import MIN_TERM_LENGTH, tokenize

INDEXING_TITLE = "Indexing in progress..."
INDEXING_DESCRIPTION = (
    "The documentation index is currently being built. Please try again in a few seconds."
)
UNAVAILABLE_TITLE = "Search Unavailable"


@dataclass(slots=True)
class SearchResult:
    title: str
    description: str
    path: str
    score: float


def indexing_placeholder() -> SearchResult:
    return SearchResult(title=INDEXING_TITLE, description=INDEXING_DESCRIPTION, path="", score=1.0)


def failure_result(message: str) -> SearchResult:
    return SearchResult(
        title=UNAVAILABLE_TITLE, description=f"Indexing failed: {message}", path="", score=0.0
    )


def rank(
    index: SearchIndex,
    query: str,
    *,
    top_k: int = DEFAULT_TOP_K,
    min_term_length: int = MIN_TERM_LENGTH,
) -> List[SearchResult]:
    """Score every document against ``query`` and return the best ``top_k``.

    Equal scores keep discovery order.
    """
    terms = tokenize(query, min_length=min_term_length)
    if not terms or not index.documents or top_k <= 0:
        return []

    weights = [(term, index.idf.get(term, 0.0)) for term in terms]
    scores = np.fromiter(
        (
            sum(doc.term_frequencies.get(term, 0.0) * idf for term, idf in weights)
            for doc in index.documents
        ),
        dtype=np.float64,
        count=len(index.documents),
    )

    matches = np.flatnonzero(scores > 0.0)
    order = matches[np.argsort(-scores[matches], kind="stable")][:top_k]

    results: List[SearchResult] = []
    for idx in order:
        doc = index.documents[idx]
        results.append(
            SearchResult(
                title=doc.title,
                description=doc.description,
                path=doc.path,
                score=float(scores[idx]),
            )
        )
    return results


class DocsSearcher:
    """Searches a documentation corpus indexed in the background.

    Construction starts the build and returns immediately. Until the build
    finishes, :meth:`search` answers with a single placeholder result.
    """

    def __init__(
        self,
        docs_root: Path,
        config: AppConfig | None = None,
        *,
        cache: IndexCache | None = None,
        start: bool = True,
    ) -> None:
        self.config = config or AppConfig()
        self.docs_root = Path(docs_root).expanduser()
        self.cache = cache or IndexCache(self.config.resolve_cache_path())
        self.lifecycle = IndexLifecycle(build_timeout=self.config.build_timeout)
        if start:
            self.start()

    def start(self) -> None:
        self.lifecycle.start(lambda: load_or_build(self.docs_root, self.config, self.cache))

    @property
    def state(self) -> IndexState:
        return self.lifecycle.state

    @property
    def is_ready(self) -> bool:
        return isinstance(self.state, Ready)

    @property
    def document_count(self) -> int:
        state = self.state
        return len(state.index) if isinstance(state, Ready) else 0

    def wait(self, timeout: float | None = None) -> bool:
        return self.lifecycle.wait(timeout)

    def search(self, query: str, *, top_k: int | None = None) -> List[SearchResult]:
        state = self.state
        if isinstance(state, Building):
            return [indexing_placeholder()]
        if isinstance(state, Failed):
            return [failure_result(state.message)]
        return rank(
            state.index,
            query,
            top_k=self.config.top_k if top_k is None else top_k,
            min_term_length=self.config.min_term_length,
        )
