"""Document indexing pipeline."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import numpy as np

from docsearch.config import AppConfig
from docsearch.ingestion.html_loader import extract_document
from docsearch.models import IndexedDocument, SearchIndex
from docsearch.utils.files import compute_fingerprint, has_documents, iter_document_paths
from docsearch.utils.text import tokenize

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildStats:
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        if status == "indexed":
            self.indexed += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_files.append(path)


def term_frequencies(terms: List[str]) -> Dict[str, float]:
    """Raw term counts divided by the total number of terms."""
    total = len(terms)
    if total == 0:
        return {}
    return {term: count / total for term, count in Counter(terms).items()}


def compute_idf(document_frequencies: Dict[str, int], total_documents: int) -> Dict[str, float]:
    """Compute ``ln(N / df)`` for every term seen in at least one document."""
    if not document_frequencies or total_documents == 0:
        return {}
    terms = list(document_frequencies)
    counts = np.fromiter((document_frequencies[term] for term in terms), dtype=np.float64, count=len(terms))
    values = np.log(total_documents / counts)
    return {term: float(value) for term, value in zip(terms, values)}


def relative_doc_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def corpus_paths(root: Path, config: AppConfig) -> Iterable[Path]:
    """Document paths for a corpus, restricted to ``preferred_subdir`` when it has any."""
    if config.preferred_subdir:
        preferred = root / config.preferred_subdir
        if has_documents(preferred, extension=config.extension):
            return iter_document_paths(preferred, extension=config.extension)
        LOGGER.debug("No documents under %s, walking the whole root", preferred)
    return iter_document_paths(root, extension=config.extension)


class Indexer:
    """Turns a corpus directory into a :class:`SearchIndex`."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()

    def fingerprint(self, root: Path) -> str:
        return compute_fingerprint(root, *self.config.index_options())

    def index_document(self, path: Path, root: Path) -> IndexedDocument | None:
        """Extract and tokenize one file. Returns None if it is unreadable or yields no terms."""
        config = self.config
        extracted = extract_document(
            path,
            index_body=config.index_body,
            title_selectors=config.title_selectors,
            description_selectors=config.description_selectors,
            description_chars=config.description_chars,
        )
        if extracted is None:
            return None

        terms = tokenize(extracted.text, min_length=config.min_term_length)
        if not terms:
            return None

        return IndexedDocument(
            path=relative_doc_path(path, root),
            title=extracted.title,
            description=extracted.description,
            term_frequencies=term_frequencies(terms),
        )

    def build(self, root: Path) -> Tuple[SearchIndex, BuildStats]:
        """Walk ``root`` and build a fresh index in one batch pass."""
        root = Path(root).expanduser().absolute()
        stats = BuildStats()
        documents: List[IndexedDocument] = []
        document_frequencies: Counter[str] = Counter()

        for path in corpus_paths(root, self.config):
            try:
                document = self.index_document(path, root)
            except Exception as e:
                LOGGER.error(f"Failed to process {path}: {e}")
                stats.increment("failed", path)
                continue

            if document is None:
                LOGGER.debug("Skipping %s: nothing to index", path)
                stats.increment("skipped", path)
                continue

            document_frequencies.update(document.term_frequencies.keys())
            documents.append(document)
            stats.increment("indexed", path)

        if not documents:
            LOGGER.warning("No indexable documents found under %s", root)

        index = SearchIndex(
            fingerprint=self.fingerprint(root),
            documents=tuple(documents),
            idf=compute_idf(dict(document_frequencies), len(documents)),
        )
        return index, stats


def build_index(root: Path, config: AppConfig | None = None) -> SearchIndex:
    """Build a fresh index for ``root`` without touching the cache."""
    index, _ = Indexer(config).build(root)
    return index
