"""On-disk cache for built search indexes.

The index is written as gzip-compressed JSON. Python's float repr round-trips
exactly, so a reloaded index scores queries identically to the one saved.
"""

from __future__ import annotations

import gzip
import json
import logging
import os
import tempfile
import zlib
from pathlib import Path
from typing import Any, Dict

from docsearch.models import IndexedDocument, SearchIndex

LOGGER = logging.getLogger(__name__)

CACHE_VERSION = 1


def serialize_index(index: SearchIndex) -> bytes:
    payload = {
        "version": CACHE_VERSION,
        "fingerprint": index.fingerprint,
        "documents": [
            {
                "path": doc.path,
                "title": doc.title,
                "description": doc.description,
                "term_frequencies": doc.term_frequencies,
            }
            for doc in index.documents
        ],
        "idf": index.idf,
    }
    return gzip.compress(json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))


def deserialize_index(data: bytes) -> SearchIndex:
    """Rebuild a :class:`SearchIndex`. Raises ValueError on any malformed payload."""
    try:
        payload: Dict[str, Any] = json.loads(gzip.decompress(data).decode("utf-8"))
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Unreadable cache payload: {exc}") from exc

    if not isinstance(payload, dict) or payload.get("version") != CACHE_VERSION:
        raise ValueError("Unsupported cache version")

    try:
        documents = tuple(
            IndexedDocument(
                path=str(doc["path"]),
                title=str(doc["title"]),
                description=str(doc["description"]),
                term_frequencies={str(k): float(v) for k, v in doc["term_frequencies"].items()},
            )
            for doc in payload["documents"]
        )
        idf = {str(k): float(v) for k, v in payload["idf"].items()}
        fingerprint = str(payload["fingerprint"])
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise ValueError(f"Malformed cache payload: {exc}") from exc

    return SearchIndex(fingerprint=fingerprint, documents=documents, idf=idf)


class IndexCache:
    """Persistence layer for one serialized index at a fixed path."""

    def __init__(self, cache_path: Path) -> None:
        self.cache_path = Path(cache_path)

    def load(self, fingerprint: str) -> SearchIndex | None:
        """Return the cached index, or None on any kind of cache miss."""
        if not self.cache_path.exists():
            LOGGER.debug("No index cache at %s", self.cache_path)
            return None

        try:
            index = deserialize_index(self.cache_path.read_bytes())
        except (OSError, ValueError) as exc:
            LOGGER.info("Ignoring unusable index cache %s: %s", self.cache_path, exc)
            return None

        if index.fingerprint != fingerprint:
            LOGGER.info("Index cache %s is outdated. Rebuilding...", self.cache_path)
            return None
        return index

    def save(self, index: SearchIndex) -> bool:
        """Write the index atomically. Failures are logged and reported as False."""
        tmp_name: str | None = None
        try:
            data = serialize_index(index)
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.cache_path.name}.", suffix=".tmp", dir=self.cache_path.parent
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, self.cache_path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as exc:
            LOGGER.warning("Failed to save index cache %s: %s", self.cache_path, exc)
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
        LOGGER.debug("Saved index cache to %s", self.cache_path)
        return True

    def clear(self) -> bool:
        """Remove the cache file. Returns True if one was removed."""
        try:
            self.cache_path.unlink()
        except FileNotFoundError:
            return False
        return True
