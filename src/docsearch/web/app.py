"""FastAPI application exposing documentation search."""

from __future__ import annotations

import logging
import threading
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from docsearch.config import AppConfig
from docsearch.index.lifecycle import Building, Failed
from docsearch.index.search import DocsSearcher, SearchResult

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="DocSearch Web", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_config = AppConfig()
_searcher: DocsSearcher | None = None
_searcher_lock = threading.Lock()


class SearchPayload(BaseModel):
    query: str
    top_k: int | None = None


def configure(config: AppConfig) -> None:
    """Replace the configuration and drop any running searcher."""
    global _config, _searcher
    with _searcher_lock:
        _config = config
        _searcher = None


def get_searcher() -> DocsSearcher | None:
    """Return the shared searcher, starting its background build on first use.

    None means no documentation root is available and search is disabled.
    """
    global _searcher
    with _searcher_lock:
        if _searcher is None:
            docs_root = _config.resolve_docs_root()
            if docs_root is None:
                return None
            _searcher = DocsSearcher(docs_root, _config)
        return _searcher


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if get_searcher() is None:
        LOGGER.warning("No documentation root configured, search is disabled")


@app.post("/search")
async def search_documents(payload: SearchPayload) -> dict[str, List[SearchResult]]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    searcher = get_searcher()
    if searcher is None:
        raise HTTPException(status_code=503, detail="Documentation search is disabled: no docs root found")

    top_k = None if payload.top_k is None else max(1, min(payload.top_k, 50))
    return {"results": searcher.search(query, top_k=top_k)}


@app.get("/status")
async def index_status() -> dict[str, Any]:
    searcher = get_searcher()
    if searcher is None:
        return {"state": "disabled", "documents": 0, "root": None}

    state = searcher.state
    if isinstance(state, Building):
        name = "building"
    elif isinstance(state, Failed):
        name = "failed"
    else:
        name = "ready"
    body: dict[str, Any] = {
        "state": name,
        "documents": searcher.document_count,
        "root": str(searcher.docs_root),
    }
    if isinstance(state, Failed):
        body["error"] = state.message
    return body
