"""Background index build and the tri-state snapshot queries read from."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Union

from docsearch.config import AppConfig
from docsearch.index.indexer import Indexer
from docsearch.index.storage import IndexCache
from docsearch.models import SearchIndex

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Building:
    """Initial state: the background build has not finished yet."""


@dataclass(frozen=True, slots=True)
class Ready:
    index: SearchIndex


@dataclass(frozen=True, slots=True)
class Failed:
    message: str


IndexState = Union[Building, Ready, Failed]


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    A queued writer blocks new readers until it has run.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            try:
                yield
            finally:
                self._cond.notify_all()


def load_or_build(root: Path, config: AppConfig, cache: IndexCache | None = None) -> SearchIndex:
    """Adopt a matching cached index, or build a fresh one and cache it."""
    indexer = Indexer(config)
    cache = cache or IndexCache(config.resolve_cache_path())
    fingerprint = indexer.fingerprint(root)

    cached = cache.load(fingerprint)
    if cached is not None:
        LOGGER.info("Loaded index from cache %s (%d documents)", cache.cache_path, len(cached))
        return cached

    index, stats = indexer.build(root)
    LOGGER.info(
        "Indexed %d documents (skipped: %d, failed: %d)", stats.indexed, stats.skipped, stats.failed
    )
    cache.save(index)
    return index


class IndexLifecycle:
    """Owns the index state and guarantees it leaves ``Building`` exactly once."""

    def __init__(self, *, build_timeout: float | None = None) -> None:
        self.build_timeout = build_timeout
        self._state: IndexState = Building()
        self._lock = ReadWriteLock()
        self._done = threading.Event()
        self._thread: threading.Thread | None = None
        self._timer: threading.Timer | None = None

    @property
    def state(self) -> IndexState:
        with self._lock.read():
            return self._state

    @property
    def is_terminal(self) -> bool:
        return self._done.is_set()

    def install(self, state: IndexState) -> bool:
        """Move to a terminal state. Returns False if one was already installed."""
        if isinstance(state, Building):
            raise ValueError("Building is not a terminal state")
        with self._lock.write():
            if not isinstance(self._state, Building):
                LOGGER.debug("Ignoring %s, index state is already final", type(state).__name__)
                return False
            self._state = state
            self._done.set()
        if self._timer is not None:
            self._timer.cancel()
        return True

    def start(self, build: Callable[[], SearchIndex]) -> None:
        """Run ``build`` on a background thread and install its outcome."""
        if self._thread is not None:
            raise RuntimeError("Index build already started")
        self._thread = threading.Thread(
            target=self._run, args=(build,), name="docsearch-index-build", daemon=True
        )
        if self.build_timeout is not None:
            self._timer = threading.Timer(self.build_timeout, self._expire)
            self._timer.daemon = True
            self._timer.start()
        self._thread.start()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the state is terminal. Returns False on timeout."""
        return self._done.wait(timeout)

    def _run(self, build: Callable[[], SearchIndex]) -> None:
        start = time.perf_counter()
        LOGGER.info("Background indexing started...")
        try:
            index = build()
        except Exception as exc:
            LOGGER.exception("Indexing failed: %s", exc)
            self.install(Failed(str(exc) or type(exc).__name__))
            return

        if self.install(Ready(index)):
            LOGGER.info(
                "Index ready in %.2fs. %d documents.", time.perf_counter() - start, len(index)
            )
        else:
            LOGGER.warning("Index build finished after the state was already final; result discarded")

    def _expire(self) -> None:
        if self.install(Failed(f"Index build timed out after {self.build_timeout:g}s")):
            LOGGER.error("Index build timed out after %gs", self.build_timeout)
