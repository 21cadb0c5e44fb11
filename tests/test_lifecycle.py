"""Tests for the index lifecycle controller."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from docsearch.config import AppConfig
from docsearch.index.lifecycle import (
    Building,
    Failed,
    IndexLifecycle,
    ReadWriteLock,
    Ready,
    load_or_build,
)
from docsearch.index.storage import IndexCache
from docsearch.models import SearchIndex


def write_page(path: Path, title: str, description: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"<h1>{title}</h1><p>{description}</p>", encoding="utf-8")


class TestReadWriteLock:
    """Test ReadWriteLock."""

    def test_readers_share(self) -> None:
        """Two readers should hold the lock at the same time."""
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=5)

        def reader() -> None:
            with lock.read():
                both_inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        assert not both_inside.broken

    def test_writer_waits_for_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []
        reader_in = threading.Event()
        release_reader = threading.Event()

        def reader() -> None:
            with lock.read():
                reader_in.set()
                release_reader.wait(5)
                events.append("reader done")

        def writer() -> None:
            with lock.write():
                events.append("writer")

        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        reader_in.wait(5)
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        writer_thread.join(0.1)
        release_reader.set()
        reader_thread.join(5)
        writer_thread.join(5)

        assert events == ["reader done", "writer"]

    def test_queued_writer_blocks_new_readers(self) -> None:
        """A reader arriving after a queued writer should run after it."""
        lock = ReadWriteLock()
        events: list[str] = []
        first_in = threading.Event()
        release_first = threading.Event()

        def first_reader() -> None:
            with lock.read():
                first_in.set()
                release_first.wait(5)
                events.append("first reader done")

        def writer() -> None:
            with lock.write():
                events.append("writer")

        def late_reader() -> None:
            with lock.read():
                events.append("late reader")

        first_thread = threading.Thread(target=first_reader)
        first_thread.start()
        first_in.wait(5)
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        deadline = time.monotonic() + 5
        while not lock._writers_waiting and time.monotonic() < deadline:
            time.sleep(0.01)
        late_thread = threading.Thread(target=late_reader)
        late_thread.start()
        late_thread.join(0.1)

        assert "late reader" not in events

        release_first.set()
        for thread in (first_thread, writer_thread, late_thread):
            thread.join(5)

        assert events == ["first reader done", "writer", "late reader"]


class TestIndexLifecycle:
    """Test IndexLifecycle state transitions."""

    def test_initial_state_is_building(self) -> None:
        lifecycle = IndexLifecycle()

        assert isinstance(lifecycle.state, Building)
        assert not lifecycle.is_terminal

    def test_install_ready(self) -> None:
        lifecycle = IndexLifecycle()
        index = SearchIndex(fingerprint="abc")

        assert lifecycle.install(Ready(index)) is True
        assert lifecycle.state == Ready(index)
        assert lifecycle.wait(0)

    def test_second_install_is_ignored(self) -> None:
        """Terminal states never change."""
        lifecycle = IndexLifecycle()
        lifecycle.install(Failed("boom"))

        assert lifecycle.install(Ready(SearchIndex(fingerprint="abc"))) is False
        assert lifecycle.state == Failed("boom")

    def test_install_building_rejected(self) -> None:
        with pytest.raises(ValueError):
            IndexLifecycle().install(Building())

    def test_start_installs_build_result(self) -> None:
        lifecycle = IndexLifecycle()
        index = SearchIndex(fingerprint="abc")

        lifecycle.start(lambda: index)

        assert lifecycle.wait(5)
        assert lifecycle.state == Ready(index)

    def test_start_does_not_block(self) -> None:
        """start() should return while the build is still running."""
        lifecycle = IndexLifecycle()
        release = threading.Event()

        def slow_build() -> SearchIndex:
            release.wait(5)
            return SearchIndex(fingerprint="abc")

        lifecycle.start(slow_build)
        try:
            assert isinstance(lifecycle.state, Building)
        finally:
            release.set()
        assert lifecycle.wait(5)

    def test_build_exception_installs_failed(self) -> None:
        lifecycle = IndexLifecycle()

        def broken_build() -> SearchIndex:
            raise OSError("root enumeration failed")

        lifecycle.start(broken_build)

        assert lifecycle.wait(5)
        assert lifecycle.state == Failed("root enumeration failed")

    def test_start_twice_raises(self) -> None:
        lifecycle = IndexLifecycle()
        lifecycle.start(lambda: SearchIndex(fingerprint="abc"))

        with pytest.raises(RuntimeError):
            lifecycle.start(lambda: SearchIndex(fingerprint="abc"))

    def test_build_timeout_installs_failed(self) -> None:
        """A build that outlives the timeout should leave the engine Failed."""
        lifecycle = IndexLifecycle(build_timeout=0.05)
        release = threading.Event()

        def stuck_build() -> SearchIndex:
            release.wait(5)
            return SearchIndex(fingerprint="late")

        lifecycle.start(stuck_build)
        assert lifecycle.wait(5)
        state = lifecycle.state
        release.set()

        assert isinstance(state, Failed)
        assert "timed out" in state.message

    def test_late_result_after_timeout_is_discarded(self) -> None:
        lifecycle = IndexLifecycle(build_timeout=0.05)
        release = threading.Event()
        finished = threading.Event()

        def stuck_build() -> SearchIndex:
            release.wait(5)
            finished.set()
            return SearchIndex(fingerprint="late")

        lifecycle.start(stuck_build)
        lifecycle.wait(5)
        release.set()
        finished.wait(5)
        lifecycle._thread.join(5)

        assert isinstance(lifecycle.state, Failed)


class TestLoadOrBuild:
    """Test load_or_build cache handling."""

    @pytest.fixture
    def corpus(self, tmp_path: Path) -> Path:
        root = tmp_path / "docs"
        write_page(root / "a.html", "vector", "push pop")
        write_page(root / "b.html", "vector", "capacity")
        write_page(root / "c.html", "hashmap", "insert")
        return root

    @pytest.fixture
    def config(self, tmp_path: Path) -> AppConfig:
        return AppConfig(cache_path=tmp_path / "cache.json.gz")

    def test_miss_builds_and_saves(self, corpus: Path, config: AppConfig) -> None:
        index = load_or_build(corpus, config)

        assert len(index) == 3
        assert config.cache_path.exists()

    def test_hit_skips_pipeline(self, corpus: Path, config: AppConfig) -> None:
        """A matching cache should be adopted without walking or extracting."""
        first = load_or_build(corpus, config)

        with patch("docsearch.index.indexer.iter_document_paths") as mock_walk, patch(
            "docsearch.index.indexer.extract_document"
        ) as mock_extract:
            second = load_or_build(corpus, config)

        mock_walk.assert_not_called()
        mock_extract.assert_not_called()
        assert second == first

    def test_cache_from_other_root_is_rebuilt(self, corpus: Path, config: AppConfig, tmp_path: Path) -> None:
        other = tmp_path / "other"
        write_page(other / "only.html", "unique", "page")
        load_or_build(other, config)

        index = load_or_build(corpus, config)

        assert [doc.path for doc in index.documents] == ["a.html", "b.html", "c.html"]

    def test_save_failure_does_not_fail_build(self, corpus: Path, config: AppConfig) -> None:
        cache = MagicMock(spec=IndexCache)
        cache.load.return_value = None
        cache.save.return_value = False

        index = load_or_build(corpus, config, cache)

        assert len(index) == 3
        cache.save.assert_called_once_with(index)
