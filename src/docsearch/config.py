"""Application configuration defaults."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from docsearch.utils.text import MIN_TERM_LENGTH

LOGGER = logging.getLogger(__name__)

CACHE_FILENAME = "docsearch_index_v1.json.gz"
DEFAULT_TOP_K = 15
DEFAULT_PREFERRED_SUBDIR = "std"
DEFAULT_DESCRIPTION_CHARS = 200
DEFAULT_TITLE_SELECTORS: Tuple[str, ...] = ("h1.fqn", "h1.main-heading", "h1", "title")
DEFAULT_DESCRIPTION_SELECTORS: Tuple[str, ...] = (".docblock p", "p")


def _get_default_cache_path() -> Path:
    """Get the shared cache location in the platform temp directory."""
    return Path(tempfile.gettempdir()) / CACHE_FILENAME


def discover_docs_root() -> Path | None:
    """Locate the HTML documentation installed by ``rustup component add rust-docs``.

    Looks at ``$RUSTUP_HOME`` first, then ``~/.rustup``, and returns the
    ``share/doc/rust/html`` directory of the first stable toolchain that has
    one. ``None`` means documentation search is unavailable.
    """
    candidates = []
    env_home = os.environ.get("RUSTUP_HOME")
    if env_home:
        candidates.append(Path(env_home))
    candidates.append(Path.home() / ".rustup")

    for rustup_home in candidates:
        toolchains = rustup_home / "toolchains"
        if not toolchains.is_dir():
            continue
        try:
            names = sorted(child for child in toolchains.iterdir() if child.name.startswith("stable"))
        except OSError as exc:
            LOGGER.debug("Cannot list %s: %s", toolchains, exc)
            continue
        for toolchain in names:
            docs = toolchain / "share" / "doc" / "rust" / "html"
            if docs.is_dir():
                return docs
    return None


@dataclass(slots=True)
class AppConfig:
    docs_root: Path | None = None
    cache_path: Path | None = None
    extension: str = ".html"
    preferred_subdir: str | None = DEFAULT_PREFERRED_SUBDIR
    index_body: bool = False
    min_term_length: int = MIN_TERM_LENGTH
    description_chars: int = DEFAULT_DESCRIPTION_CHARS
    title_selectors: Tuple[str, ...] = DEFAULT_TITLE_SELECTORS
    description_selectors: Tuple[str, ...] = DEFAULT_DESCRIPTION_SELECTORS
    top_k: int = DEFAULT_TOP_K
    build_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.cache_path is None:
            self.cache_path = _get_default_cache_path()

    def resolve_cache_path(self, base_dir: Path | None = None) -> Path:
        if self.cache_path is None:
            self.cache_path = _get_default_cache_path()
        if Path(self.cache_path).is_absolute() or base_dir is None:
            return Path(self.cache_path)
        return base_dir / self.cache_path

    def resolve_docs_root(self) -> Path | None:
        """Return the configured docs root, or the discovered rustup docs if unset."""
        if self.docs_root is not None:
            return Path(self.docs_root).expanduser()
        return discover_docs_root()

    def index_options(self) -> Tuple[object, ...]:
        """Options that change index contents; part of the cache fingerprint."""
        return (
            self.extension.lower(),
            self.preferred_subdir,
            self.index_body,
            self.min_term_length,
            self.description_chars,
            self.title_selectors,
            self.description_selectors,
        )
