"""Command line interface for DocSearch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from docsearch.config import AppConfig, discover_docs_root
from docsearch.index.indexer import Indexer
from docsearch.index.lifecycle import Failed
from docsearch.index.search import DocsSearcher
from docsearch.index.storage import IndexCache


console = Console()
app = typer.Typer(help="DocSearch - ranked full-text search over local HTML documentation")

# Shared by every command that loads a cache; the fingerprint covers both.
_BODY_HELP = "Index full page text, not just title and summary"
_SUBDIR_HELP = 'Prefer this sub-directory if it has documents ("" walks the whole root)'


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _require_root(config: AppConfig) -> Path:
    root = config.resolve_docs_root()
    if root is None:
        console.print(
            "[yellow]Documentation search disabled: no docs root given and none discovered. "
            "Pass --root or run 'rustup component add rust-docs'.[/yellow]"
        )
        raise typer.Exit(code=1)
    return root


@app.command()
def index(
    root: Optional[Path] = typer.Argument(None, help="Documentation root to index.", resolve_path=True),
    cache: Path = typer.Option(None, "--cache", help="Index cache file"),
    body: bool = typer.Option(False, "--body", help=_BODY_HELP),
    subdir: str = typer.Option(AppConfig().preferred_subdir, "--subdir", help=_SUBDIR_HELP),
    force: bool = typer.Option(False, "--force", help="Ignore and overwrite an existing cache"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build the index for a documentation root and write the cache."""
    _setup_logging(verbose)
    config = AppConfig(docs_root=root, cache_path=cache, index_body=body, preferred_subdir=subdir)
    docs_root = _require_root(config)
    store = IndexCache(config.resolve_cache_path(Path.cwd()))

    indexer = Indexer(config)
    cached = None if force else store.load(indexer.fingerprint(docs_root))
    if cached is not None:
        console.print(f"Index already cached ({len(cached)} documents): {store.cache_path}")
        return

    console.print(f"Indexing [bold]{docs_root}[/bold]...")
    search_index, stats = indexer.build(docs_root)
    saved = store.save(search_index)
    console.print(f"Indexed: {stats.indexed}, skipped: {stats.skipped}, failed: {stats.failed}")
    if saved:
        console.print(f"Cache written to {store.cache_path}")
    else:
        console.print(f"[yellow]Could not write cache to {store.cache_path}[/yellow]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    root: Optional[Path] = typer.Option(None, "--root", help="Documentation root", resolve_path=True),
    cache: Path = typer.Option(None, "--cache", help="Index cache file"),
    body: bool = typer.Option(False, "--body", help=_BODY_HELP),
    subdir: str = typer.Option(AppConfig().preferred_subdir, "--subdir", help=_SUBDIR_HELP),
    top_k: int = typer.Option(AppConfig().top_k, help="Number of results to display"),
    timeout: float = typer.Option(300.0, help="Seconds to wait for the index build"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search the documentation index."""
    _setup_logging(verbose)
    config = AppConfig(
        docs_root=root,
        cache_path=cache,
        index_body=body,
        preferred_subdir=subdir,
        top_k=top_k,
        build_timeout=timeout,
    )
    docs_root = _require_root(config)

    searcher = DocsSearcher(docs_root, config, cache=IndexCache(config.resolve_cache_path(Path.cwd())))
    with console.status("Building index..."):
        searcher.wait()

    state = searcher.state
    if isinstance(state, Failed):
        console.print(f"[red]Search unavailable: {state.message}[/red]")
        raise typer.Exit(code=1)

    results = searcher.search(query)
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Title")
    table.add_column("Path")
    table.add_column("Description")

    for result in results:
        table.add_row(f"{result.score:.4f}", result.title, result.path, result.description)

    console.print(table)


@app.command()
def status(
    root: Optional[Path] = typer.Option(None, "--root", help="Documentation root", resolve_path=True),
    cache: Path = typer.Option(None, "--cache", help="Index cache file"),
    body: bool = typer.Option(False, "--body", help=_BODY_HELP),
    subdir: str = typer.Option(AppConfig().preferred_subdir, "--subdir", help=_SUBDIR_HELP),
) -> None:
    """Show the documentation root and whether a matching cache exists."""
    config = AppConfig(docs_root=root, cache_path=cache, index_body=body, preferred_subdir=subdir)
    docs_root = config.resolve_docs_root()
    store = IndexCache(config.resolve_cache_path(Path.cwd()))

    console.print(f"Docs root: {docs_root if docs_root is not None else '[yellow]NOT FOUND[/yellow]'}")
    if root is None:
        discovered = discover_docs_root()
        console.print(f"Discovered rust docs: {discovered if discovered is not None else 'NOT INSTALLED'}")

    console.print(f"Cache file: {store.cache_path}")
    if docs_root is None:
        return

    cached = store.load(Indexer(config).fingerprint(docs_root))
    if cached is None:
        console.print("Cache: [yellow]missing or outdated[/yellow]")
    else:
        console.print(f"Cache: {len(cached)} documents")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    root: Optional[Path] = typer.Option(None, "--root", help="Documentation root", resolve_path=True),
    cache: Path = typer.Option(None, "--cache", help="Index cache file"),
    body: bool = typer.Option(False, "--body", help=_BODY_HELP),
    subdir: str = typer.Option(AppConfig().preferred_subdir, "--subdir", help=_SUBDIR_HELP),
) -> None:
    """Start the web API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from docsearch.web.app import app as web_app, configure

    config = AppConfig(docs_root=root, cache_path=cache, index_body=body, preferred_subdir=subdir)
    docs_root = config.resolve_docs_root()
    if docs_root is None:
        console.print("[yellow]Warning: no documentation root found, searches will be disabled.[/yellow]")
    configure(config)

    console.print(f"Starting web interface on http://{host}:{port} (docs: {docs_root})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
