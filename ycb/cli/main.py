# ycb/cli/main.py
"""Your Commonbase search (ycb) - knowledge-base search CLI."""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ycb.clients import create_clients
from ycb.core.config import ConfigLoader
from ycb.core.errors import YCBError, classify_error
from ycb.core.logging import DEFAULT_LOG_FILE, setup_logging
from ycb.core.normalizer import (
    display_title,
    entry_url,
    match_label,
    source_label,
    strip_highlight,
)
from ycb.core.user_config import UserConfig
from ycb.models.entry import Entry

app = typer.Typer(
    name="ycb",
    help="Search your Commonbase knowledge base",
    add_completion=False,
)
console = Console()


def _load(config: Optional[Path], user_config: Optional[Path]):
    cfg = ConfigLoader.load(config)
    prefs = UserConfig.load(user_config)
    return cfg, prefs


def _fail(exc: BaseException) -> None:
    info = classify_error(exc)
    console.print(f"\n[bold red]✗ {info.title}:[/bold red] {info.message}")
    console.print(f"[dim]{escape(str(exc))}[/dim]")
    raise typer.Exit(1)


def _print_results(title: str, entries: List[Entry], ycb_url: str, semantic: bool) -> None:
    if not entries:
        console.print("[yellow]No results found.[/yellow]")
        return

    table = Table(title=title, header_style="bold cyan")
    table.add_column("#", style="dim", width=3, no_wrap=True)
    if semantic:
        table.add_column("Match", style="green", justify="right", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Source", style="magenta", no_wrap=True)
    table.add_column("Entry", style="blue", overflow="fold")

    for i, entry in enumerate(entries, 1):
        title_text = display_title(entry)
        if entry.highlight and entry.highlight.title:
            title_text = strip_highlight(entry.highlight.title)
        row = [str(i)]
        if semantic:
            row.append(match_label(entry.similarity or 0.0))
        row.extend([
            title_text,
            source_label(entry.metadata.author),
            entry_url(ycb_url, entry.id),
        ])
        table.add_row(*row)

    console.print(table)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Launch the interactive search when no command is given."""
    ctx.obj = {'verbose': verbose}
    if ctx.invoked_subcommand is None:
        interactive(config=None, user_config=None, verbose=verbose)


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of results"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Custom service config file"),
    user_config: Optional[Path] = typer.Option(None, "--user-config", help="Custom preferences file"),
):
    """
    Lexical (keyword) search.

    Examples:
        ycb search "rust ownership"
        ycb search "sourdough" --limit 5
    """
    setup_logging(verbose=bool(ctx.obj and ctx.obj.get('verbose')))
    try:
        cfg, prefs = _load(config, user_config)
        api_key = prefs.require_api_key()

        async def run():
            clients = create_clients(api_key, prefs.preferences.ycb_url, cfg)
            try:
                return await clients.lexical.search(query, page_size=limit)
            finally:
                await clients.aclose()

        results = asyncio.run(run())
    except YCBError as e:
        _fail(e)

    _print_results(f"Search Results ({len(results)})", results, prefs.preferences.ycb_url, semantic=False)


@app.command()
def semantic(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum matches"),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", help="Minimum similarity (0.0-1.0)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Custom service config file"),
    user_config: Optional[Path] = typer.Option(None, "--user-config", help="Custom preferences file"),
):
    """
    Semantic (similarity) search.

    Examples:
        ycb semantic "how do lifetimes work"
        ycb semantic "bread recipes" --limit 10 --threshold 0.5
    """
    setup_logging(verbose=bool(ctx.obj and ctx.obj.get('verbose')))
    try:
        cfg, prefs = _load(config, user_config)
        api_key = prefs.require_api_key()

        async def run():
            clients = create_clients(api_key, prefs.preferences.ycb_url, cfg)
            try:
                return await clients.semantic.search(
                    query, match_limit=limit, match_threshold=threshold
                )
            finally:
                await clients.aclose()

        results = asyncio.run(run())
    except YCBError as e:
        _fail(e)

    _print_results(
        f"Semantic Results ({len(results)} semantic matches)",
        results,
        prefs.preferences.ycb_url,
        semantic=True,
    )


@app.command("config")
def configure(
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Your Commonbase API key"),
    url: Optional[str] = typer.Option(None, "--url", help="Backend URL"),
    user_config: Optional[Path] = typer.Option(None, "--user-config", help="Custom preferences file"),
):
    """
    Show or update saved preferences.

    Examples:
        ycb config
        ycb config --api-key sk-...
        ycb config --url https://example.com/backend
    """
    try:
        prefs = UserConfig.load(user_config)
    except YCBError as e:
        _fail(e)

    if api_key is not None or url is not None:
        if api_key is not None:
            prefs.preferences.api_key = api_key.strip()
        if url is not None:
            prefs.preferences.ycb_url = url.strip()
        path = prefs.save(user_config)
        console.print(f"[green]✓[/green] Saved preferences to {path}")

    key = prefs.preferences.api_key
    masked = f"{key[:4]}…{key[-4:]}" if len(key) > 8 else ("set" if key else "[red]not set[/red]")

    table = Table(title="Preferences")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("API key", masked)
    table.add_row("Backend URL", prefs.preferences.ycb_url)
    console.print(table)


@app.command()
def interactive(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Custom service config file"),
    user_config: Optional[Path] = typer.Option(None, "--user-config", help="Custom preferences file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Launch interactive TUI (Terminal User Interface).

    Features:
    - Search as you type
    - Ctrl+S semantic search on the current text
    - Enter opens the entry, Ctrl+Y copies content or image,
      Ctrl+L copies the source URL, Ctrl+O opens the source
    """
    from ycb.tui.tui_app import run_tui

    setup_logging(verbose=verbose, log_file=DEFAULT_LOG_FILE)
    try:
        cfg, prefs = _load(config, user_config)
    except YCBError as e:
        _fail(e)

    run_tui(user_config=prefs, config=cfg)


@app.command()
def version():
    """Show version information."""
    from ycb import __version__, __full_name__
    console.print(f"{__full_name__} (ycb) v{__version__}")


if __name__ == "__main__":
    app()
