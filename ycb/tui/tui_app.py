"""
Textual-based interactive search for Your Commonbase.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header, Input, OptionList, Static
from textual.widgets.option_list import Option, OptionDoesNotExist
from textual import on

from ..clients import BackendClients, create_clients
from ..core.clipboard import copy_image
from ..core.config import ConfigLoader
from ..core.errors import ClipboardError, ConfigError
from ..core.normalizer import (
    DEFAULT_ICON,
    accessories,
    dashboard_url,
    display_icon,
    display_subtitle,
    entry_url,
    highlight_to_rich,
    highlighted_title,
)
from ..core.orchestrator import NotificationLevel, SearchOrchestrator
from ..core.user_config import UserConfig
from ..models.entry import Entry

logger = logging.getLogger(__name__)

ONBOARDING_ID = "onboarding"
NO_RESULTS_ID = "no-results"


def _row(entry: Entry, semantic: bool) -> Text:
    """Two-line result row: icon, title and accessories, then subtitle."""
    icon = display_icon(entry)
    marker = icon if icon == DEFAULT_ICON else "🖼"

    row = Text.assemble(f"{marker} ", highlighted_title(entry))
    labels = accessories(entry, semantic=semantic)
    if labels:
        row.append("  " + "  ·  ".join(labels), style="dim cyan")
    row.append("\n   ")
    row.append(display_subtitle(entry), style="dim")
    return row


def _header(title: str, subtitle: str = "") -> Text:
    header = Text(title, style="bold")
    if subtitle:
        header.append(f"  {subtitle}", style="dim")
    return header


class CommonbaseSearchApp(App):
    """Textual TUI for searching a knowledge base."""

    TITLE = "Your Commonbase"

    CSS = """
    Screen {
        layout: vertical;
    }

    #search-bar {
        dock: top;
        margin: 1 1 0 1;
    }

    #results {
        height: 1fr;
        border: solid $primary;
    }

    #preview {
        height: auto;
        max-height: 8;
        padding: 0 1;
        color: $text-muted;
        border-top: solid $primary-darken-2;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "semantic_search", "Semantic Search", priority=True),
        Binding("ctrl+y", "copy_content", "Copy Content", priority=True),
        Binding("ctrl+l", "copy_source", "Copy Source URL", priority=True),
        Binding("ctrl+o", "open_source", "Open Source", priority=True),
        Binding("down", "focus_results", "Results", show=False),
        Binding("escape", "clear_or_quit", "Clear / Quit", priority=True),
    ]

    def __init__(
        self,
        user_config: Optional[UserConfig] = None,
        config: Optional[dict] = None,
        orchestrator: Optional[SearchOrchestrator] = None,
        clients: Optional[BackendClients] = None,
    ):
        super().__init__()
        self.user_config = user_config
        self.cfg = config or ConfigLoader.load()
        self.orchestrator = orchestrator
        self.clients = clients
        self.debounce = float(self.cfg['ui']['debounce_seconds'])
        self._options: Dict[str, Tuple[Entry, bool]] = {}

    @property
    def ycb_url(self) -> str:
        if self.user_config is None:
            return self.cfg['backend']['default_url']
        return self.user_config.preferences.ycb_url

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Input(placeholder="Find anything you've ever saved...", id="search-bar"),
            OptionList(id="results"),
            Static(id="preview"),
        )
        yield Footer()

    def on_mount(self) -> None:
        """Wire the backend clients and fetch the search token."""
        if self.orchestrator is None:
            try:
                if self.user_config is None:
                    self.user_config = UserConfig.load()
                api_key = self.user_config.require_api_key()
            except ConfigError as e:
                logger.error("Cannot start search: %s", e)
                self.notify(
                    "Set your API key with: ycb config --api-key <key>",
                    title="Configuration Error",
                    severity="error",
                    timeout=10,
                )
                self._render_results()
                return

            if self.clients is None:
                self.clients = create_clients(api_key, self.ycb_url, self.cfg)
            self.orchestrator = SearchOrchestrator(
                self.clients.lexical,
                self.clients.semantic,
                notify=self._notify,
                tokens=self.clients.tokens,
            )
            self.run_worker(self.orchestrator.initialize(), group="init")
        elif self.orchestrator.notify is None:
            self.orchestrator.notify = self._notify

        self._render_results()
        self.query_one("#search-bar", Input).focus()

    async def on_unmount(self) -> None:
        if self.clients is not None:
            await self.clients.aclose()

    def _notify(self, level: NotificationLevel, title: str, message: str) -> None:
        self.notify(message, title=title, severity=level.value)

    # -- searching -------------------------------------------------------

    @on(Input.Changed, "#search-bar")
    def handle_search_text_change(self, event: Input.Changed) -> None:
        if self.orchestrator is None:
            return
        generation = self.orchestrator.set_query(event.value)
        # Semantic results are gone as soon as the user types
        self._render_results()
        if not self.orchestrator.session.is_blank:
            self.run_worker(
                self._debounced_lexical(generation),
                group="lexical",
                exclusive=True,
            )

    async def _debounced_lexical(self, generation: int) -> None:
        await asyncio.sleep(self.debounce)
        if await self.orchestrator.run_lexical(generation):
            self._render_results()

    def action_semantic_search(self) -> None:
        if self.orchestrator is None or not self.orchestrator.can_trigger_semantic:
            return
        generation = self.orchestrator.begin_semantic()
        self._render_results()
        self.run_worker(self._semantic(generation), group="semantic", exclusive=True)

    async def _semantic(self, generation: int) -> None:
        if await self.orchestrator.run_semantic(generation):
            self._render_results()

    # -- rendering -------------------------------------------------------

    def _build_options(self) -> List[Option]:
        options: List[Option] = []
        self._options = {}
        session = self.orchestrator.session if self.orchestrator else None

        if session is not None and session.semantic_results:
            count = len(session.semantic_results)
            options.append(Option(
                _header("Semantic Results", f"{count} semantic matches"),
                id="header-semantic",
                disabled=True,
            ))
            for entry in session.semantic_results:
                option_id = f"semantic-{entry.id}"
                if option_id in self._options:
                    continue
                self._options[option_id] = (entry, True)
                options.append(Option(_row(entry, semantic=True), id=option_id))

        if session is not None and session.lexical_results:
            count = len(session.lexical_results)
            options.append(Option(
                _header("Search Results", f"{count} results"),
                id="header-lexical",
                disabled=True,
            ))
            for entry in session.lexical_results:
                option_id = f"lexical-{entry.id}"
                if option_id in self._options:
                    continue
                self._options[option_id] = (entry, False)
                options.append(Option(_row(entry, semantic=False), id=option_id))

        if session is None or session.show_onboarding:
            options.append(Option(_header("Getting Started"), id="header-onboarding", disabled=True))
            options.append(Option(
                Text.assemble(
                    "🔍 Start typing to search your knowledge base\n   ",
                    ("Search as you type • Press Ctrl+S for semantic search", "dim"),
                ),
                id=ONBOARDING_ID,
            ))
        elif session.show_no_results:
            options.append(Option(_header("No Results"), id="header-no-results", disabled=True))
            options.append(Option(
                Text.assemble(
                    "❌ No results found\n   ",
                    ("Try different search terms or press Ctrl+S for semantic search", "dim"),
                ),
                id=NO_RESULTS_ID,
            ))

        return options

    def _render_results(self) -> None:
        results = self.query_one("#results", OptionList)
        previous = self._highlighted_id()

        results.clear_options()
        results.add_options(self._build_options())

        target = None
        if previous is not None:
            try:
                target = results.get_option_index(previous)
            except OptionDoesNotExist:
                target = None
        if target is None:
            target = next(
                (i for i in range(results.option_count) if not results.get_option_at_index(i).disabled),
                None,
            )
        results.highlighted = target

        session = self.orchestrator.session if self.orchestrator else None
        self.sub_title = "Searching..." if session is not None and session.is_loading else ""
        self._update_preview()

    def _highlighted_id(self) -> Optional[str]:
        results = self.query_one("#results", OptionList)
        if results.highlighted is None:
            return None
        return results.get_option_at_index(results.highlighted).id

    def _selected_entry(self) -> Optional[Tuple[Entry, bool]]:
        option_id = self._highlighted_id()
        if option_id is None:
            return None
        return self._options.get(option_id)

    def _update_preview(self) -> None:
        preview = self.query_one("#preview", Static)
        selected = self._selected_entry()
        if selected is None:
            preview.update("")
            return
        entry, _ = selected
        if entry.highlight and entry.highlight.data:
            body = highlight_to_rich(entry.highlight.data)
        else:
            body = Text(entry.data)
        if entry.metadata.author:
            body.append(f"\n{entry.metadata.author}", style="italic")
        preview.update(body)

    @on(OptionList.OptionHighlighted, "#results")
    def handle_highlight(self, event: OptionList.OptionHighlighted) -> None:
        self._update_preview()

    # -- actions ---------------------------------------------------------

    @on(OptionList.OptionSelected, "#results")
    def handle_selected(self, event: OptionList.OptionSelected) -> None:
        self._primary_action(event.option.id)

    @on(Input.Submitted, "#search-bar")
    def handle_submitted(self, event: Input.Submitted) -> None:
        self._primary_action(self._highlighted_id())

    def _primary_action(self, option_id: Optional[str]) -> None:
        if option_id == ONBOARDING_ID:
            self.open_url(dashboard_url(self.ycb_url))
        elif option_id == NO_RESULTS_ID:
            self.action_semantic_search()
        elif option_id in self._options:
            entry, _ = self._options[option_id]
            self.open_url(entry_url(self.ycb_url, entry.id))

    def action_copy_content(self) -> None:
        selected = self._selected_entry()
        if selected is None:
            return
        entry, _ = selected
        if entry.is_image and entry.image:
            self.run_worker(self._copy_image(entry.image), group="clipboard")
        else:
            self.copy_to_clipboard(entry.data)
            self.notify("Copied content to clipboard")

    async def _copy_image(self, url: str) -> None:
        self.notify("Copying image...")
        try:
            if self.clients is None:
                raise ClipboardError("No HTTP session available")
            await copy_image(self.clients.http, url)
        except ClipboardError as e:
            logger.warning("Failed to copy image: %s", e)
            self.orchestrator.report_error(e)
            self.copy_to_clipboard(url)
            return
        self.notify("Image copied to clipboard")

    def action_copy_source(self) -> None:
        selected = self._selected_entry()
        if selected is None or not selected[0].metadata.author:
            return
        self.copy_to_clipboard(selected[0].metadata.author)
        self.notify("Copied source URL to clipboard")

    def action_open_source(self) -> None:
        selected = self._selected_entry()
        if selected is None or not selected[0].metadata.author:
            return
        self.open_url(selected[0].metadata.author)

    def action_focus_results(self) -> None:
        self.query_one("#results", OptionList).focus()

    def action_clear_or_quit(self) -> None:
        search_bar = self.query_one("#search-bar", Input)
        if search_bar.value:
            search_bar.value = ""
            search_bar.focus()
        else:
            self.exit()


def run_tui(user_config: Optional[UserConfig] = None, config: Optional[dict] = None):
    app = CommonbaseSearchApp(user_config=user_config, config=config)
    app.run()
