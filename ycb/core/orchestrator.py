# ycb/core/orchestrator.py
"""Search orchestrator: input state, the two search modes and their results."""

import logging
from enum import Enum
from typing import Callable, List, Optional

from ..contracts.search import ISearchClient
from ..models.entry import Entry
from ..models.session import SearchSession
from .errors import AuthError, LexicalSearchError, SemanticSearchError, classify_error

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


Notifier = Callable[[NotificationLevel, str, str], None]


class SearchOrchestrator:
    """
    Owns a SearchSession and dispatches queries to the two clients.

    Every dispatched query is tagged with the generation counter of its
    mode; a response is applied only if no newer query was issued since.

    Transitions:
    - set_query: lexical re-issued, semantic results cleared at once
    - trigger_semantic: semantic issued, lexical results untouched
    - auth failure: lexical search stops for the rest of the session
    """

    def __init__(
        self,
        lexical: ISearchClient,
        semantic: ISearchClient,
        notify: Optional[Notifier] = None,
        tokens=None,
    ):
        self.lexical = lexical
        self.semantic = semantic
        self.notify = notify
        self.tokens = tokens
        self.session = SearchSession()
        self.lexical_available = True

    @property
    def lexical_results(self) -> List[Entry]:
        return self.session.lexical_results

    @property
    def semantic_results(self) -> List[Entry]:
        return self.session.semantic_results

    @property
    def can_trigger_semantic(self) -> bool:
        return not self.session.is_blank

    async def initialize(self) -> bool:
        """Fetch the search token up front so a bad API key shows at startup."""
        if self.tokens is None:
            return True
        try:
            await self.tokens.get_token()
            return True
        except AuthError as e:
            self._disable_lexical(e)
            return False

    def _disable_lexical(self, exc: AuthError) -> None:
        logger.error("Lexical search disabled: %s", exc)
        self.lexical_available = False
        self.session.lexical_loading = False
        self.report_error(exc)

    def set_query(self, text: str) -> int:
        """
        Record new input text.

        Clears semantic results unconditionally and invalidates any
        in-flight semantic request. Returns the lexical generation to
        pass to run_lexical.
        """
        session = self.session
        session.query_text = text
        session.semantic_results = []
        session.semantic_generation += 1
        session.semantic_loading = False
        session.lexical_generation += 1

        if session.is_blank:
            session.lexical_results = []
            session.lexical_loading = False
        else:
            session.lexical_loading = self.lexical_available

        return session.lexical_generation

    def is_current_lexical(self, generation: int) -> bool:
        return generation == self.session.lexical_generation

    def is_current_semantic(self, generation: int) -> bool:
        return generation == self.session.semantic_generation

    async def run_lexical(self, generation: int) -> bool:
        """
        Run the lexical client for the current query.

        Returns True when the results were applied, False when the query
        was blank, a newer query superseded this one, or lexical search
        was disabled by an earlier auth failure.
        """
        session = self.session
        query = session.query_text
        if session.is_blank or not self.is_current_lexical(generation):
            return False
        if not self.lexical_available:
            return False

        try:
            results = await self.lexical.search(query)
        except AuthError as e:
            if self.lexical_available:
                session.lexical_results = []
                self._disable_lexical(e)
            return True
        except LexicalSearchError as e:
            if not self.is_current_lexical(generation):
                return False
            logger.warning("Lexical search failed for generation %d: %s", generation, e)
            session.lexical_results = []
            session.lexical_loading = False
            self.report_error(e)
            return True

        if not self.is_current_lexical(generation):
            logger.debug("Discarding stale lexical response (generation %d)", generation)
            return False

        session.lexical_results = list(results)
        session.lexical_loading = False
        return True

    async def update_query(self, text: str) -> bool:
        return await self.run_lexical(self.set_query(text))

    def begin_semantic(self) -> Optional[int]:
        """Start a semantic request; None when the query is blank."""
        session = self.session
        if session.is_blank:
            return None
        session.semantic_generation += 1
        session.semantic_loading = True
        return session.semantic_generation

    async def run_semantic(self, generation: int) -> bool:
        session = self.session
        query = session.query_text
        if not self.is_current_semantic(generation):
            return False

        try:
            results = await self.semantic.search(query)
        except SemanticSearchError as e:
            if not self.is_current_semantic(generation):
                return False
            logger.warning("Semantic search failed: %s", e)
            session.semantic_results = []
            session.semantic_loading = False
            self.report_error(e)
            return True

        if not self.is_current_semantic(generation):
            logger.debug("Discarding stale semantic response (generation %d)", generation)
            return False

        session.semantic_results = list(results)
        session.semantic_loading = False
        return True

    async def trigger_semantic(self) -> bool:
        generation = self.begin_semantic()
        if generation is None:
            return False
        return await self.run_semantic(generation)

    def report_error(self, exc: BaseException) -> None:
        """Single error policy: classify, then notify only if user-visible."""
        info = classify_error(exc)
        if not info.visible:
            logger.info("Suppressed %s: %s", info.code.value, exc)
            return
        if self.notify is not None:
            self.notify(NotificationLevel.ERROR, info.title, info.message)
