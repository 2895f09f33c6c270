# ycb/models/session.py
"""Transient search state held for the lifetime of the view."""

from dataclasses import dataclass, field
from typing import List

from .entry import Entry


@dataclass
class SearchSession:
    """Input text plus the two result sets and their request generations."""

    query_text: str = ""
    lexical_results: List[Entry] = field(default_factory=list)
    semantic_results: List[Entry] = field(default_factory=list)

    # Monotonic counters, one per search mode. A response is applied only
    # if it carries the latest generation issued for its mode.
    lexical_generation: int = 0
    semantic_generation: int = 0

    lexical_loading: bool = False
    semantic_loading: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.query_text.strip()

    @property
    def is_loading(self) -> bool:
        return self.lexical_loading or self.semantic_loading

    @property
    def show_onboarding(self) -> bool:
        return len(self.query_text) == 0

    @property
    def show_no_results(self) -> bool:
        return (
            len(self.query_text) > 0
            and not self.lexical_results
            and not self.semantic_results
            and not self.is_loading
        )
