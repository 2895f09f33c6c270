"""Data models for YCB search."""

from .entry import Entry, EntryMetadata, Highlight
from .session import SearchSession

__all__ = [
    "Entry",
    "EntryMetadata",
    "Highlight",
    "SearchSession",
]
