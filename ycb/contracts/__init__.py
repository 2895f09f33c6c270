"""Abstract contracts for the search backends."""

from .search import ISearchClient
from .images import IImageResolver

__all__ = [
    "ISearchClient",
    "IImageResolver",
]
