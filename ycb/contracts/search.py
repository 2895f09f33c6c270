# ycb/contracts/search.py
"""Abstract interface for the two search modes."""

from abc import ABC, abstractmethod
from typing import List

from ..models.entry import Entry


class ISearchClient(ABC):
    """
    Runs a query against a remote backend and returns display-ready entries.

    Implementations:
    - Lexical (hosted Meilisearch index, as-you-type)
    - Semantic (embedding similarity endpoint, on demand)
    """

    @abstractmethod
    async def search(self, query: str) -> List[Entry]:
        """
        Execute a query.

        Args:
            query: Raw user input

        Returns:
            Entries in backend order (most relevant first), image entries
            hydrated. Empty list for a blank query, without network I/O.

        Raises:
            YCBError subclass describing the failure
        """
        pass
