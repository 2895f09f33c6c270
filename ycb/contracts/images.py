# ycb/contracts/images.py
"""Abstract interface for image lookups."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class IImageResolver(ABC):
    """
    Resolves entry ids to displayable image URLs.

    Failures never propagate: a missing image is a legitimate outcome
    and callers fall back to a generic icon.
    """

    @abstractmethod
    async def resolve(self, entry_id: str) -> Optional[str]:
        """Return the URL for one entry, or None."""
        pass

    @abstractmethod
    async def resolve_many(self, entry_ids: List[str]) -> Dict[str, str]:
        """
        Resolve several entries with as few requests as possible.

        Returns:
            Mapping of id -> URL for the ids that resolved
        """
        pass
