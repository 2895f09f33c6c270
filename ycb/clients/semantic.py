# ycb/clients/semantic.py
"""On-demand similarity search against the YCB backend."""

import logging
from typing import List, Optional

import httpx

from ..contracts.images import IImageResolver
from ..contracts.search import ISearchClient
from ..core.errors import SemanticSearchError
from ..models.entry import Entry
from .images import hydrate_images

logger = logging.getLogger(__name__)


class SemanticSearchClient(ISearchClient):
    """
    Client for `POST {backend}/search`.

    Authenticates with the static API key directly. Any non-2xx answer
    is a SemanticSearchError, whatever its status or body.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        images: IImageResolver,
        match_limit: int = 5,
        match_threshold: float = 0.35,
    ):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.images = images
        self.match_limit = match_limit
        self.match_threshold = match_threshold

    async def search(
        self,
        query: str,
        match_limit: Optional[int] = None,
        match_threshold: Optional[float] = None,
    ) -> List[Entry]:
        if not query or not query.strip():
            return []

        payload = {
            "text": query,
            "matchLimit": self.match_limit if match_limit is None else match_limit,
            "matchThreshold": self.match_threshold if match_threshold is None else match_threshold,
        }

        try:
            response = await self.http.post(
                f"{self.base_url}/search",
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json=payload,
            )
        except httpx.HTTPError as e:
            raise SemanticSearchError(f"Semantic search request failed: {e}") from e

        if not response.is_success:
            raise SemanticSearchError(f"Semantic search failed ({response.status_code})")

        try:
            results = response.json()
        except ValueError as e:
            raise SemanticSearchError("Semantic search response is not JSON") from e
        if not isinstance(results, list):
            raise SemanticSearchError("Semantic search response is not a list")

        entries = []
        for raw in results:
            try:
                entries.append(Entry.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed semantic result: %s", e)

        return await hydrate_images(entries, self.images)
