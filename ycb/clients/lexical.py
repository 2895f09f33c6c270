# ycb/clients/lexical.py
"""As-you-type search against the hosted Meilisearch index."""

import logging
from typing import List, Optional

import httpx

from ..contracts.images import IImageResolver
from ..contracts.search import ISearchClient
from ..core.errors import LexicalSearchError
from ..models.entry import Entry
from .auth import TokenProvider
from .images import hydrate_images

logger = logging.getLogger(__name__)

DEFAULT_INDEX = "ycb_fts_staging"
HIGHLIGHT_ATTRIBUTES = ["data", "metadata.title", "metadata.author"]


class MeiliSearchClient(ISearchClient):
    """
    Lexical search client.

    Uses the exchanged session token, never the raw API key. A 401/403
    from the index drops the cached token and the query is re-issued once.
    A failed token exchange propagates as AuthError.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        host: str,
        tokens: TokenProvider,
        images: IImageResolver,
        index: str = DEFAULT_INDEX,
        page_size: int = 20,
    ):
        self.http = http
        self.host = host.rstrip("/")
        self.tokens = tokens
        self.images = images
        self.index = index
        self.page_size = page_size

    async def search(self, query: str, page_size: Optional[int] = None) -> List[Entry]:
        if not query or not query.strip():
            return []

        hits = await self._query(query, page_size or self.page_size)

        entries = []
        for hit in hits:
            try:
                entries.append(Entry.from_dict(hit))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed hit: %s", e)

        return await hydrate_images(entries, self.images)

    async def _query(self, query: str, page_size: int) -> List[dict]:
        response = await self._post(query, page_size)
        if response.status_code in (401, 403):
            logger.info("Search token rejected, re-acquiring")
            self.tokens.invalidate()
            response = await self._post(query, page_size)
            if response.status_code in (401, 403):
                raise LexicalSearchError("Search token rejected", transport=True)

        if response.is_error:
            raise LexicalSearchError(
                f"Index answered {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LexicalSearchError("Index response is not JSON") from e

        hits = data.get("hits") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise LexicalSearchError("Index response has no hits")
        return hits

    async def _post(self, query: str, page_size: int) -> httpx.Response:
        token = await self.tokens.get_token()

        try:
            return await self.http.post(
                f"{self.host}/indexes/{self.index}/search",
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {token}",
                },
                json={
                    "q": query,
                    "hitsPerPage": page_size,
                    "page": 1,
                    "attributesToHighlight": HIGHLIGHT_ATTRIBUTES,
                },
            )
        except httpx.HTTPError as e:
            raise LexicalSearchError(f"Index request failed: {e}", transport=True) from e
