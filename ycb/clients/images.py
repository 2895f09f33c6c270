# ycb/clients/images.py
"""Image lookups for image-type entries."""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from ..contracts.images import IImageResolver
from ..core.errors import ImageResolutionError
from ..models.entry import Entry

logger = logging.getLogger(__name__)


class ImageResolver(IImageResolver):
    """
    Client for `POST {backend}/fetchImagesByIDs`.

    One request per chunk of `batch_size` ids; chunks run concurrently,
    at most `concurrency` at a time.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        batch_size: int = 20,
        concurrency: int = 4,
    ):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.batch_size = max(1, batch_size)
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def resolve(self, entry_id: str) -> Optional[str]:
        urls = await self.resolve_many([entry_id])
        return urls.get(entry_id)

    async def resolve_many(self, entry_ids: List[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(entry_ids))
        if not ids:
            return {}

        chunks = [ids[i:i + self.batch_size] for i in range(0, len(ids), self.batch_size)]
        results = await asyncio.gather(*(self._resolve_chunk(chunk) for chunk in chunks))

        urls: Dict[str, str] = {}
        for chunk_urls in results:
            urls.update(chunk_urls)
        return urls

    async def _resolve_chunk(self, ids: List[str]) -> Dict[str, str]:
        async with self._semaphore:
            try:
                return await self._fetch(ids)
            except ImageResolutionError as e:
                logger.warning("Image lookup failed for %d id(s): %s", len(ids), e)
                return {}

    async def _fetch(self, ids: List[str]) -> Dict[str, str]:
        try:
            response = await self.http.post(
                f"{self.base_url}/fetchImagesByIDs",
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={"ids": ids},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ImageResolutionError(str(e)) from e

        try:
            urls = data["body"]["urls"]
        except (KeyError, TypeError) as e:
            raise ImageResolutionError("Malformed image response") from e
        if not isinstance(urls, dict):
            raise ImageResolutionError("Malformed image response")

        return {str(key): str(url) for key, url in urls.items() if key in ids and url}


async def hydrate_images(entries: List[Entry], resolver: IImageResolver) -> List[Entry]:
    """
    Attach image URLs to image-type entries.

    Non-image entries are never looked up. Order is preserved; entries
    whose image could not be resolved are returned unchanged.
    """
    image_ids = [entry.id for entry in entries if entry.is_image]
    if not image_ids:
        return list(entries)

    urls = await resolver.resolve_many(image_ids)
    return [
        entry.with_image(urls[entry.id]) if entry.id in urls else entry
        for entry in entries
    ]
