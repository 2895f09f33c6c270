"""HTTP clients for the YCB backend and the hosted search index."""

from dataclasses import dataclass
from typing import Any, Dict

import httpx

from .auth import TokenProvider
from .images import ImageResolver, hydrate_images
from .lexical import MeiliSearchClient
from .semantic import SemanticSearchClient

__all__ = [
    "BackendClients",
    "TokenProvider",
    "ImageResolver",
    "MeiliSearchClient",
    "SemanticSearchClient",
    "create_clients",
    "hydrate_images",
]


@dataclass
class BackendClients:
    """All clients of one session, sharing a single connection pool."""

    http: httpx.AsyncClient
    tokens: TokenProvider
    images: ImageResolver
    lexical: MeiliSearchClient
    semantic: SemanticSearchClient

    async def aclose(self) -> None:
        await self.http.aclose()


def create_clients(
    api_key: str,
    ycb_url: str,
    cfg: Dict[str, Any],
    http: httpx.AsyncClient = None,
) -> BackendClients:
    """Wire the clients from user preferences and service configuration."""
    if http is None:
        http = httpx.AsyncClient(timeout=cfg['http']['timeout'])

    tokens = TokenProvider(
        http,
        ycb_url,
        api_key,
        ttl_seconds=cfg['auth']['token_ttl_seconds'],
    )
    images = ImageResolver(
        http,
        ycb_url,
        api_key,
        batch_size=cfg['images']['batch_size'],
        concurrency=cfg['images']['concurrency'],
    )
    lexical = MeiliSearchClient(
        http,
        cfg['lexical']['host'],
        tokens,
        images,
        index=cfg['lexical']['index'],
        page_size=cfg['lexical']['page_size'],
    )
    semantic = SemanticSearchClient(
        http,
        ycb_url,
        api_key,
        images,
        match_limit=cfg['semantic']['match_limit'],
        match_threshold=cfg['semantic']['match_threshold'],
    )
    return BackendClients(http, tokens, images, lexical, semantic)
