# ycb/clients/auth.py
"""Exchanges the static API key for a short-lived search token."""

import logging
import time
from typing import Callable, Optional

import httpx

from ..core.errors import AuthError

logger = logging.getLogger(__name__)


class TokenProvider:
    """
    Fetches and caches the bearer token used by the lexical backend.

    The token is kept until `ttl_seconds` have elapsed or until
    `invalidate()` is called after the index rejects it. A failed exchange
    is kept too: later calls re-raise it without contacting the backend
    until `invalidate()` clears it.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        ttl_seconds: float = 3000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._failure: Optional[AuthError] = None

    @property
    def has_valid_token(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0
        self._failure = None

    async def get_token(self) -> str:
        """Return the cached token, exchanging the API key when needed."""
        if self.has_valid_token:
            return self._token

        if self._failure is not None:
            raise self._failure

        try:
            token = await self._exchange()
        except AuthError as e:
            self._failure = e
            raise
        self._token = token
        self._expires_at = self._clock() + self.ttl_seconds
        return token

    async def _exchange(self) -> str:
        try:
            response = await self.http.post(
                f"{self.base_url}/token",
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
            )
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("Token request failed: %s", e)
            raise AuthError(f"Token request failed: {e}") from e
        except ValueError as e:
            logger.error("Token response is not JSON (status %s)", response.status_code)
            raise AuthError("Token response is not JSON") from e

        if not isinstance(data, dict):
            raise AuthError("Unexpected token response")
        if data.get("error"):
            logger.error("Token exchange rejected: %s", data["error"])
            raise AuthError(str(data["error"]))
        token = data.get("token")
        if not token:
            raise AuthError("Token response has no token")

        logger.debug("Obtained search token (ttl=%ss)", self.ttl_seconds)
        return str(token)
