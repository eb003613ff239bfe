"""
Reddit OAuth (client-credentials) token provider

Exchanges REDDIT_CLIENT_ID / REDDIT_CLIENT_SECRET for an application-only
bearer token. Tokens are cached per client id until 60 seconds before they
expire; a cache refill is serialized behind a lock so concurrent callers
share one exchange instead of each hitting the token endpoint.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

import httpx

from src.config.settings import config
from src.core.exceptions import ConfigurationError, NetworkError, UpstreamAuthError
from src.core.logger import logger

# Refresh this many seconds before the declared expiry
TOKEN_REFRESH_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class RedditToken:
    access_token: str
    expires_in: int
    expires_at: float
    token_type: str = "bearer"

    def is_fresh(self, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now < self.expires_at - TOKEN_REFRESH_MARGIN_SECONDS


class RedditTokenProvider:
    """
    Client-credentials token provider.

    Usage:
        provider = RedditTokenProvider()
        token = await provider.acquire()
        headers = {"Authorization": f"Bearer {token.access_token}"}
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        token_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url or config.reddit_token_url
        self.user_agent = user_agent or config.reddit_user_agent
        self.timeout = timeout if timeout is not None else config.reddit_timeout_seconds
        self._transport = transport

        # key = client_id, value = RedditToken
        self._token_cache: dict[str, RedditToken] = {}
        self._lock: asyncio.Lock | None = None

    @property
    def client_id(self) -> str | None:
        return self._client_id or config.reddit_client_id

    @property
    def client_secret(self) -> str | None:
        return self._client_secret or config.reddit_client_secret

    def _credentials(self) -> tuple[str, str]:
        client_id = self.client_id
        client_secret = self.client_secret
        if not client_id or not client_secret:
            raise ConfigurationError("Reddit API credentials not configured")
        return client_id, client_secret

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def acquire(self) -> RedditToken:
        """
        Return a bearer token, reusing a cached one while it is fresh.

        Raises:
            ConfigurationError: client id or secret is missing (no request is made)
            UpstreamAuthError: the token endpoint answered with a non-2xx status
            NetworkError: transport failure, timeout, or an undecodable body
        """
        client_id, client_secret = self._credentials()

        cached = self._token_cache.get(client_id)
        if cached is not None and cached.is_fresh():
            return cached

        async with self._get_lock():
            # Another coroutine may have refilled the cache while we waited
            cached = self._token_cache.get(client_id)
            if cached is not None and cached.is_fresh():
                return cached

            token = await self._exchange(client_id, client_secret)
            self._token_cache[client_id] = token
            logger.debug(
                "[RedditAuth] Obtained access token, expires in {}s",
                token.expires_in,
            )
            return token

    async def _exchange(self, client_id: str, client_secret: str) -> RedditToken:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.token_url,
                    auth=httpx.BasicAuth(client_id, client_secret),
                    data={"grant_type": "client_credentials"},
                    headers={"User-Agent": self.user_agent},
                )
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out requesting Reddit OAuth token: {e}")
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error requesting Reddit OAuth token: {e}")

        if not resp.is_success:
            logger.warning("[RedditAuth] Token endpoint returned HTTP {}", resp.status_code)
            raise UpstreamAuthError(upstream_status=resp.status_code, body=resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkError(f"Malformed Reddit OAuth token response: {e}")

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise UpstreamAuthError(upstream_status=resp.status_code, body=resp.text)

        try:
            expires_in = int(data.get("expires_in") or 3600)
        except (TypeError, ValueError) as e:
            raise NetworkError(f"Malformed Reddit OAuth token response: {e}")

        return RedditToken(
            access_token=str(access_token),
            expires_in=expires_in,
            expires_at=time.time() + expires_in,
            token_type=str(data.get("token_type") or "bearer"),
        )

    def invalidate(self, access_token: str | None = None) -> None:
        """
        Drop the cached token for the configured client.

        Args:
            access_token: only drop the entry if it still holds this token
        """
        client_id = self.client_id
        if not client_id:
            return
        cached = self._token_cache.get(client_id)
        if cached is None:
            return
        if access_token is None or cached.access_token == access_token:
            self._token_cache.pop(client_id, None)


_provider: RedditTokenProvider | None = None


def get_token_provider() -> RedditTokenProvider:
    """Process-wide provider, so the token cache is shared by all requests."""
    global _provider
    if _provider is None:
        _provider = RedditTokenProvider()
    return _provider
