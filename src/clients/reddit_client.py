"""
Reddit API client

Every response is decoded at this boundary into one tagged result
(FetchOk / FetchNotFound / FetchRateLimited / FetchUpstreamFailure /
FetchNetworkFailure) before any caller sees it. Callers never get raw payloads.

Status mapping:
- 200 with a recognizable payload -> FetchOk
- 404 -> FetchNotFound (for `exists` this is a legitimate "no")
- 429 -> FetchRateLimited
- other non-2xx -> FetchUpstreamFailure
- transport error, timeout, non-JSON body -> FetchNetworkFailure
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote

import httpx

from src.config.settings import config
from src.core.exceptions import NetworkError, RateLimitedError, UpstreamError
from src.core.logger import logger
from src.core.reddit_auth import RedditTokenProvider, get_token_provider

DEFAULT_SUBREDDIT = "all"
DEFAULT_TOP_LIMIT = 10
MAX_TOP_LIMIT = 100


@dataclass(frozen=True)
class RedditPost:
    id: str
    title: str
    author: str
    score: int
    subreddit: str
    url: str
    created_utc: float

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "RedditPost":
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            score=int(data.get("score") or 0),
            subreddit=str(data.get("subreddit") or ""),
            url=str(data.get("url") or ""),
            created_utc=float(data.get("created_utc") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "score": self.score,
            "subreddit": self.subreddit,
            "url": self.url,
            "created_utc": self.created_utc,
        }


# ============ Tagged fetch results ============


@dataclass(frozen=True)
class FetchOk:
    payload: Any


@dataclass(frozen=True)
class FetchNotFound:
    body: str = ""


@dataclass(frozen=True)
class FetchRateLimited:
    retry_after: float | None = None


@dataclass(frozen=True)
class FetchUpstreamFailure:
    status_code: int
    body: str = ""


@dataclass(frozen=True)
class FetchNetworkFailure:
    reason: str


FetchResult = Union[
    FetchOk, FetchNotFound, FetchRateLimited, FetchUpstreamFailure, FetchNetworkFailure
]


def raise_for_result(result: FetchResult) -> None:
    """Turn a failure result into its exception. FetchOk / FetchNotFound pass through."""
    if isinstance(result, FetchRateLimited):
        raise RateLimitedError(retry_after=result.retry_after)
    if isinstance(result, FetchUpstreamFailure):
        raise UpstreamError(upstream_status=result.status_code, body=result.body)
    if isinstance(result, FetchNetworkFailure):
        raise NetworkError(result.reason)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def decode_response(resp: httpx.Response) -> FetchResult:
    status = resp.status_code
    if status == 404:
        return FetchNotFound(body=resp.text[:500])
    if status == 429:
        return FetchRateLimited(retry_after=_parse_retry_after(resp.headers.get("Retry-After")))
    if not resp.is_success:
        return FetchUpstreamFailure(status_code=status, body=resp.text[:500])
    try:
        return FetchOk(payload=resp.json())
    except ValueError:
        return FetchNetworkFailure(reason=f"Malformed JSON from Reddit (HTTP {status})")


def _is_user_payload(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    # /about returns {"kind": "t2", "data": {"name": ...}}; some proxies unwrap it
    data = payload.get("data")
    if isinstance(data, dict) and data.get("name"):
        return True
    return bool(payload.get("name"))


def _extract_listing(payload: Any) -> list[dict[str, Any]] | None:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    children = data.get("children")
    if not isinstance(children, list):
        return None
    return [c["data"] for c in children if isinstance(c, dict) and isinstance(c.get("data"), dict)]


class RedditClient:
    """Authenticated read-only Reddit client."""

    def __init__(
        self,
        token_provider: RedditTokenProvider | None = None,
        *,
        api_base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_provider = token_provider or get_token_provider()
        self.api_base_url = (api_base_url or config.reddit_api_base_url).rstrip("/")
        self.user_agent = user_agent or config.reddit_user_agent
        self.timeout = timeout if timeout is not None else config.reddit_timeout_seconds
        self._transport = transport

    async def fetch(self, path: str, params: dict[str, Any] | None = None) -> FetchResult:
        """
        GET `path` with a bearer token and decode the response.

        A 401 means the cached token went stale upstream: it is dropped and the
        request is retried once with a fresh token.

        Raises:
            ConfigurationError / UpstreamAuthError / NetworkError from the token exchange
        """
        url = f"{self.api_base_url}{path}"
        result: FetchResult = FetchNetworkFailure(reason="no attempt made")

        for attempt in range(2):
            token = await self.token_provider.acquire()
            headers = {
                "Authorization": f"Bearer {token.access_token}",
                "User-Agent": self.user_agent,
            }
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    resp = await client.get(url, params=params, headers=headers)
            except httpx.TimeoutException:
                logger.warning("[Reddit] GET {} timed out after {}s", path, self.timeout)
                return FetchNetworkFailure(reason=f"Timed out after {self.timeout}s")
            except httpx.HTTPError as e:
                logger.warning("[Reddit] GET {} failed: {}", path, type(e).__name__)
                return FetchNetworkFailure(reason=f"Network error: {e}")

            if resp.status_code == 401 and attempt == 0:
                logger.info("[Reddit] Token rejected, refreshing and retrying once")
                self.token_provider.invalidate(token.access_token)
                continue

            result = decode_response(resp)
            break

        return result

    async def exists(self, username: str) -> bool:
        """
        Whether a Reddit account with this name exists.

        Only a 404 is a negative answer. Rate limiting, upstream failures and
        network errors raise, so a failed check is never mistaken for "no such user".
        """
        result = await self.fetch(f"/user/{quote(username, safe='')}/about")

        if isinstance(result, FetchNotFound):
            logger.info("[Reddit] User not found: {}", username)
            return False
        raise_for_result(result)

        assert isinstance(result, FetchOk)
        if not _is_user_payload(result.payload):
            raise NetworkError("Unrecognized Reddit user payload")
        return True

    async def top_posts(
        self, subreddit: str = DEFAULT_SUBREDDIT, limit: int = DEFAULT_TOP_LIMIT
    ) -> list[RedditPost]:
        limit = max(1, min(int(limit), MAX_TOP_LIMIT))
        subreddit = (subreddit or DEFAULT_SUBREDDIT).strip() or DEFAULT_SUBREDDIT

        result = await self.fetch(f"/r/{quote(subreddit, safe='')}/top.json", {"limit": limit})

        if isinstance(result, FetchNotFound):
            raise UpstreamError(upstream_status=404, body=result.body)
        raise_for_result(result)

        assert isinstance(result, FetchOk)
        items = _extract_listing(result.payload)
        if items is None:
            raise NetworkError("Unrecognized Reddit listing payload")
        return [RedditPost.from_payload(item) for item in items]


_client: RedditClient | None = None


def get_reddit_client() -> RedditClient:
    """FastAPI dependency: shared client bound to the process-wide token provider."""
    global _client
    if _client is None:
        _client = RedditClient()
    return _client
