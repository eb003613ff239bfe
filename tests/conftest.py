from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import httpx
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.clients.reddit_client import RedditClient
from src.config.settings import config
from src.core.reddit_auth import RedditTokenProvider
from src.database.database import create_db_engine
from src.models.database import Base

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
API_BASE = "https://oauth.reddit.com"


class FakeReddit:
    """In-process stand-in for the Reddit OAuth + API hosts."""

    def __init__(self) -> None:
        self.verified_users = {"testuser", "validuser", "reddituser", "testcontractor"}
        self.token_calls = 0
        self.api_calls = 0
        self.token_status = 200
        self.expires_in = 3600
        self.posts: dict[str, list[dict]] = {}
        self.fail_token_network = False
        self.reject_tokens: set[str] = set()
        self.seen_auth: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "www.reddit.com":
            return self._token(request)
        return self._api(request)

    def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_calls += 1
        if self.fail_token_network:
            raise httpx.ConnectError("connection refused", request=request)
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Basic ") or self.token_status == 401:
            return httpx.Response(401, json={"error": "invalid_client"})
        if self.token_status != 200:
            return httpx.Response(self.token_status, text="token endpoint down")
        return httpx.Response(
            200,
            json={
                "access_token": f"mock_access_token_{self.token_calls}",
                "token_type": "bearer",
                "expires_in": self.expires_in,
                "scope": "*",
            },
        )

    def _api(self, request: httpx.Request) -> httpx.Response:
        self.api_calls += 1
        auth = request.headers.get("Authorization", "")
        self.seen_auth.append(auth)
        if not auth.startswith("Bearer ") or auth[len("Bearer ") :] in self.reject_tokens:
            return httpx.Response(401, json={"error": "unauthorized"})

        parts = request.url.path.strip("/").split("/")
        if len(parts) == 3 and parts[0] == "user" and parts[2] == "about":
            return self._user(request, parts[1])
        if len(parts) == 3 and parts[0] == "r" and parts[2] == "top.json":
            children = [{"kind": "t3", "data": p} for p in self.posts.get(parts[1], [])]
            return httpx.Response(200, json={"kind": "Listing", "data": {"children": children}})
        return httpx.Response(404, json={"error": "not_found"})

    def _user(self, request: httpx.Request, username: str) -> httpx.Response:
        if username.lower() in self.verified_users:
            return httpx.Response(
                200, json={"kind": "t2", "data": {"name": username, "id": f"t2_{username}"}}
            )
        if username == "ratelimited":
            return httpx.Response(
                429, json={"error": "rate_limit_exceeded"}, headers={"Retry-After": "60"}
            )
        if username == "servererror":
            return httpx.Response(500, json={"error": "Internal Server Error"})
        if username == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if username == "networkdown":
            raise httpx.ConnectError("network unreachable", request=request)
        if username == "malformed":
            return httpx.Response(
                200, text="invalid json response", headers={"Content-Type": "application/json"}
            )
        return httpx.Response(404, json={"error": "not_found"})


@pytest.fixture(autouse=True)
def reddit_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "reddit_client_id", "test_client_id")
    monkeypatch.setattr(config, "reddit_client_secret", "test_client_secret")
    monkeypatch.setattr(config, "reddit_token_url", TOKEN_URL)
    monkeypatch.setattr(config, "reddit_api_base_url", API_BASE)
    monkeypatch.setattr(config, "company_catalog_file", None)


@pytest.fixture
def fake_reddit() -> FakeReddit:
    return FakeReddit()


@pytest.fixture
def reddit_transport(fake_reddit: FakeReddit) -> httpx.MockTransport:
    return httpx.MockTransport(fake_reddit.handler)


@pytest.fixture
def token_provider(reddit_transport: httpx.MockTransport) -> RedditTokenProvider:
    return RedditTokenProvider(transport=reddit_transport)


@pytest.fixture
def reddit_client(
    token_provider: RedditTokenProvider, reddit_transport: httpx.MockTransport
) -> RedditClient:
    return RedditClient(token_provider, transport=reddit_transport)


@pytest.fixture
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    eng = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def count_rows(session_factory: sessionmaker) -> Callable[[type], int]:
    """Count rows through a fresh session so uncommitted state is not visible."""

    def _count(model: type) -> int:
        with session_factory() as s:
            return s.query(model).count()

    return _count
