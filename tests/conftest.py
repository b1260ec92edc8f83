from __future__ import annotations

from typing import Any, AsyncIterator, Callable

import httpx
import pytest
import pytest_asyncio

from sugar_client import ClientOptions, HttpTransport, SugarClient

BASE_URL = "https://crm.example.com/rest/v10/"
API_PREFIX = "/rest/v10/"

Reply = Callable[[httpx.Request], httpx.Response]

_NO_JSON = object()


def respond(
    status: int = 200, json: Any = _NO_JSON, content: bytes = b""
) -> Reply:
    """Build a reply that produces a fresh response for every request."""

    def reply(request: httpx.Request) -> httpx.Response:
        if json is not _NO_JSON:
            return httpx.Response(status, json=json)
        return httpx.Response(status, content=content)

    return reply


def refuse(message: str = "Connection refused") -> Reply:
    """Build a reply that fails at the transport level."""

    def reply(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(message, request=request)

    return reply


def form_of(request: httpx.Request) -> dict[str, str]:
    return dict(httpx.QueryParams(request.content.decode()))


class FakeCRM:
    """In-process stand-in for the CRM REST API, served via MockTransport.

    Routes are keyed by ``(method, path)`` with *path* relative to the API
    root. Each route holds a queue of replies; the last reply repeats.
    Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Reply]] = {}

        self.on("POST", "oauth2/token", respond(json={
            "access_token": "T",
            "refresh_token": "R",
            "expires_in": 3600,
            "token_type": "bearer",
        }))
        self.on("GET", "ping", respond(json="pong"))

    def on(self, method: str, path: str, *replies: Reply) -> None:
        self._routes[(method, path)] = list(replies)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and _relative(r) == path
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        replies = self._routes.get((request.method, _relative(request)))
        if not replies:
            return httpx.Response(404, json={"error": "not_found"})
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        return reply(request)

    def mock_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _relative(request: httpx.Request) -> str:
    return request.url.path.removeprefix(API_PREFIX)


def make_client(crm: FakeCRM, options: ClientOptions | None = None) -> SugarClient:
    transport = HttpTransport(BASE_URL, transport=crm.mock_transport())
    client = SugarClient(BASE_URL, options, transport=transport)
    client.set_credentials("admin", "secret")
    return client


@pytest.fixture
def crm() -> FakeCRM:
    return FakeCRM()


@pytest_asyncio.fixture
async def client(crm: FakeCRM) -> AsyncIterator[SugarClient]:
    """Compatibility-mode client wired to the fake CRM."""
    c = make_client(crm)
    yield c
    await c.close()


@pytest_asyncio.fixture
async def strict_client(crm: FakeCRM) -> AsyncIterator[SugarClient]:
    """Client that raises typed errors instead of returning False."""
    c = make_client(crm, ClientOptions(raise_errors=True))
    yield c
    await c.close()
