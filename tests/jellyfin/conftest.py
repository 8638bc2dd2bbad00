"""Shared fixtures for Jellyfin client tests.

HTTP is faked with httpx.MockTransport; no real server requests are made.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from jellyfin_api.client import JellyfinClient
from jellyfin_api.models import ClientInfo, Session

SERVER_URL = "https://jellyfin.example.com"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeJellyfinServer:
    """Route table for httpx.MockTransport that records every request.

    Unknown routes answer 404, like the real server.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Union[Handler, Dict[str, Any]]] = {}

    def add(self, method: str, path: str, status: int = 200, **response_kwargs: Any) -> None:
        """Answer ``method path`` with a fresh httpx.Response(status, **response_kwargs)."""
        self._routes[(method, path)] = {"status_code": status, **response_kwargs}

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        return httpx.Response(**route)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fixtures() -> Dict[str, Any]:
    """Load Jellyfin API response fixtures from JSON file."""
    fixtures_path = Path(__file__).parent / "fixtures" / "jellyfin_responses.json"
    with open(fixtures_path, "r") as f:
        return json.load(f)


@pytest.fixture
def client_info() -> ClientInfo:
    return ClientInfo(
        client="jellyfin-python-test",
        device="test-host",
        device_id="device-0001",
        version="1.0.0",
    )


@pytest.fixture
def server() -> FakeJellyfinServer:
    return FakeJellyfinServer()


@pytest.fixture
def http(server: FakeJellyfinServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(server.handle))


@pytest.fixture
def session() -> Session:
    return Session(token="tok-123", user_id="user-42")


@pytest.fixture
def client(http: httpx.AsyncClient, client_info: ClientInfo) -> JellyfinClient:
    """Unauthenticated client backed by the fake server."""
    return JellyfinClient(SERVER_URL, http=http, client_info=client_info)


@pytest.fixture
def authed_client(
    http: httpx.AsyncClient, client_info: ClientInfo, session: Session
) -> JellyfinClient:
    """Client with a known session attached."""
    return JellyfinClient.with_session(SERVER_URL, session, http=http, client_info=client_info)
