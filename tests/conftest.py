"""Shared test fixtures for parley.

Provides a fake REST API served through :class:`httpx.MockTransport`, a
client wired to it, and an isolated configuration environment. These
fixtures are discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio

from parley.client import Client
from parley.models import ClientConfig, RequestConfig


BASE_URL = "https://chat.example.com"
TOKEN = "test-token"


# ---------------------------------------------------------------------------
# Fake REST API
# ---------------------------------------------------------------------------


class FakeAPI:
    """Records every request and serves canned responses keyed by ``(method, path)``.

    Unrouted requests get ``204 No Content``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], tuple[int, Any, dict[str, str]]] = {}

    def route(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self._routes[(method, path)] = (status, json, headers or {})

    def route_message(self, channel_id: int, message_id: int = 900, **fields: Any) -> None:
        """Answer message creation in *channel_id* with a minimal message document."""
        self.route(
            "POST",
            f"/channels/{channel_id}/messages",
            json={"id": str(message_id), "channel_id": str(channel_id), "content": "", **fields},
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body, headers = self._routes.get(
            (request.method, request.url.path), (204, None, {})
        )
        if body is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)


@pytest.fixture
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        token=TOKEN,
        base_url=BASE_URL,
        request=RequestConfig(timeout=5, max_retries=0),
    )


@pytest_asyncio.fixture
async def client(api: FakeAPI, client_config: ClientConfig) -> Client:
    """A client whose REST transport is the :class:`FakeAPI`."""
    async with Client(client_config, transport=httpx.MockTransport(api.handler)) as c:
        yield c


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at tmp_path, forces the XDG code path, clears
    PARLEY_* environment variables and changes the working directory to
    tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("parley.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in ["PARLEY_TOKEN", "PARLEY_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
