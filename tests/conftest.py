"""
Shared fixtures: on-disk storage, a controllable clock, a session, and a fake
HTTP server patched over `requests.request`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock, patch
from urllib.parse import urlparse

import pytest
import requests

from fitsync.infrastructure.api.client import ApiClient
from fitsync.infrastructure.storage.backends import DeviceStorage
from fitsync.infrastructure.storage.ttl_cache import DAY_MS
from fitsync.services.session import SessionGate

BASE_URL = "http://api.test"


def make_response(status: int = 200, body: Any = None, text: str | None = None) -> MagicMock:
    """A MagicMock shaped like requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    if body is None and text is None:
        resp.content = b""
        resp.text = ""
        resp.json.side_effect = ValueError("no body")
    elif body is not None:
        resp.text = json.dumps(body)
        resp.content = resp.text.encode()
        resp.json.return_value = body
    else:
        resp.text = text
        resp.content = text.encode()
        resp.json.side_effect = ValueError("not json")
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error", response=resp)
    else:
        resp.raise_for_status = MagicMock()
    return resp


class FakeServer:
    """
    Routes (method, path) to canned responses, handler functions or exceptions,
    and records every call as (method, path, json_body, headers).
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[tuple[str, str, Any, dict[str, str]]] = []

    def route(self, method: str, path: str, response: Any = None, handler: Callable[[Any], Any] | None = None) -> None:
        self.routes[(method, path)] = handler if handler is not None else response

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _, _ in self.calls if m == method and p == path)

    def bodies(self, method: str, path: str) -> list[Any]:
        return [b for m, p, b, _ in self.calls if m == method and p == path]

    def __call__(self, method: str, url: str, headers: dict[str, str] | None = None, json: Any = None, timeout: Any = None) -> Any:
        path = urlparse(url).path
        self.calls.append((method, path, json, dict(headers or {})))
        target = self.routes.get((method, path))
        if target is None:
            return make_response(404, {"message": f"no route for {method} {path}"})
        if isinstance(target, BaseException):
            raise target
        if not isinstance(target, MagicMock) and callable(target):
            target = target(json)
        if isinstance(target, BaseException):
            raise target
        return target


class Clock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_days(self, days: float) -> None:
        self.now += days * DAY_MS


@pytest.fixture
def fake_server():
    server = FakeServer()
    with patch("fitsync.infrastructure.api.client.requests.request", side_effect=server):
        yield server


@pytest.fixture
def storage(tmp_path: Path) -> DeviceStorage:
    return DeviceStorage(tmp_path / "device")


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def session(storage: DeviceStorage) -> SessionGate:
    return SessionGate(storage)


@pytest.fixture
def client(session: SessionGate) -> ApiClient:
    return ApiClient(
        base_url=BASE_URL,
        timeout=2,
        token_provider=session.token,
        on_unauthorized=session.logout,
    )
