"""
Tests for ApiClient: auth header, error mapping, 401 handling.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests

from fitsync.domains.errors import (
    GENERIC_NETWORK_MESSAGE,
    TIMEOUT_MESSAGE,
    ServiceError,
    TransientNetworkError,
    describe_error,
)
from fitsync.infrastructure.api import endpoints
from fitsync.infrastructure.api.client import ApiClient, map_transport_error

from conftest import BASE_URL, make_response


@pytest.mark.asyncio
async def test_bearer_token_attached(fake_server, session, client) -> None:
    await session.login("tok-123", onboarded=True)
    fake_server.route("GET", "/quests", make_response(200, {"quests": []}))

    assert await endpoints.fetch_quests(client) == []
    _, _, _, headers = fake_server.calls[0]
    assert headers["Authorization"] == "Bearer tok-123"


@pytest.mark.asyncio
async def test_protected_call_without_token_is_not_sent(fake_server, client) -> None:
    with pytest.raises(TransientNetworkError, match="not authenticated"):
        await client.get("/quests")
    assert fake_server.calls == []


@pytest.mark.asyncio
async def test_public_endpoint_needs_no_token(fake_server) -> None:
    fake_server.route("POST", "/auth/login", make_response(200, {"token": "t"}))
    client = ApiClient(base_url=BASE_URL, timeout=2)
    assert await client.post("/auth/login", {"username": "u"}) == {"token": "t"}
    assert "Authorization" not in fake_server.calls[0][3]


@pytest.mark.asyncio
async def test_service_error_message_from_json(fake_server, session, client) -> None:
    await session.login("t", onboarded=True)
    fake_server.route("GET", "/quests", make_response(429, {"message": "rate limited"}))
    with pytest.raises(ServiceError) as info:
        await client.get("/quests")
    assert info.value.status_code == 429
    assert info.value.user_message == "rate limited"


@pytest.mark.asyncio
async def test_service_error_message_from_plain_text(fake_server, session, client) -> None:
    await session.login("t", onboarded=False)
    fake_server.route("POST", "/onboarding", make_response(400, text="This username is already taken"))
    with pytest.raises(ServiceError) as info:
        await client.post("/onboarding", {})
    assert info.value.server_message == "This username is already taken"


@pytest.mark.asyncio
async def test_connection_error_is_transient(fake_server, session, client) -> None:
    await session.login("t", onboarded=True)
    fake_server.route("GET", "/quests", requests.exceptions.ConnectionError("refused"))
    with pytest.raises(TransientNetworkError) as info:
        await client.get("/quests")
    assert info.value.user_message == GENERIC_NETWORK_MESSAGE


@pytest.mark.asyncio
async def test_unauthorized_runs_handler(fake_server, session, client) -> None:
    await session.login("t", onboarded=True)
    fake_server.route("GET", "/quests", make_response(401, {"message": "expired"}))
    with pytest.raises(ServiceError):
        await client.get("/quests")
    assert session.identity is None
    assert await session.token() is None


@pytest.mark.asyncio
async def test_empty_body_returns_none(fake_server, session, client) -> None:
    await session.login("t", onboarded=True)
    fake_server.route("PUT", "/social/friends", make_response(200))
    assert await endpoints.set_friends(client, [1, 2]) is None
    assert fake_server.bodies("PUT", "/social/friends") == [{"friend_ids": [1, 2]}]


@pytest.mark.asyncio
async def test_token_provider_is_awaited() -> None:
    provider = AsyncMock(return_value="x")
    client = ApiClient(base_url=BASE_URL, timeout=1, token_provider=provider)
    with patch("fitsync.infrastructure.api.client.requests.request", return_value=make_response(200, [])) as mock_req:
        assert await client.get("/workouts/library") == []
    provider.assert_awaited_once()
    assert mock_req.call_args.kwargs["timeout"] == 1.0


def test_map_transport_error_variants() -> None:
    timeout = map_transport_error(requests.exceptions.Timeout("slow"))
    assert isinstance(timeout, TransientNetworkError)
    assert timeout.user_message == TIMEOUT_MESSAGE

    resp = MagicMock(status_code=500)
    resp.json.return_value = {"error": "boom"}
    err = map_transport_error(requests.exceptions.HTTPError(response=resp))
    assert isinstance(err, ServiceError) and err.user_message == "boom"

    already = ServiceError(403, "nope")
    assert map_transport_error(already) is already


def test_describe_error_fallbacks() -> None:
    assert describe_error(ServiceError(500, None), "Failed to load quests") == "Failed to load quests"
    assert describe_error(ServiceError(400, "bad"), "x") == "bad"
    assert describe_error(KeyError("k"), "fallback") == "fallback"
