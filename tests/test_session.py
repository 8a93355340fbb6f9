"""
Tests for SessionGate: persistence, restore, listener fan-out.
"""

from __future__ import annotations

import pytest

from fitsync.services.session import ONBOARDED_KEY, TOKEN_KEY, SessionGate, UserRef


@pytest.mark.asyncio
async def test_login_persists_and_notifies(storage) -> None:
    gate = SessionGate(storage)
    seen: list = []
    gate.subscribe(seen.append)

    await gate.login("tok", onboarded=False)

    assert gate.identity == UserRef(onboarded=False)
    assert await storage.get(TOKEN_KEY) == "tok"
    assert await storage.get(ONBOARDED_KEY) == "false"
    assert seen == [UserRef(onboarded=False)]


@pytest.mark.asyncio
async def test_restore_from_storage(storage) -> None:
    await SessionGate(storage).login("tok", onboarded=True)

    fresh = SessionGate(storage)
    assert fresh.identity is None
    restored = await fresh.restore()
    assert restored == UserRef(onboarded=True)
    assert fresh.is_authenticated


@pytest.mark.asyncio
async def test_restore_without_token_stays_logged_out(storage) -> None:
    gate = SessionGate(storage)
    seen: list = []
    gate.subscribe(seen.append)
    assert await gate.restore() is None
    assert seen == []


@pytest.mark.asyncio
async def test_logout_clears_storage(storage) -> None:
    gate = SessionGate(storage)
    await gate.login("tok", onboarded=True)
    seen: list = []
    gate.subscribe(seen.append)

    await gate.logout()

    assert gate.identity is None
    assert await gate.token() is None
    assert await storage.get(ONBOARDED_KEY) is None
    assert seen == [None]


@pytest.mark.asyncio
async def test_complete_onboarding_flips_flag(storage) -> None:
    gate = SessionGate(storage)
    await gate.login("tok", onboarded=False)
    await gate.complete_onboarding()
    assert gate.identity.onboarded is True
    assert await storage.get(ONBOARDED_KEY) == "true"


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others(storage) -> None:
    gate = SessionGate(storage)
    seen: list = []

    def broken(identity) -> None:
        raise RuntimeError("listener bug")

    gate.subscribe(broken)
    unsubscribe = gate.subscribe(seen.append)
    await gate.login("tok", onboarded=True)
    assert len(seen) == 1

    unsubscribe()
    await gate.logout()
    assert len(seen) == 1
