"""
Remote API endpoints used by the sync layer.

Thin coroutines over an ApiClient: they pick the path and unwrap the response
envelope, nothing more. Payload shapes follow the server's JSON contract.
"""

from __future__ import annotations

from typing import Any

from fitsync.infrastructure.api.client import ApiClient


def _list_field(data: Any, key: str) -> list[dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        return []
    return [d for d in data if isinstance(d, dict)]


# --- Workouts ---

async def fetch_library(client: ApiClient) -> list[dict[str, Any]] | None:
    """GET /workouts/library. Returns None when the body is not a list."""
    data = await client.get("/workouts/library")
    if not isinstance(data, list):
        return None
    return [d for d in data if isinstance(d, dict)]


# --- Quests ---

async def fetch_quests(client: ApiClient) -> list[dict[str, Any]]:
    return _list_field(await client.get("/quests"), "quests")


async def create_quest(client: ApiClient, difficulty: str) -> Any:
    return await client.post("/quests", {"difficulty": difficulty})


# --- Social ---

async def fetch_friends(client: ApiClient) -> list[dict[str, Any]]:
    data = await client.get("/social/friends")
    return [d for d in data if isinstance(d, dict)] if isinstance(data, list) else []


async def set_friends(client: ApiClient, friend_ids: list[int]) -> Any:
    """PUT /social/friends. Replaces the entire friend list."""
    return await client.put("/social/friends", {"friend_ids": list(friend_ids)})


async def fetch_incoming_requests(client: ApiClient) -> list[dict[str, Any]]:
    data = await client.get("/social/friends/requests/incoming")
    return [d for d in data if isinstance(d, dict)] if isinstance(data, list) else []


async def fetch_outgoing_requests(client: ApiClient) -> list[dict[str, Any]]:
    data = await client.get("/social/friends/requests/outgoing")
    return [d for d in data if isinstance(d, dict)] if isinstance(data, list) else []


async def send_friend_request(client: ApiClient, recipient_id: int) -> Any:
    return await client.post("/social/friends/request", {"recipient_id": recipient_id})


async def respond_to_friend_request(client: ApiClient, request_id: int, accept: bool) -> Any:
    return await client.post(
        "/social/friends/request/respond",
        {"request_id": request_id, "accept": accept},
    )


# --- Routines ---

async def fetch_routines(client: ApiClient) -> dict[str, Any]:
    """GET /workout/routines -> {"routines": [...]}."""
    return {"routines": _list_field(await client.get("/workout/routines"), "routines")}


async def create_routine(client: ApiClient, name: str, exercises: list[dict[str, Any]]) -> Any:
    return await client.post("/workout/routines", {"name": name, "exercises": exercises})


async def update_routine(client: ApiClient, routine_id: int, name: str, exercises: list[dict[str, Any]]) -> Any:
    return await client.put(
        "/workout/routines",
        {"id": routine_id, "name": name, "exercises": exercises},
    )


async def delete_routine(client: ApiClient, routine_id: int) -> Any:
    return await client.delete("/workout/routines", {"id": routine_id})


# --- Onboarding ---

async def fetch_classes(client: ApiClient) -> list[dict[str, Any]]:
    return _list_field(await client.post("/constants/classes"), "classes")


async def submit_onboarding(client: ApiClient, payload: dict[str, Any]) -> Any:
    return await client.post("/onboarding", payload)
