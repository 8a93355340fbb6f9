"""
HTTP client for the fitness API.

Blocking `requests` calls run in a worker thread so the event loop stays free.
Every transport failure is converted into the fitsync error set by
`map_transport_error`; nothing else in the package inspects `requests`
exceptions.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable

import requests

from fitsync.domains.errors import (
    FitSyncError,
    ServiceError,
    TransientNetworkError,
)
from fitsync.utils.config import api_base_url, api_timeout_seconds
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.api")

PUBLIC_ENDPOINTS = ("/auth/login", "/auth/sign-up")

# Extra time granted to the worker thread beyond the requests timeout.
_WAIT_SLACK_SECONDS = 1.0
_MAX_MESSAGE_CHARS = 500

TokenProvider = Callable[[], Awaitable[str | None]]
UnauthorizedHandler = Callable[[], Awaitable[None]]


def _server_message(response: Any) -> str | None:
    """Pull a human-readable message out of an error response body."""
    try:
        body = response.json()
    except Exception:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    if isinstance(body, str) and body.strip():
        return body.strip()[:_MAX_MESSAGE_CHARS]
    try:
        text = response.text or ""
    except Exception:
        text = ""
    text = text.strip()
    if text and not text.startswith(("{", "[", "<")):
        return text[:_MAX_MESSAGE_CHARS]
    return None


def map_transport_error(exc: BaseException) -> FitSyncError:
    """Map a transport-layer failure onto TransientNetworkError or ServiceError."""
    if isinstance(exc, FitSyncError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, requests.exceptions.Timeout)):
        return TransientNetworkError(f"{type(exc).__name__}: {exc}", timed_out=True)
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return ServiceError(getattr(exc.response, "status_code", None), _server_message(exc.response))
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.RequestException)):
        return TransientNetworkError(f"{type(exc).__name__}: {exc}")
    if isinstance(exc, (json.JSONDecodeError, ValueError)):
        return ServiceError(None, None)
    return TransientNetworkError(f"{type(exc).__name__}: {exc}")


class ApiClient:
    """
    Async wrapper around `requests` with bearer-token auth.

    Args:
        base_url: API root, e.g. http://localhost:8080.
        timeout: Per-request timeout in seconds.
        token_provider: Coroutine returning the current access token (or None).
        on_unauthorized: Coroutine run when the server answers 401.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token_provider: TokenProvider | None = None,
        on_unauthorized: UnauthorizedHandler | None = None,
    ) -> None:
        self.base_url = (base_url or api_base_url()).rstrip("/")
        self.timeout = float(timeout if timeout is not None else api_timeout_seconds())
        self._token_provider = token_provider
        self._on_unauthorized = on_unauthorized

    def set_unauthorized_handler(self, handler: UnauthorizedHandler | None) -> None:
        self._on_unauthorized = handler

    def set_token_provider(self, provider: TokenProvider | None) -> None:
        self._token_provider = provider

    async def _headers(self, path: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if any(path.startswith(p) for p in PUBLIC_ENDPOINTS):
            return headers
        token = await self._token_provider() if self._token_provider else None
        if not token:
            logger.warning("Skipping protected request, no token for %s", path)
            raise TransientNetworkError("Request cancelled: user not authenticated")
        headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, url: str, headers: dict[str, str], payload: Any) -> requests.Response:
        return requests.request(
            method,
            url,
            headers=headers,
            json=payload,
            timeout=self.timeout,
        )

    async def request(self, method: str, path: str, payload: Any = None) -> Any:
        """
        Send one request and return the decoded JSON body (None when empty).

        Raises:
            TransientNetworkError: No response received.
            ServiceError: Response with a failure status.
        """
        headers = await self._headers(path)
        url = f"{self.base_url}{path}"
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self._send, method, url, headers, payload),
                timeout=self.timeout + _WAIT_SLACK_SECONDS,
            )
        except Exception as e:
            mapped = map_transport_error(e)
            logger.warning("%s %s failed: %s", method, path, mapped)
            raise mapped from e

        status = getattr(response, "status_code", None)
        if status == 401:
            logger.warning("Unauthorized on %s, token expired or invalid", path)
            if self._on_unauthorized is not None:
                try:
                    await self._on_unauthorized()
                except Exception:
                    logger.exception("Unauthorized handler failed")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            mapped = map_transport_error(e)
            logger.warning("%s %s returned %s: %s", method, path, status, mapped)
            raise mapped from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s %s returned invalid JSON: %s", method, path, e)
            raise ServiceError(status, None) from e

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, payload: Any = None) -> Any:
        return await self.request("POST", path, payload)

    async def put(self, path: str, payload: Any = None) -> Any:
        return await self.request("PUT", path, payload)

    async def delete(self, path: str, payload: Any = None) -> Any:
        return await self.request("DELETE", path, payload)
