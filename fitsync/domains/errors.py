"""
Error variants raised by the sync layer.

Transport failures are mapped into these at one boundary
(`fitsync.infrastructure.api.client.map_transport_error`). Controllers turn
them into the human-readable `error` string of their state.
"""

from __future__ import annotations

GENERIC_NETWORK_MESSAGE = "Network connection failed. Please check your connection and try again."
TIMEOUT_MESSAGE = "Request timed out. Please try again."
GENERIC_SERVICE_MESSAGE = "Something went wrong. Please try again."


class FitSyncError(RuntimeError):
    """Base class for every error the sync layer raises on purpose."""

    @property
    def user_message(self) -> str:
        return str(self) or GENERIC_SERVICE_MESSAGE


class TransientNetworkError(FitSyncError):
    """No response was received (connection refused, DNS, timeout)."""

    def __init__(self, message: str = GENERIC_NETWORK_MESSAGE, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out

    @property
    def user_message(self) -> str:
        return TIMEOUT_MESSAGE if self.timed_out else GENERIC_NETWORK_MESSAGE


class ServiceError(FitSyncError):
    """A response came back with a failure status."""

    def __init__(self, status_code: int | None, server_message: str | None = None) -> None:
        self.status_code = status_code
        self.server_message = server_message
        super().__init__(server_message or f"Request failed with status {status_code}")

    @property
    def user_message(self) -> str:
        return self.server_message or GENERIC_SERVICE_MESSAGE


class StorageUnavailable(FitSyncError):
    """The persistent store could not be read or written. Never surfaced to users."""


class ParseError(FitSyncError):
    """A persisted cache envelope could not be decoded."""


class ValidationError(FitSyncError):
    """A wizard step is missing required input."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step


def describe_error(exc: BaseException, fallback: str) -> str:
    """
    Human-readable message for a failed operation.

    Server messages are surfaced verbatim; everything else gets the
    variant's own message or the caller's fallback.
    """
    if isinstance(exc, ServiceError):
        return exc.server_message or fallback
    if isinstance(exc, FitSyncError):
        return exc.user_message
    return fallback
