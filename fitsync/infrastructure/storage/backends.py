"""
Persistent key/value stores for client state.

Two file-backed implementations stand in for the platform stores:
`DeviceStorage` keeps one file per key (durable on-device store), and
`BrowserStorage` keeps every key in one JSON document (browser-style store).
Both are fail-soft: an unreadable store is a cache miss, an unwritable one a
no-op. Failures are only logged.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from fitsync.domains.errors import StorageUnavailable
from fitsync.utils.config import PLATFORMS, storage_dir, storage_platform
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.storage")


class StorageBackend(ABC):
    """
    Async string key/value store that never raises to its caller.

    Subclasses implement the blocking `_read/_write/_remove` primitives and
    raise `StorageUnavailable` (or any OSError) on failure; the public
    coroutines run them off the event loop and swallow the failure.
    """

    name = "storage"

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._read, key)
        except Exception as e:
            logger.warning("%s not available, get(%s) failed: %s", self.name, key, e)
            return None

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except Exception as e:
            logger.warning("%s not available, set(%s) failed: %s", self.name, key, e)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove, key)
        except Exception as e:
            logger.warning("%s not available, delete(%s) failed: %s", self.name, key, e)

    @abstractmethod
    def _read(self, key: str) -> str | None: ...

    @abstractmethod
    def _write(self, key: str, value: str) -> None: ...

    @abstractmethod
    def _remove(self, key: str) -> None: ...


def _key_filename(key: str) -> str:
    h = hashlib.sha256(key.encode()).hexdigest()[:16]
    return f"kv_{h}.txt"


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=path.suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class DeviceStorage(StorageBackend):
    """One file per key under a directory. Keys are hashed into file names."""

    name = "DeviceStorage"

    def __init__(self, directory: Path | None = None) -> None:
        self._dir = Path(directory) if directory is not None else storage_dir() / "device"

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / _key_filename(key)

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def _write(self, key: str, value: str) -> None:
        _atomic_write(self._path(key), value)

    def _remove(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class BrowserStorage(StorageBackend):
    """All keys in one JSON document, rewritten on every change."""

    name = "BrowserStorage"

    def __init__(self, path: Path | None = None) -> None:
        self._path = Path(path) if path is not None else storage_dir() / "local_storage.json"
        # Serializes read-modify-write of the shared document across worker threads.
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise StorageUnavailable(f"corrupt store {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageUnavailable(f"unexpected store layout in {self._path}")
        return data

    def _read(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def _write(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._load()
            except StorageUnavailable as e:
                logger.warning("Resetting %s: %s", self.name, e)
                data = {}
            data[key] = value
            _atomic_write(self._path, json.dumps(data, ensure_ascii=False))

    def _remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                _atomic_write(self._path, json.dumps(data, ensure_ascii=False))


def get_storage(platform: str | None = None, root: Path | None = None) -> StorageBackend:
    """
    Storage backend for the runtime platform.

    Args:
        platform: "native" or "web". Defaults to FITSYNC_PLATFORM.
        root: Base directory. Defaults to FITSYNC_STORAGE_DIR.
    """
    platform = (platform or storage_platform()).lower()
    base = Path(root) if root is not None else storage_dir()
    if platform not in PLATFORMS:
        logger.warning("Unknown storage platform %r, using native storage", platform)
        platform = "native"
    if platform == "web":
        return BrowserStorage(base / "local_storage.json")
    return DeviceStorage(base / "device")
