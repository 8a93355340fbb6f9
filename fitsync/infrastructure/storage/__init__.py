"""Persistent storage backends and the TTL cache built on them."""

from fitsync.infrastructure.storage.backends import BrowserStorage, DeviceStorage, StorageBackend, get_storage
from fitsync.infrastructure.storage.ttl_cache import CacheEnvelope, TTLCache

__all__ = ["BrowserStorage", "CacheEnvelope", "DeviceStorage", "StorageBackend", "TTLCache", "get_storage"]
