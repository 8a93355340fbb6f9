"""
Tests for environment-driven configuration accessors.
"""

from __future__ import annotations

import logging

import pytest

from fitsync.infrastructure.storage.backends import DeviceStorage, get_storage
from fitsync.utils import config


def test_defaults(monkeypatch) -> None:
    for key in (
        "FITSYNC_API_URL",
        "FITSYNC_API_TIMEOUT",
        "FITSYNC_LIBRARY_CACHE_DAYS",
        "FITSYNC_PLATFORM",
        "FITSYNC_KEEP_ITEMS_ON_ERROR",
        "FITSYNC_LOG_LEVEL",
    ):
        monkeypatch.setenv(key, "")
    assert config.api_base_url() == "http://localhost:8080"
    assert config.api_timeout_seconds() == 10
    assert config.library_cache_days() == 7
    assert config.storage_platform() == "native"
    assert config.keep_items_on_error() is False
    assert config.log_level() == "INFO"


def test_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("FITSYNC_API_URL", "https://api.example.com/")
    monkeypatch.setenv("FITSYNC_LIBRARY_CACHE_DAYS", "3")
    monkeypatch.setenv("FITSYNC_PLATFORM", "WEB")
    monkeypatch.setenv("FITSYNC_STORAGE_DIR", str(tmp_path))
    monkeypatch.setenv("FITSYNC_KEEP_ITEMS_ON_ERROR", "yes")
    assert config.api_base_url() == "https://api.example.com"
    assert config.library_cache_days() == 3
    assert config.storage_platform() == "web"
    assert config.storage_dir() == tmp_path
    assert config.keep_items_on_error() is True


def test_invalid_values_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("FITSYNC_API_TIMEOUT", "soon")
    monkeypatch.setenv("FITSYNC_PLATFORM", "toaster")
    assert config.api_timeout_seconds() == 10
    assert config.storage_platform() == "toaster"


def test_unknown_platform_warns_and_uses_device_storage(monkeypatch, tmp_path, caplog) -> None:
    monkeypatch.setenv("FITSYNC_PLATFORM", "Toaster")
    monkeypatch.setenv("FITSYNC_STORAGE_DIR", str(tmp_path))
    with caplog.at_level(logging.WARNING, logger="fitsync.storage"):
        store = get_storage()
    assert isinstance(store, DeviceStorage)
    assert store.directory == tmp_path / "device"
    assert "Unknown storage platform 'toaster'" in caplog.text


def test_get_required_raises_when_missing(monkeypatch) -> None:
    monkeypatch.setenv("FITSYNC_SOMETHING_REQUIRED", "  ")
    with pytest.raises(ValueError, match="FITSYNC_SOMETHING_REQUIRED"):
        config.get_required("FITSYNC_SOMETHING_REQUIRED")
