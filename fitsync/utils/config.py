"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from pathlib import Path

from dotenv import load_dotenv
import os

PLATFORMS = ("native", "web")


def _project_root() -> Path:
    """Resolve project root (the directory holding the fitsync package)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Uses override=True to ensure .env values take precedence over existing env vars.
    """
    env_path = _project_root() / ".env"
    load_dotenv(env_path, override=True)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_optional_bool(key: str, default: bool = False) -> bool:
    """Get optional env var as bool (1/true/yes/on); return default if missing."""
    load_config()
    raw = os.getenv(key, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# --- Public config accessors ---

def api_base_url() -> str:
    """Optional: base URL of the remote API. Default http://localhost:8080."""
    return get_optional("FITSYNC_API_URL", "http://localhost:8080").rstrip("/")


def api_timeout_seconds() -> int:
    """Optional: per-request timeout for remote calls, in seconds. Default 10."""
    return get_optional_int("FITSYNC_API_TIMEOUT", 10)


def library_cache_days() -> int:
    """Optional: how long the exercise library cache stays fresh. Default 7 days."""
    return get_optional_int("FITSYNC_LIBRARY_CACHE_DAYS", 7)


def storage_platform() -> str:
    """
    Optional: which storage backend to use, "native" or "web". Default native.
    Returned as configured (lowercased); `get_storage` warns on unknown values
    and falls back to native.
    """
    return get_optional("FITSYNC_PLATFORM", "native").lower()


def storage_dir() -> Path:
    """Optional: directory for persisted client state. Default data/storage/."""
    val = get_optional("FITSYNC_STORAGE_DIR", "")
    if val:
        return Path(val).expanduser()
    return _project_root() / "data" / "storage"


def keep_items_on_error() -> bool:
    """
    Optional: keep the last good items when a refresh fails. Default false,
    which clears items on failure.
    """
    return get_optional_bool("FITSYNC_KEEP_ITEMS_ON_ERROR", False)


def log_level() -> str:
    """Optional: root log level name. Default INFO."""
    return get_optional("FITSYNC_LOG_LEVEL", "INFO").upper()


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
