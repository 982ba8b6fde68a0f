"""
Temporary storage for bulk import previews.

Keeps the submitted rows of a preview in memory until it is confirmed,
discarded or expires. Single-process only: a preview made on one worker
cannot be confirmed on another.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

from config import settings

_cache: dict[str, tuple[datetime, Any]] = {}


def store_preview(data: Any, ttl_minutes: Optional[int] = None) -> str:
    """Store preview data, return preview_id."""
    ttl = ttl_minutes or settings.preview_ttl_minutes
    preview_id = str(uuid.uuid4())
    expires_at = datetime.now() + timedelta(minutes=ttl)
    _cache[preview_id] = (expires_at, data)
    _cleanup_expired()
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[Any]:
    """Retrieve preview data by preview_id. Returns None if expired/not found."""
    entry = _cache.get(preview_id)
    if entry is None:
        return None
    expires_at, data = entry
    if datetime.now() > expires_at:
        del _cache[preview_id]
        return None
    return data


def delete_preview(preview_id: str) -> bool:
    """Remove a preview after confirm or cancel. True if it existed."""
    return _cache.pop(preview_id, None) is not None


def clear_previews() -> None:
    """Drop every cached preview."""
    _cache.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]


def count_previews() -> int:
    """Number of live (unexpired) previews."""
    _cleanup_expired()
    return len(_cache)
