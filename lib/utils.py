# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Iterator, Sequence, TypeVar
from uuid import UUID

from pydantic import TypeAdapter

T = TypeVar("T")

_DATETIME_ADAPTER = TypeAdapter(datetime)


# =============================================================================
# UUID / Identity Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        user_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        user_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def normalize_email(value: str | None) -> str:
    """Lower-case and trim an email address. None becomes an empty string."""
    return (value or "").strip().lower()


def is_plausible_email(value: str) -> bool:
    """Cheap sanity check used when reading CSV exports (not RFC validation)."""
    if "@" not in value:
        return False
    local, _, domain = value.rpartition("@")
    return bool(local) and bool(domain)


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the format Supabase expects)."""
    return utc_now().isoformat()


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse a Postgres/ISO timestamp into an aware datetime.

    Supabase returns values like "2024-01-15T10:30:00.12345+00:00" (trailing
    zeros of the fraction trimmed) or with a trailing "Z". Naive values are
    treated as UTC.

    Raises:
        ValueError: If the value isn't a timestamp
    """
    if not value:
        return None
    parsed = _DATETIME_ADAPTER.validate_python(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Batching
# =============================================================================

def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """
    Yield fixed-size batches from a sequence, preserving order.

    The last batch may be shorter.

    Example:
        list(chunked([1, 2, 3, 4, 5], 2))  # [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
