"""Size-and-age bounded eviction policy for transform cache entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MAX_TOTAL_BYTES = 10 * 1024 * 1024
DEFAULT_KEEP_ENTRIES = 200
DEFAULT_GRACE_SECONDS = 10 * 60


@dataclass(slots=True, frozen=True)
class CachePolicy:
    """Bounds applied by the startup eviction sweep."""

    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES
    keep_entries: int = DEFAULT_KEEP_ENTRIES
    grace_seconds: float = DEFAULT_GRACE_SECONDS


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """One persisted transform output."""

    content_hash: str
    path: Path
    last_touched: float
    size_bytes: int


def select_evictions(
    entries: Iterable[CacheEntry],
    now: float,
    policy: CachePolicy,
) -> list[CacheEntry]:
    """Return entries ranked beyond keep_entries that are older than the grace window."""
    ordered = sorted(
        entries,
        key=lambda entry: (entry.last_touched, entry.content_hash),
        reverse=True,
    )
    total_bytes = sum(entry.size_bytes for entry in ordered)
    if total_bytes < policy.max_total_bytes:
        return []
    cutoff = now - policy.grace_seconds
    return [entry for entry in ordered[policy.keep_entries :] if entry.last_touched < cutoff]
