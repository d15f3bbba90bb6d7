"""Content-addressed on-disk store for transform output.

Every failure in this module degrades to a cache miss or a disabled cache;
callers never see filesystem errors from it.
"""

from __future__ import annotations

import hashlib
import os
import re
import time
from collections.abc import Callable
from pathlib import Path

from modgraph.cache.eviction import CacheEntry, CachePolicy, select_evictions

_KEY_RE = re.compile(r"[0-9a-f]{32,128}")
_TEMP_RE = re.compile(r"\.[0-9a-f]{32,128}\.\d+\.tmp")


def content_hash(text: str) -> str:
    """Return the sha256 hex digest used as a cache key for source text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class TransformCache:
    """Persistent transform cache with one file per content hash."""

    def __init__(
        self,
        directory: Path | None,
        policy: CachePolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = directory
        self._policy = policy or CachePolicy()
        self._clock = clock

    @classmethod
    def open(
        cls,
        directory: Path,
        policy: CachePolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> TransformCache:
        """Create the cache directory, run one eviction sweep, or return a disabled cache."""
        resolved = directory.expanduser()
        cache = cls(resolved, policy=policy, clock=clock)
        try:
            resolved.mkdir(parents=True, exist_ok=True)
            cache._evict(resolved)
        except OSError:
            return cls.disabled()
        return cache

    @classmethod
    def disabled(cls) -> TransformCache:
        """Return a cache handle that never stores anything."""
        return cls(None)

    @property
    def enabled(self) -> bool:
        return self._directory is not None

    @property
    def directory(self) -> Path | None:
        return self._directory

    def get(self, key: str) -> str | None:
        """Return cached text for a content hash, refreshing its recency on hit."""
        path = self._entry_path(key)
        if path is None:
            return None
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError):
            return None
        now = self._clock()
        try:
            os.utime(path, (now, now))
        except OSError:
            pass
        return text

    def put(self, key: str, text: str) -> bool:
        """Store text under a content hash; return False when the write failed."""
        path = self._entry_path(key)
        if path is None:
            return False
        tmp = path.with_name(f".{key}.{os.getpid()}.tmp")
        try:
            with tmp.open("w", encoding="utf-8", newline="") as handle:
                handle.write(text)
            tmp.replace(path)
        except OSError:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            return False
        return True

    def entries(self) -> list[CacheEntry]:
        """Return current cache entries; an unreadable directory yields none."""
        if self._directory is None:
            return []
        try:
            return self._scan_entries(self._directory)
        except OSError:
            return []

    def sweep(self) -> list[CacheEntry]:
        """Run the eviction policy and return the evicted entries."""
        if self._directory is None:
            return []
        try:
            return self._evict(self._directory)
        except OSError:
            return []

    def _evict(self, directory: Path) -> list[CacheEntry]:
        now = self._clock()
        self._remove_stale_temp_files(directory, now)
        evicted = select_evictions(
            self._scan_entries(directory),
            now=now,
            policy=self._policy,
        )
        for entry in evicted:
            entry.path.unlink(missing_ok=True)
        return evicted

    def _remove_stale_temp_files(self, directory: Path, now: float) -> None:
        # A writer that died between write and replace leaves its temp file behind.
        cutoff = now - self._policy.grace_seconds
        for child in directory.iterdir():
            if _TEMP_RE.fullmatch(child.name) is None:
                continue
            try:
                if child.stat().st_mtime < cutoff:
                    child.unlink(missing_ok=True)
            except FileNotFoundError:
                continue

    def _scan_entries(self, directory: Path) -> list[CacheEntry]:
        entries: list[CacheEntry] = []
        for child in sorted(directory.iterdir()):
            if _KEY_RE.fullmatch(child.name) is None:
                continue
            try:
                stat = child.stat()
            except FileNotFoundError:
                continue
            if not child.is_file():
                continue
            entries.append(
                CacheEntry(
                    content_hash=child.name,
                    path=child,
                    last_touched=stat.st_mtime,
                    size_bytes=stat.st_size,
                )
            )
        return entries

    def _entry_path(self, key: str) -> Path | None:
        if self._directory is None or _KEY_RE.fullmatch(key) is None:
            return None
        return self._directory / key
