from __future__ import annotations

import os
from pathlib import Path

from modgraph.cache import CachePolicy, TransformCache, content_hash


class _Clock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_content_hash_is_sha256_hex() -> None:
    key = content_hash("const a = 1;")

    assert len(key) == 64
    assert key == content_hash("const a = 1;")
    assert key != content_hash("const a = 2;")


def test_put_then_get_returns_stored_text(tmp_path: Path) -> None:
    cache = TransformCache.open(tmp_path / "cache")
    key = content_hash("let a: number = 1;")

    assert cache.put(key, "let a = 1;\r\n") is True
    assert cache.get(key) == "let a = 1;\r\n"
    assert [entry.content_hash for entry in cache.entries()] == [key]


def test_get_miss_returns_none(tmp_path: Path) -> None:
    cache = TransformCache.open(tmp_path / "cache")

    assert cache.get(content_hash("missing")) is None


def test_get_hit_refreshes_last_touched(tmp_path: Path) -> None:
    clock = _Clock(1_000.0)
    cache = TransformCache.open(tmp_path / "cache", clock=clock)
    key = content_hash("source")
    cache.put(key, "output")
    entry_path = tmp_path / "cache" / key
    os.utime(entry_path, (10.0, 10.0))

    clock.now = 5_000.0
    assert cache.get(key) == "output"

    assert entry_path.stat().st_mtime == 5_000.0


def test_put_leaves_no_temporary_files(tmp_path: Path) -> None:
    cache = TransformCache.open(tmp_path / "cache")
    cache.put(content_hash("a"), "A")
    cache.put(content_hash("b"), "B")

    assert sorted(path.name for path in (tmp_path / "cache").iterdir()) == sorted(
        [content_hash("a"), content_hash("b")]
    )


def test_malformed_keys_are_ignored(tmp_path: Path) -> None:
    cache = TransformCache.open(tmp_path / "cache")

    assert cache.put("../escape", "x") is False
    assert cache.get("../escape") is None
    assert not (tmp_path / "escape").exists()


def test_open_failure_degrades_to_disabled_cache(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("x", encoding="utf-8")

    cache = TransformCache.open(blocker)

    assert cache.enabled is False
    assert cache.put(content_hash("a"), "A") is False
    assert cache.get(content_hash("a")) is None
    assert cache.entries() == []


def test_disabled_cache_stores_nothing() -> None:
    cache = TransformCache.disabled()

    assert cache.enabled is False
    assert cache.directory is None
    assert cache.put(content_hash("a"), "A") is False
    assert cache.sweep() == []


def test_open_runs_eviction_sweep(tmp_path: Path) -> None:
    directory = tmp_path / "cache"
    directory.mkdir()
    now = 100_000.0
    for index in range(250):
        entry = directory / f"{index:064x}"
        entry.write_text("x" * 10, encoding="utf-8")
        touched = now - 60 - index if index < 50 else now - 3_600 - index
        os.utime(entry, (touched, touched))
    (directory / "README").write_text("not a cache entry", encoding="utf-8")

    cache = TransformCache.open(
        directory,
        policy=CachePolicy(max_total_bytes=100),
        clock=_Clock(now),
    )

    remaining = {entry.content_hash for entry in cache.entries()}
    assert len(remaining) == 200
    assert {f"{index:064x}" for index in range(50)}.issubset(remaining)
    assert (directory / "README").exists()


def test_sweep_keeps_cache_under_threshold_untouched(tmp_path: Path) -> None:
    clock = _Clock(100_000.0)
    cache = TransformCache.open(tmp_path / "cache", clock=clock)
    cache.put(content_hash("a"), "A")

    assert cache.sweep() == []
    assert len(cache.entries()) == 1


def test_sweep_removes_abandoned_temp_files_past_grace_window(tmp_path: Path) -> None:
    directory = tmp_path / "cache"
    directory.mkdir()
    now = 100_000.0
    key = content_hash("abandoned")
    stale = directory / f".{key}.4242.tmp"
    stale.write_text("partial", encoding="utf-8")
    os.utime(stale, (now - 3_600, now - 3_600))
    fresh = directory / f".{key}.4343.tmp"
    fresh.write_text("in flight", encoding="utf-8")
    os.utime(fresh, (now - 5, now - 5))

    cache = TransformCache.open(directory, clock=_Clock(now))

    assert not stale.exists()
    assert fresh.exists()
    assert cache.entries() == []
