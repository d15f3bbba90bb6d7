"""Structured JSONL build log utilities."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from modgraph.builder.models import BuildSummary
from modgraph.errors import BuildError


@dataclass(slots=True, frozen=True)
class BuildEvent:
    """Outcome of one build invocation."""

    timestamp: str
    build_id: str
    entry: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def success_event(
    build_id: str,
    summary: BuildSummary,
    duration_ms: int,
    cache_enabled: bool,
) -> BuildEvent:
    """Build the event recorded for a completed build."""
    transformed = sum(1 for record in summary.records if record.kind.requires_transform)
    return BuildEvent(
        timestamp=utc_timestamp(),
        build_id=build_id,
        entry=summary.entry,
        ok=True,
        error_code=None,
        metadata={
            "source_count": len(summary.records),
            "transformed_count": transformed,
            "artifact_count": len(summary.written),
            "duration_ms": duration_ms,
            "cache_enabled": cache_enabled,
        },
    )


def failure_event(
    build_id: str,
    entry: str,
    error: BuildError,
    duration_ms: int,
    cache_enabled: bool,
) -> BuildEvent:
    """Build the event recorded for a failed build."""
    metadata: dict[str, object] = {
        "duration_ms": duration_ms,
        "cache_enabled": cache_enabled,
        "message": error.message,
    }
    if error.path is not None:
        metadata["path"] = error.path
    return BuildEvent(
        timestamp=utc_timestamp(),
        build_id=build_id,
        entry=entry,
        ok=False,
        error_code=error.code,
        metadata=metadata,
    )


class JsonlBuildLogger:
    """Append-only JSONL build logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: BuildEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
