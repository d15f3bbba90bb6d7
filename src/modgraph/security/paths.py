"""Path resolution helpers for project-scoped access."""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a requested path leaves the project sandbox."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _normalize_relative_input(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


def escapes_root(normalized: str) -> bool:
    """Return True when a normalized relative path points above the root."""
    return normalized == ".." or normalized.startswith("../")


def normalize_project_path(candidate: str) -> str:
    """Normalize a project-relative path, rejecting absolute and escaping input."""
    normalized, is_absolute_style = _normalize_relative_input(candidate)
    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="Provide a project-relative path such as 'src/main.ts'.",
        )
    if is_absolute_style:
        raise PathBlockedError(
            reason="Absolute path is not project-relative.",
            hint="Pass the path relative to the project root.",
        )
    collapsed = posixpath.normpath(normalized)
    if escapes_root(collapsed):
        raise PathBlockedError(
            reason="Path escapes the project root.",
            hint="Remove '..' segments that leave the project root.",
        )
    return collapsed


def resolve_project_path(root: Path, candidate: str) -> Path:
    """Resolve a project-relative path under root with sandbox enforcement."""
    resolved_root = root.resolve()
    relative = normalize_project_path(candidate)
    resolved = (resolved_root / Path(*relative.split("/"))).resolve(strict=False)
    if not resolved.is_relative_to(resolved_root):
        raise PathBlockedError(
            reason="Resolved path escapes the project root.",
            hint="Use a path located under the configured project root.",
        )
    return resolved


def relative_entry_path(root: Path, entry: str | Path) -> str:
    """Convert a filesystem entry path to a project-relative POSIX path."""
    resolved_root = root.resolve()
    entry_path = Path(entry)
    if not entry_path.is_absolute():
        entry_path = Path.cwd() / entry_path
    absolute = Path(posixpath.normpath(entry_path.as_posix()))
    if not absolute.is_relative_to(resolved_root):
        absolute = entry_path.resolve(strict=False)
    if not absolute.is_relative_to(resolved_root):
        raise PathBlockedError(
            reason="Entry file is outside of the project root.",
            hint="Pass an entry file located under --root.",
        )
    return absolute.relative_to(resolved_root).as_posix()
