"""Sandboxing and path safety primitives."""

from .paths import (
    PathBlockedError,
    escapes_root,
    normalize_project_path,
    relative_entry_path,
    resolve_project_path,
)

__all__ = [
    "PathBlockedError",
    "escapes_root",
    "normalize_project_path",
    "relative_entry_path",
    "resolve_project_path",
]
