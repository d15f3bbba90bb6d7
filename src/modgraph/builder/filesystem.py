"""Filesystem-backed input and output boundaries."""

from __future__ import annotations

from pathlib import Path

from modgraph.security import PathBlockedError, resolve_project_path


class ProjectFileSystem:
    """Reads sources under a project root and writes artifacts under an output directory."""

    def __init__(self, root: Path, out_dir: Path) -> None:
        self._root = root.resolve()
        self._out_dir = out_dir.resolve()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def out_dir(self) -> Path:
        return self._out_dir

    def read(self, path: str) -> str:
        """Return UTF-8 source text for a project-relative path."""
        source = _sandboxed(self._root, path)
        with source.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def write(self, path: str, content: str) -> None:
        """Write an artifact under the output directory, creating parents."""
        target = _sandboxed(self._out_dir, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)


def _sandboxed(base: Path, path: str) -> Path:
    try:
        return resolve_project_path(base, path)
    except PathBlockedError as error:
        raise PermissionError(f"{error.reason} {error.hint}") from error
