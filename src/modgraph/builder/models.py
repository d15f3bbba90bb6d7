"""Typed models for build bookkeeping."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import Enum

from modgraph.errors import UnsupportedFileTypeError


class SourceKind(Enum):
    """Recognised source kinds with their output extension rules."""

    TYPESCRIPT = (".ts", ".js", ".d.ts", True)
    TYPESCRIPT_MODULE = (".mts", ".mjs", ".d.mts", True)
    JAVASCRIPT = (".js", ".js", None, False)
    JAVASCRIPT_MODULE = (".mjs", ".mjs", None, False)

    def __init__(
        self,
        extension: str,
        output_extension: str,
        declaration_extension: str | None,
        requires_transform: bool,
    ) -> None:
        self.extension = extension
        self.output_extension = output_extension
        self.declaration_extension = declaration_extension
        self.requires_transform = requires_transform

    @classmethod
    def for_path(cls, path: str) -> SourceKind:
        """Classify a path by its extension."""
        extension = posixpath.splitext(path)[1]
        for kind in cls:
            if kind.extension == extension:
                return kind
        raise UnsupportedFileTypeError(extension, path=path)


@dataclass(slots=True, frozen=True)
class BuildRecord:
    """Where one source file's artifacts are written."""

    input_path: str
    output_path: str
    declaration_path: str | None
    kind: SourceKind

    @classmethod
    def for_path(cls, path: str, *, declarations: bool = True) -> BuildRecord:
        """Derive artifact paths from the input path alone."""
        kind = SourceKind.for_path(path)
        stem = path[: len(path) - len(kind.extension)]
        declaration_path = None
        if declarations and kind.declaration_extension is not None:
            declaration_path = f"{stem}{kind.declaration_extension}"
        return cls(
            input_path=path,
            output_path=f"{stem}{kind.output_extension}",
            declaration_path=declaration_path,
            kind=kind,
        )

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.input_path)

    def artifact_paths(self) -> tuple[str, ...]:
        if self.declaration_path is None:
            return (self.output_path,)
        return (self.output_path, self.declaration_path)


@dataclass(slots=True, frozen=True)
class BuildSummary:
    """Outcome of one successful build invocation."""

    entry: str
    records: tuple[BuildRecord, ...]
    written: tuple[str, ...]
