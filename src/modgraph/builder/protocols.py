"""Collaborator protocols consumed by the module builder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class SourceLocation:
    """0-based position reported by a transform or declaration engine."""

    line: int
    character: int


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """Single declaration engine diagnostic."""

    message: str
    location: SourceLocation | None = None

    def render(self) -> str:
        """Return the diagnostic as a single human readable line."""
        if self.location is None:
            return self.message
        return f"line {self.location.line + 1}: {self.message}"


class TransformFailure(Exception):
    """Raised by a source transformer when the input cannot be transformed."""

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location


class DeclarationFailure(Exception):
    """Raised by a declaration emitter when no declaration could be produced."""

    def __init__(self, message: str, diagnostics: tuple[Diagnostic, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostics = diagnostics


class SourceReader(Protocol):
    """Input boundary reading project-relative source files."""

    def read(self, path: str) -> str:
        """Return file text; raise OSError when it cannot be read."""


class ArtifactWriter(Protocol):
    """Output boundary writing project-relative artifacts."""

    def write(self, path: str, content: str) -> None:
        """Persist an artifact; raise OSError when it cannot be written."""


class SourceTransformer(Protocol):
    """Erases types from source text."""

    def transform(self, code: str) -> str:
        """Return executable text; raise TransformFailure on invalid input."""


class DeclarationEmitter(Protocol):
    """Emits a type declaration for source text."""

    def emit(self, code: str) -> str:
        """Return declaration text; raise DeclarationFailure on failure."""
