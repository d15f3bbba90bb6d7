"""Build error taxonomy shared by the scanner and the orchestrator."""

from __future__ import annotations


class BuildError(Exception):
    """Base class for errors that abort a build."""

    code = "BUILD_FAILED"

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class UnsupportedFileTypeError(BuildError):
    """Raised when a source file extension is not a recognised source kind."""

    code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, extension: str, *, path: str | None = None) -> None:
        shown = extension or "<none>"
        super().__init__(f"unsupported file type: {shown}", path=path)
        self.extension = extension


class ReadError(BuildError):
    """Raised when the input boundary cannot read a source file."""

    code = "READ_FAILED"


class WriteError(BuildError):
    """Raised when the output boundary cannot write an artifact."""

    code = "WRITE_FAILED"


class TransformError(BuildError):
    """Raised when the source transform fails."""

    code = "TRANSFORM_FAILED"

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line: int | None = None,
        line_text: str | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.line = line
        self.line_text = line_text


class DeclarationError(BuildError):
    """Raised when declaration emission fails."""

    code = "DECLARATION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        diagnostics: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, path=path)
        self.diagnostics = diagnostics


class ParseError(BuildError):
    """Raised when module specifiers cannot be scanned from a source text."""

    code = "PARSE_FAILED"

    def __init__(
        self,
        reason: str,
        *,
        line: int,
        column: int,
        path: str | None = None,
    ) -> None:
        super().__init__(f"{reason} (line {line}, column {column})", path=path)
        self.reason = reason
        self.line = line
        self.column = column


class OutOfRootError(BuildError):
    """Raised when a path normalizes outside of the project root."""

    code = "OUT_OF_ROOT"

    def __init__(self, target: str, *, path: str | None = None) -> None:
        super().__init__(f'"{target}" is outside of the project root', path=path)
        self.target = target


class MissingDeclarationError(BuildError):
    """Raised when a declaration references a dependency without a declaration artifact."""

    code = "MISSING_DECLARATION"

    def __init__(self, dependency: str, *, path: str | None = None) -> None:
        super().__init__(f'no declaration file for "{dependency}"', path=path)
        self.dependency = dependency


class OutputCollisionError(BuildError):
    """Raised when two inputs would be written to the same artifact path."""

    code = "OUTPUT_COLLISION"

    def __init__(self, artifact: str, owner: str, *, path: str | None = None) -> None:
        super().__init__(f'artifact "{artifact}" is already produced by "{owner}"', path=path)
        self.artifact = artifact
        self.owner = owner
