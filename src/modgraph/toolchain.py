"""Command-line adapters for the type-erasure and declaration engines."""

from __future__ import annotations

import re
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path

from modgraph.builder.protocols import (
    DeclarationFailure,
    Diagnostic,
    SourceLocation,
    TransformFailure,
)

DEFAULT_TRANSFORM_COMMAND = ("esbuild", "--loader=ts", "--format=esm")
DEFAULT_DECLARATION_COMMAND = (
    "tsc",
    "--declaration",
    "--emitDeclarationOnly",
    "--allowImportingTsExtensions",
    "--allowJs",
    "--noResolve",
    "--skipLibCheck",
    "--noEmitOnError",
    "false",
    "--target",
    "esnext",
    "--module",
    "nodenext",
    "--moduleResolution",
    "nodenext",
)

_DECLARATION_INPUT = "index.ts"
_DECLARATION_OUTPUT = "index.d.ts"
# esbuild style: "<stdin>:3:14: ERROR: ..." (1-based line, 0-based column).
_STDERR_LOCATION_RE = re.compile(r":(\d+):(\d+):")
# tsc style: "index.ts(3,14): error TS2304: ..." (1-based line and column).
_TSC_DIAGNOSTIC_RE = re.compile(r"^index\.ts\((\d+),(\d+)\):\s*(.*)$")


class CommandTransformer:
    """Pipes source text through an external type-erasure command."""

    def __init__(self, argv: Sequence[str]) -> None:
        if not argv:
            raise ValueError("Transform command must not be empty.")
        self._argv = tuple(argv)

    @property
    def argv(self) -> tuple[str, ...]:
        return self._argv

    def transform(self, code: str) -> str:
        """Return the command's stdout for code passed on stdin."""
        try:
            completed = subprocess.run(
                list(self._argv),
                input=code,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except OSError as error:
            raise TransformFailure(f"could not run {self._argv[0]}: {error}") from error
        if completed.returncode != 0:
            stderr = completed.stderr.strip()
            raise TransformFailure(
                stderr or f"{self._argv[0]} exited with status {completed.returncode}",
                location=_stderr_location(stderr),
            )
        return completed.stdout


class CommandDeclarationEmitter:
    """Runs an external declaration compiler over a single virtual source file."""

    def __init__(self, argv: Sequence[str]) -> None:
        if not argv:
            raise ValueError("Declaration command must not be empty.")
        self._argv = tuple(argv)

    @property
    def argv(self) -> tuple[str, ...]:
        return self._argv

    def emit(self, code: str) -> str:
        """Return declaration text emitted for code."""
        with tempfile.TemporaryDirectory(prefix="modgraph-decl-") as workdir:
            work = Path(workdir)
            (work / _DECLARATION_INPUT).write_text(code, encoding="utf-8")
            try:
                completed = subprocess.run(
                    [*self._argv, _DECLARATION_INPUT],
                    cwd=work,
                    check=False,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                )
            except OSError as error:
                raise DeclarationFailure(f"could not run {self._argv[0]}: {error}") from error

            output = work / _DECLARATION_OUTPUT
            if output.exists():
                return output.read_text(encoding="utf-8")

            report = "\n".join(
                part for part in (completed.stdout.strip(), completed.stderr.strip()) if part
            )
            raise DeclarationFailure(
                report or f"{self._argv[0]} exited with status {completed.returncode}",
                diagnostics=_tsc_diagnostics(report),
            )


def _stderr_location(stderr: str) -> SourceLocation | None:
    match = _STDERR_LOCATION_RE.search(stderr)
    if match is None:
        return None
    return SourceLocation(line=int(match.group(1)) - 1, character=int(match.group(2)))


def _tsc_diagnostics(report: str) -> tuple[Diagnostic, ...]:
    diagnostics: list[Diagnostic] = []
    for raw_line in report.splitlines():
        match = _TSC_DIAGNOSTIC_RE.match(raw_line.strip())
        if match is None:
            continue
        diagnostics.append(
            Diagnostic(
                message=match.group(3),
                location=SourceLocation(
                    line=int(match.group(1)) - 1,
                    character=int(match.group(2)) - 1,
                ),
            )
        )
    return tuple(diagnostics)
