"""Depth-first module graph build with specifier rewriting."""

from __future__ import annotations

import posixpath
from collections.abc import Callable

from modgraph.builder.models import BuildRecord, BuildSummary
from modgraph.builder.protocols import (
    ArtifactWriter,
    DeclarationEmitter,
    DeclarationFailure,
    SourceReader,
    SourceTransformer,
    TransformFailure,
)
from modgraph.errors import (
    DeclarationError,
    MissingDeclarationError,
    OutOfRootError,
    OutputCollisionError,
    ParseError,
    ReadError,
    TransformError,
    WriteError,
)
from modgraph.rewrite import TextEdit, rewrite
from modgraph.scanner import SpecifierRecord, is_relative_specifier, scan_specifiers
from modgraph.security import PathBlockedError, escapes_root, normalize_project_path

SpecifierScanner = Callable[[str], list[SpecifierRecord]]


class ModuleBuilder:
    """Builds every file reachable from an entry through relative imports.

    Each file is transformed and written at most once per build. A record is
    registered before its file is read, so cyclic imports find the record and
    link to its output path without re-entering the transform.
    """

    def __init__(
        self,
        reader: SourceReader,
        writer: ArtifactWriter,
        transformer: SourceTransformer,
        declarations: DeclarationEmitter | None = None,
        scanner: SpecifierScanner = scan_specifiers,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._transformer = transformer
        self._declarations = declarations
        self._scanner = scanner
        self._records: dict[str, BuildRecord] = {}
        self._owners: dict[str, str] = {}
        self._written: list[str] = []

    def build(self, entry_path: str) -> BuildSummary:
        """Build the graph rooted at a project-relative entry path."""
        try:
            entry = normalize_project_path(entry_path)
        except PathBlockedError as error:
            raise OutOfRootError(entry_path) from error

        self._records = {}
        self._owners = {}
        self._written = []
        self.resolve(entry)
        return BuildSummary(
            entry=entry,
            records=tuple(self._records.values()),
            written=tuple(self._written),
        )

    def resolve(self, path: str) -> BuildRecord:
        """Return the record for a normalized path, building the file on first request."""
        existing = self._records.get(path)
        if existing is not None:
            return existing

        record = BuildRecord.for_path(path, declarations=self._declarations is not None)
        self._register(record)

        source = self._read(record)
        code = source
        if record.kind.requires_transform:
            code = self._transform(record, source)
        self._write(record, record.output_path, self._link(record, code, declaration=False))

        if record.declaration_path is not None and self._declarations is not None:
            declaration = self._emit_declaration(self._declarations, record, source)
            self._write(
                record,
                record.declaration_path,
                self._link(record, declaration, declaration=True),
            )
        return record

    def _register(self, record: BuildRecord) -> None:
        for artifact in record.artifact_paths():
            owner = self._owners.get(artifact)
            if owner is not None and owner != record.input_path:
                raise OutputCollisionError(artifact, owner, path=record.input_path)
        for artifact in record.artifact_paths():
            self._owners[artifact] = record.input_path
        self._records[record.input_path] = record

    def _read(self, record: BuildRecord) -> str:
        try:
            return self._reader.read(record.input_path)
        except (OSError, UnicodeDecodeError) as error:
            raise ReadError(f"failed to read source: {error}", path=record.input_path) from error

    def _transform(self, record: BuildRecord, source: str) -> str:
        try:
            return self._transformer.transform(source)
        except TransformFailure as failure:
            if failure.location is None:
                raise TransformError(
                    f"failed to transpile code: {failure.message}",
                    path=record.input_path,
                ) from failure
            line_number = failure.location.line + 1
            lines = source.split("\n")
            line_text = lines[line_number - 1] if 0 < line_number <= len(lines) else ""
            line_text = line_text.removesuffix("\r")
            raise TransformError(
                f'failed to transpile code, line number {line_number}, line = "{line_text}"',
                path=record.input_path,
                line=line_number,
                line_text=line_text,
            ) from failure

    def _emit_declaration(
        self,
        emitter: DeclarationEmitter,
        record: BuildRecord,
        source: str,
    ) -> str:
        try:
            return emitter.emit(source)
        except DeclarationFailure as failure:
            rendered = tuple(diagnostic.render() for diagnostic in failure.diagnostics)
            detail = "\n".join(rendered) if rendered else failure.message
            raise DeclarationError(
                f"failed to generate declaration file:\n\n{detail}",
                path=record.input_path,
                diagnostics=rendered,
            ) from failure

    def _link(self, record: BuildRecord, text: str, *, declaration: bool) -> str:
        """Rewrite relative specifiers in text to the artifacts of their targets.

        Executable output only rewrites specifiers whose dependency changes
        path. Declarations always point at the dependency's executable output,
        never at its declaration.
        """
        try:
            specifiers = self._scanner(text)
        except ParseError as error:
            raise ParseError(
                error.reason,
                line=error.line,
                column=error.column,
                path=record.input_path,
            ) from error

        edits: list[TextEdit] = []
        for specifier in specifiers:
            if not is_relative_specifier(specifier.value):
                continue
            target = posixpath.normpath(posixpath.join(record.directory, specifier.value))
            if escapes_root(target):
                raise OutOfRootError(target, path=record.input_path)

            dependency = self.resolve(target)
            if declaration:
                if dependency.declaration_path is None:
                    raise MissingDeclarationError(target, path=record.input_path)
            elif dependency.output_path == dependency.input_path:
                continue
            import_path = _relative_import(record.directory, dependency.output_path)
            edits.append(
                TextEdit(
                    start=specifier.start,
                    end=specifier.end,
                    replacement=f'"{import_path}"',
                )
            )
        return rewrite(text, edits)

    def _write(self, record: BuildRecord, artifact: str, content: str) -> None:
        try:
            self._writer.write(artifact, content)
        except OSError as error:
            raise WriteError(
                f'failed to write "{artifact}": {error}',
                path=record.input_path,
            ) from error
        self._written.append(artifact)


def _relative_import(directory: str, target: str) -> str:
    relative = posixpath.relpath(target, directory or ".")
    if relative.startswith("../"):
        return relative
    return f"./{relative}"
