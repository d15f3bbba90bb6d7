from __future__ import annotations

import pytest

from modgraph.builder import (
    DeclarationFailure,
    Diagnostic,
    ModuleBuilder,
    SourceLocation,
)
from modgraph.errors import DeclarationError, MissingDeclarationError


class _MemoryProject:
    def __init__(self, files: dict[str, str]) -> None:
        self.files = dict(files)
        self.outputs: dict[str, str] = {}

    def read(self, path: str) -> str:
        return self.files[path]

    def write(self, path: str, content: str) -> None:
        self.outputs[path] = content


class _StripTypes:
    def transform(self, code: str) -> str:
        return code.replace(": number", "")


class _SignatureEmitter:
    """Keeps import lines and turns exported constants into declarations."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def emit(self, code: str) -> str:
        self.calls.append(code)
        lines = []
        for line in code.splitlines():
            if line.startswith("import"):
                lines.append(line)
            elif line.startswith("export const"):
                name = line.split()[2].rstrip(":")
                lines.append(f"export declare const {name}: number;")
        return "\n".join(lines) + "\n"


class _FailingEmitter:
    def emit(self, code: str) -> str:
        raise DeclarationFailure(
            "tsc exited with status 2",
            diagnostics=(
                Diagnostic("Cannot find name 'missing'.", SourceLocation(line=0, character=10)),
                Diagnostic("Unused '@ts-expect-error' directive."),
            ),
        )


def test_declarations_reference_executable_outputs() -> None:
    project = _MemoryProject(
        {
            "main.ts": 'import { b } from "./dep.ts";\nexport const a: number = b;\n',
            "dep.ts": "export const b: number = 1;\n",
        }
    )
    emitter = _SignatureEmitter()

    summary = ModuleBuilder(project, project, _StripTypes(), declarations=emitter).build("main.ts")

    assert project.outputs["main.d.ts"] == (
        'import { b } from "./dep.js";\nexport declare const a: number;\n'
    )
    assert project.outputs["dep.d.ts"] == "export declare const b: number;\n"
    assert emitter.calls == [
        "export const b: number = 1;\n",
        'import { b } from "./dep.ts";\nexport const a: number = b;\n',
    ]
    assert summary.written == ("dep.js", "dep.d.ts", "main.js", "main.d.ts")


def test_module_typescript_declarations_use_module_extensions() -> None:
    project = _MemoryProject(
        {
            "main.mts": 'import { b } from "./dep.mts";\n',
            "dep.mts": "export const b = 1;\n",
        }
    )

    ModuleBuilder(project, project, _StripTypes(), declarations=_SignatureEmitter()).build(
        "main.mts"
    )

    assert sorted(project.outputs) == ["dep.d.mts", "dep.mjs", "main.d.mts", "main.mjs"]
    assert project.outputs["main.d.mts"] == 'import { b } from "./dep.mjs";\n'


def test_declaration_importing_javascript_dependency_fails() -> None:
    project = _MemoryProject(
        {
            "main.ts": 'import { b } from "./plain.js";\n',
            "plain.js": "export const b = 1;\n",
        }
    )

    with pytest.raises(MissingDeclarationError) as error:
        ModuleBuilder(project, project, _StripTypes(), declarations=_SignatureEmitter()).build(
            "main.ts"
        )

    assert error.value.code == "MISSING_DECLARATION"
    assert error.value.dependency == "plain.js"
    assert error.value.path == "main.ts"
    assert project.outputs == {
        "plain.js": "export const b = 1;\n",
        "main.js": 'import { b } from "./plain.js";\n',
    }


def test_declaration_failure_lists_diagnostics() -> None:
    project = _MemoryProject({"main.ts": "export const a = missing;\n"})

    with pytest.raises(DeclarationError) as error:
        ModuleBuilder(project, project, _StripTypes(), declarations=_FailingEmitter()).build(
            "main.ts"
        )

    assert error.value.diagnostics == (
        "line 1: Cannot find name 'missing'.",
        "Unused '@ts-expect-error' directive.",
    )
    assert error.value.message.startswith("failed to generate declaration file:\n\n")
    assert project.outputs == {"main.js": "export const a = missing;\n"}


def test_without_emitter_no_declarations_are_written() -> None:
    project = _MemoryProject({"main.ts": "export const a: number = 1;\n"})

    summary = ModuleBuilder(project, project, _StripTypes()).build("main.ts")

    assert project.outputs == {"main.js": "export const a = 1;\n"}
    assert summary.records[0].declaration_path is None
