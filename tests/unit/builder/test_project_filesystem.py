from __future__ import annotations

from pathlib import Path

import pytest

from modgraph.builder import ModuleBuilder, ProjectFileSystem


class _Identity:
    def transform(self, code: str) -> str:
        return code


def test_filesystem_reads_root_and_writes_out_dir(tmp_path: Path) -> None:
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.ts").write_text('import "./dep.ts";\r\n', encoding="utf-8")
    (root / "src" / "dep.ts").write_text("export {};\n", encoding="utf-8")
    filesystem = ProjectFileSystem(root=root, out_dir=tmp_path / "dist")

    ModuleBuilder(filesystem, filesystem, _Identity()).build("src/main.ts")

    main_js = tmp_path / "dist" / "src" / "main.js"
    assert main_js.read_bytes() == b'import "./dep.js";\r\n'
    assert (tmp_path / "dist" / "src" / "dep.js").read_text(encoding="utf-8") == "export {};\n"


def test_filesystem_blocks_paths_outside_sandbox(tmp_path: Path) -> None:
    filesystem = ProjectFileSystem(root=tmp_path / "project", out_dir=tmp_path / "dist")

    with pytest.raises(PermissionError):
        filesystem.read("../secret.ts")
    with pytest.raises(PermissionError):
        filesystem.write("/etc/passwd", "x")


def test_filesystem_missing_file_raises_os_error(tmp_path: Path) -> None:
    filesystem = ProjectFileSystem(root=tmp_path, out_dir=tmp_path / "dist")

    with pytest.raises(FileNotFoundError):
        filesystem.read("missing.ts")
