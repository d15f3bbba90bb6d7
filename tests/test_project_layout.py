from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/modgraph/cli.py",
        "src/modgraph/config.py",
        "src/modgraph/rewrite.py",
        "src/modgraph/scanner/__init__.py",
        "src/modgraph/cache/__init__.py",
        "src/modgraph/builder/__init__.py",
        "src/modgraph/security/__init__.py",
        "src/modgraph/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
