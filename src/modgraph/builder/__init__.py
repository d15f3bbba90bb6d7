"""Module graph build orchestration."""

from .filesystem import ProjectFileSystem
from .models import BuildRecord, BuildSummary, SourceKind
from .orchestrator import ModuleBuilder, SpecifierScanner
from .protocols import (
    ArtifactWriter,
    DeclarationEmitter,
    DeclarationFailure,
    Diagnostic,
    SourceLocation,
    SourceReader,
    SourceTransformer,
    TransformFailure,
)

__all__ = [
    "ArtifactWriter",
    "BuildRecord",
    "BuildSummary",
    "DeclarationEmitter",
    "DeclarationFailure",
    "Diagnostic",
    "ModuleBuilder",
    "ProjectFileSystem",
    "SourceKind",
    "SourceLocation",
    "SourceReader",
    "SourceTransformer",
    "SpecifierScanner",
    "TransformFailure",
]
