"""Range-based source rewriting for specifier replacement."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TextEdit:
    """Replacement of the half-open character range ``[start, end)``."""

    start: int
    end: int
    replacement: str


def rewrite(text: str, edits: Iterable[TextEdit]) -> str:
    """Apply non-overlapping edits last to first and return the edited text."""
    ordered = sorted(edits, key=lambda edit: edit.start, reverse=True)
    length = len(text)
    for edit in ordered:
        if edit.start < 0 or edit.end > length or edit.start > edit.end:
            raise ValueError(
                f"Edit range [{edit.start}, {edit.end}) is outside text of length {length}."
            )

    result = text
    for edit in ordered:
        result = f"{result[: edit.start]}{edit.replacement}{result[edit.end :]}"
    return result
