from __future__ import annotations

import pytest

from modgraph.errors import ParseError
from modgraph.scanner import scan_specifiers, tokenize


def test_import_clause_without_from_raises_parse_error() -> None:
    with pytest.raises(ParseError) as error:
        scan_specifiers('import { a } "./a.ts";')

    assert error.value.reason == "Import declaration is missing a module specifier"
    assert error.value.code == "PARSE_FAILED"
    assert error.value.line == 1
    assert error.value.column == 14


def test_import_from_without_string_literal_raises_parse_error() -> None:
    with pytest.raises(ParseError, match="Expected a string literal module specifier"):
        scan_specifiers("import a from b;")


def test_truncated_import_clause_raises_parse_error() -> None:
    with pytest.raises(ParseError, match="Unexpected end of input in import declaration"):
        scan_specifiers("import { a")


def test_export_all_without_from_raises_parse_error() -> None:
    with pytest.raises(ParseError, match="missing a 'from' clause"):
        scan_specifiers('export * "./a.ts";')


def test_unterminated_string_reports_position() -> None:
    with pytest.raises(ParseError) as error:
        scan_specifiers('const ok = 1;\nconst bad = "open;\n')

    assert error.value.reason == "Unterminated string literal"
    assert error.value.line == 2
    assert error.value.column == 13


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("/* never closed", "Unterminated block comment"),
        ("const t = `abc", "Unterminated template literal"),
        ("const t = `${value", "Unterminated template literal"),
        ("const r = /abc\n", "Unterminated regular expression literal"),
    ],
)
def test_unterminated_literals_raise_parse_error(text: str, reason: str) -> None:
    with pytest.raises(ParseError) as error:
        tokenize(text)

    assert error.value.reason == reason
