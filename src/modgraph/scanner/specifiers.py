"""Static import and re-export specifier scanning."""

from __future__ import annotations

import re
from dataclasses import dataclass

from modgraph.errors import ParseError
from modgraph.scanner.lexical import Token, tokenize

_ESCAPE_RE = re.compile(r"\\(u\{[0-9A-Fa-f]+\}|u[0-9A-Fa-f]{4}|x[0-9A-Fa-f]{2}|\r\n|[\s\S])")
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_CLAUSE_START_PUNCTUATORS = {"{", "*"}
_MEMBER_ACCESS_PUNCTUATORS = {".", "?."}


@dataclass(slots=True, frozen=True)
class SpecifierRecord:
    """Literal module specifier and the half-open range of its quoted token."""

    value: str
    start: int
    end: int


def is_relative_specifier(value: str) -> bool:
    """Return True when a specifier is project-relative."""
    return value.startswith("./") or value.startswith("../")


def scan_specifiers(text: str) -> list[SpecifierRecord]:
    """Return import and re-export specifiers in source order."""
    tokens = tokenize(text)
    records: list[SpecifierRecord] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.kind != "identifier" or _is_member_name(tokens, index):
            index += 1
            continue
        if token.text == "import":
            record, index = _scan_import(tokens, index)
        elif token.text == "export":
            record, index = _scan_export(tokens, index)
        else:
            index += 1
            continue
        if record is not None:
            records.append(record)
    return records


def _scan_import(tokens: list[Token], index: int) -> tuple[SpecifierRecord | None, int]:
    keyword = tokens[index]
    following = _token_at(tokens, index + 1)
    if following is None:
        raise _error("Unexpected end of input after 'import'", keyword)
    if following.kind == "string":
        return _record(following), index + 2
    if following.kind != "identifier" and not _is_punctuator(following, _CLAUSE_START_PUNCTUATORS):
        # import(...), import.meta and property keys named "import".
        return None, index + 1

    depth = 0
    cursor = index + 1
    while cursor < len(tokens):
        token = tokens[cursor]
        if _is_punctuator(token, {"{"}):
            depth += 1
        elif _is_punctuator(token, {"}"}):
            depth -= 1
        elif depth == 0:
            if token.kind == "identifier" and token.text == "from" and cursor > index + 1:
                return _expect_specifier(tokens, cursor), cursor + 2
            if _is_punctuator(token, {"="}):
                # TypeScript import-equals declarations carry no static specifier.
                return None, cursor + 1
            if token.kind != "identifier" and not _is_punctuator(token, {",", "*"}):
                raise _error("Import declaration is missing a module specifier", token)
        cursor += 1
    raise _error("Unexpected end of input in import declaration", keyword)


def _scan_export(tokens: list[Token], index: int) -> tuple[SpecifierRecord | None, int]:
    cursor = index + 1
    following = _token_at(tokens, cursor)
    if following is not None and following.kind == "identifier" and following.text == "type":
        after_type = _token_at(tokens, cursor + 1)
        if after_type is not None and _is_punctuator(after_type, _CLAUSE_START_PUNCTUATORS):
            cursor += 1
            following = after_type
    if following is None:
        return None, index + 1

    if _is_punctuator(following, {"*"}):
        cursor += 1
        alias = _token_at(tokens, cursor)
        if alias is not None and alias.kind == "identifier" and alias.text == "as":
            cursor += 2
        from_token = _token_at(tokens, cursor)
        if from_token is None or from_token.kind != "identifier" or from_token.text != "from":
            raise _error("Re-export-all declaration is missing a 'from' clause", following)
        return _expect_specifier(tokens, cursor), cursor + 2

    if _is_punctuator(following, {"{"}):
        close = _matching_brace(tokens, cursor)
        from_token = _token_at(tokens, close + 1)
        if from_token is not None and from_token.kind == "identifier" and from_token.text == "from":
            return _expect_specifier(tokens, close + 1), close + 3
        return None, close + 1

    return None, index + 1


def _expect_specifier(tokens: list[Token], from_index: int) -> SpecifierRecord:
    literal = _token_at(tokens, from_index + 1)
    if literal is None or literal.kind != "string":
        raise _error("Expected a string literal module specifier after 'from'", tokens[from_index])
    return _record(literal)


def _matching_brace(tokens: list[Token], open_index: int) -> int:
    depth = 0
    for cursor in range(open_index, len(tokens)):
        token = tokens[cursor]
        if _is_punctuator(token, {"{"}):
            depth += 1
        elif _is_punctuator(token, {"}"}):
            depth -= 1
            if depth == 0:
                return cursor
    raise _error("Unterminated export clause", tokens[open_index])


def _is_member_name(tokens: list[Token], index: int) -> bool:
    if index == 0:
        return False
    return _is_punctuator(tokens[index - 1], _MEMBER_ACCESS_PUNCTUATORS)


def _is_punctuator(token: Token, texts: set[str]) -> bool:
    return token.kind == "punctuator" and token.text in texts


def _token_at(tokens: list[Token], index: int) -> Token | None:
    if 0 <= index < len(tokens):
        return tokens[index]
    return None


def _record(token: Token) -> SpecifierRecord:
    return SpecifierRecord(value=_unquote(token.text), start=token.start, end=token.end)


def _unquote(literal: str) -> str:
    body = literal[1:-1]
    if "\\" not in body:
        return body
    return _ESCAPE_RE.sub(_decode_escape, body)


def _decode_escape(match: re.Match[str]) -> str:
    sequence = match.group(1)
    if sequence in ("\n", "\r\n", "\r"):
        return ""
    if sequence.startswith("u{"):
        return chr(int(sequence[2:-1], 16))
    if sequence[0] in ("u", "x") and len(sequence) > 1:
        return chr(int(sequence[1:], 16))
    return _SIMPLE_ESCAPES.get(sequence, sequence)


def _error(reason: str, token: Token) -> ParseError:
    return ParseError(reason, line=token.line, column=token.column)
