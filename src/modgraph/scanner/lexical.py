"""Deterministic lexical tokenizer for JavaScript and TypeScript sources."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass

from modgraph.errors import ParseError

_IDENTIFIER_START_RE = re.compile(r"[A-Za-z_$#\u0080-\uffff]")
_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_$#\u0080-\uffff]+")
_NUMBER_RE = re.compile(r"\.?\d[\w.]*")
_REGEX_FLAGS_RE = re.compile(r"[A-Za-z]*")
_PUNCTUATORS = tuple(
    sorted(
        (
            ">>>=",
            "...",
            "===",
            "!==",
            "**=",
            "<<=",
            ">>=",
            ">>>",
            "&&=",
            "||=",
            "??=",
            "=>",
            "==",
            "!=",
            "<=",
            ">=",
            "&&",
            "||",
            "??",
            "?.",
            "++",
            "--",
            "+=",
            "-=",
            "*=",
            "/=",
            "%=",
            "&=",
            "|=",
            "^=",
            "**",
            "<<",
            ">>",
        ),
        key=len,
        reverse=True,
    )
)
_EXPRESSION_END_PUNCTUATORS = {")", "]", "}"}
_STATEMENT_HEAD_KEYWORDS = {"if", "while", "for", "with"}
_BLOCK_KEYWORDS = {"do", "else", "finally", "try"}
_BLOCK_PRECEDING_PUNCTUATORS = {";", "{", "}", ")", "=>"}
_REGEX_PRECEDING_KEYWORDS = {
    "await",
    "case",
    "delete",
    "do",
    "else",
    "in",
    "instanceof",
    "new",
    "of",
    "return",
    "throw",
    "typeof",
    "void",
    "yield",
}


@dataclass(slots=True, frozen=True)
class Token:
    """Significant source token with half-open offsets and 1-based position."""

    kind: str
    text: str
    start: int
    end: int
    line: int
    column: int


class _LineIndex:
    """Maps character offsets to 1-based line and column numbers."""

    def __init__(self, text: str) -> None:
        self._starts = [0]
        for match in re.finditer("\n", text):
            self._starts.append(match.end())

    def position(self, offset: int) -> tuple[int, int]:
        line_index = bisect.bisect_right(self._starts, offset) - 1
        return line_index + 1, offset - self._starts[line_index] + 1


class _Lexer:
    def __init__(self, text: str) -> None:
        self._text = text
        self._length = len(text)
        self._index = 0
        self._lines = _LineIndex(text)
        self._previous: Token | None = None
        # Open "(" and "{" groups; a closing token pops its frame.
        self._groups: list[str] = []
        self._previous_ends_statement = False

    def tokens(self) -> list[Token]:
        if self._text.startswith("#!"):
            self._skip_line()
        output: list[Token] = []
        while True:
            token = self._next_token()
            if token is None:
                return output
            output.append(token)

    def _next_token(self) -> Token | None:
        self._skip_trivia()
        if self._index >= self._length:
            return None
        text = self._text
        start = self._index
        char = text[start]

        if char in ("'", '"'):
            kind = "string"
            end = self._scan_string(start, char)
        elif char == "`":
            kind = "template"
            end = self._scan_template(start)
        elif char == "/" and self._regex_allowed():
            kind = "regex"
            end = self._scan_regex(start)
        elif _IDENTIFIER_START_RE.match(char):
            kind = "identifier"
            match = _IDENTIFIER_RE.match(text, start)
            end = match.end() if match is not None else start + 1
        elif char.isdigit() or (char == "." and text[start + 1 : start + 2].isdigit()):
            kind = "number"
            match = _NUMBER_RE.match(text, start)
            end = match.end() if match is not None else start + 1
        else:
            kind = "punctuator"
            end = start + len(_match_any(text, start, _PUNCTUATORS) or char)

        self._index = end
        line, column = self._lines.position(start)
        token = Token(
            kind=kind,
            text=text[start:end],
            start=start,
            end=end,
            line=line,
            column=column,
        )
        self._previous_ends_statement = kind == "punctuator" and self._track_groups(token)
        self._previous = token
        return token

    def _track_groups(self, token: Token) -> bool:
        """Update open groups; return True when token closes a statement head or a block."""
        text = token.text
        if text == "(":
            head = _is_identifier(self._previous, _STATEMENT_HEAD_KEYWORDS)
            self._groups.append("head" if head else "paren")
        elif text == "{":
            self._groups.append("block" if self._opens_block() else "object")
        elif text in (")", "}") and self._groups:
            return self._groups.pop() in ("head", "block")
        return False

    def _opens_block(self) -> bool:
        previous = self._previous
        if previous is None:
            return True
        if previous.kind == "punctuator":
            return previous.text in _BLOCK_PRECEDING_PUNCTUATORS
        if previous.kind == "identifier":
            # Class and interface bodies follow a name; expression keywords start literals.
            return (
                previous.text in _BLOCK_KEYWORDS
                or previous.text not in _REGEX_PRECEDING_KEYWORDS
            )
        return False

    def _skip_trivia(self) -> None:
        text = self._text
        while self._index < self._length:
            char = text[self._index]
            if char.isspace():
                self._index += 1
                continue
            if text.startswith("//", self._index):
                self._skip_line()
                continue
            if text.startswith("/*", self._index):
                close = text.find("*/", self._index + 2)
                if close < 0:
                    raise self._error("Unterminated block comment", self._index)
                self._index = close + 2
                continue
            return

    def _skip_line(self) -> None:
        newline = self._text.find("\n", self._index)
        self._index = self._length if newline < 0 else newline

    def _scan_string(self, start: int, quote: str) -> int:
        text = self._text
        index = start + 1
        while index < self._length:
            char = text[index]
            if char == "\\":
                index += 3 if text.startswith("\r\n", index + 1) else 2
                continue
            if char == quote:
                return index + 1
            if char == "\n":
                break
            index += 1
        raise self._error("Unterminated string literal", start)

    def _scan_template(self, start: int) -> int:
        text = self._text
        index = start + 1
        while index < self._length:
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if char == "`":
                return index + 1
            if text.startswith("${", index):
                index = self._skip_template_expression(start, index + 2)
                continue
            index += 1
        raise self._error("Unterminated template literal", start)

    def _skip_template_expression(self, template_start: int, index: int) -> int:
        self._index = index
        self._groups.append("template")
        depth = 1
        while True:
            token = self._next_token()
            if token is None:
                raise self._error("Unterminated template literal", template_start)
            if token.kind != "punctuator":
                continue
            if token.text == "{":
                depth += 1
            elif token.text == "}":
                depth -= 1
                if depth == 0:
                    return self._index

    def _scan_regex(self, start: int) -> int:
        text = self._text
        index = start + 1
        in_class = False
        while index < self._length:
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if char == "\n":
                break
            if char == "[":
                in_class = True
            elif char == "]":
                in_class = False
            elif char == "/" and not in_class:
                flags = _REGEX_FLAGS_RE.match(text, index + 1)
                return flags.end() if flags is not None else index + 1
            index += 1
        raise self._error("Unterminated regular expression literal", start)

    def _regex_allowed(self) -> bool:
        previous = self._previous
        if previous is None:
            return True
        if previous.kind == "punctuator":
            if previous.text in _EXPRESSION_END_PUNCTUATORS:
                return self._previous_ends_statement
            return True
        if previous.kind == "identifier":
            return previous.text in _REGEX_PRECEDING_KEYWORDS
        return False

    def _error(self, reason: str, offset: int) -> ParseError:
        line, column = self._lines.position(offset)
        return ParseError(reason, line=line, column=column)


def tokenize(text: str) -> list[Token]:
    """Split source text into significant tokens, skipping whitespace and comments."""
    return _Lexer(text).tokens()


def _match_any(text: str, index: int, markers: tuple[str, ...]) -> str | None:
    for marker in markers:
        if text.startswith(marker, index):
            return marker
    return None


def _is_identifier(token: Token | None, texts: set[str]) -> bool:
    return token is not None and token.kind == "identifier" and token.text in texts
