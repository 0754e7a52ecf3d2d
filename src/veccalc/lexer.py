"""Tokenization for the calculator expression language."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


class LexError(SyntaxError):
    def __init__(self, message: str, pos: int) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACK",
    "]": "RBRACK",
    ",": "COMMA",
    "=": "ASSIGN",
}

_OPERATORS = set("+-*/^")
_SEPARATORS = {"\n", "\r", ";"}

_NUMBER_RE = re.compile(
    r"""
    (?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)   # mantissa
    (?:[eE][+\-]?[0-9]+)?               # exponent
    """,
    re.VERBOSE,
)


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _scan_number(source: str, start: int) -> tuple[float, int]:
    m = _NUMBER_RE.match(source, start)
    if m is None:
        raise LexError(f"Invalid numeric literal at index {start}", start)
    end = m.end()
    if end < len(source) and (_is_ident_continue(source[end]) or source[end] == "."):
        raise LexError(f"Invalid numeric literal {source[start : end + 1]!r} at index {start}", start)
    return float(m.group(0)), end


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch in {" ", "\t", "\f", "\v"}:
            i += 1
            continue

        if ch == "#":
            while i < len(source) and source[i] not in {"\n", "\r"}:
                i += 1
            continue

        if ch in _SEPARATORS:
            start = i
            while i < len(source) and source[i] in _SEPARATORS | {" ", "\t"}:
                i += 1
            tokens.append(Token("SEP", "\n", start, i))
            continue

        if ch.isdigit() or (ch == "." and i + 1 < len(source) and source[i + 1].isdigit()):
            value, end = _scan_number(source, i)
            tokens.append(Token("NUMBER", repr(value), i, end))
            i = end
            continue

        if ch in _OPERATORS:
            tokens.append(Token("OP", ch, i, i + 1))
            i += 1
            continue

        if ch in _SINGLE_TOKENS:
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        if _is_ident_start(ch):
            start = i
            i += 1
            while i < len(source) and _is_ident_continue(source[i]):
                i += 1
            tokens.append(Token("NAME", source[start:i], start, i))
            continue

        raise LexError(f"Unexpected character {ch!r} at index {i}", i)

    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
