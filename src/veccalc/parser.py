"""Recursive-descent parser for the calculator expression language."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import Assign, Call, Expr, Infix, Name, Number, Prefix, Program, Vector
from .lexer import LexError, Token, tokenize

# Binding powers for infix operators: (left, right). ``^`` is right-associative.
_INFIX_BINDING: dict[str, tuple[int, int]] = {
    "+": (10, 11),
    "-": (10, 11),
    "*": (20, 21),
    "/": (20, 21),
    "^": (30, 30),
}

# Unary signs bind tighter than ``*`` but looser than ``^``, so ``-2^2`` is ``-(2^2)``.
_PREFIX_BINDING = 25
_PREFIX_OPS = {"+", "-"}

_STATEMENT_END = {"SEP", "EOF"}


class ParseError(SyntaxError):
    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


@dataclass
class _Parser:
    tokens: list[Token]
    index: int = 0

    def parse_program(self) -> Program:
        statements: list[Expr] = []
        self._consume_separators()
        while self._peek().kind != "EOF":
            statements.append(self._parse_statement())
            if self._peek().kind not in _STATEMENT_END:
                self._error(message="Unexpected token after statement", expected=("SEP", "EOF"))
            self._consume_separators()
        return Program(statements=tuple(statements))

    def parse_expression_only(self) -> Expr:
        expr = self._parse_statement()
        self._expect("EOF")
        return expr

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_next(self) -> Token:
        if self.index + 1 < len(self.tokens):
            return self.tokens[self.index + 1]
        return self.tokens[-1]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        normalized_expected = tuple(dict.fromkeys(expected))
        if token.kind == "EOF":
            found = "EOF"
        elif token.text:
            found = f"{token.kind}({token.text!r})" if token.kind == "SEP" else f"{token.kind}({token.text})"
        else:
            found = token.kind
        raise ParseError(detail, token.pos, token.end, expected=normalized_expected, found=found)

    def _match(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    def _consume_separators(self) -> None:
        while self._peek().kind == "SEP":
            self._advance()

    def _parse_statement(self) -> Expr:
        if self._peek().kind == "NAME" and self._peek_next().kind == "ASSIGN":
            target = Name(self._advance().text)
            self._advance()
            return Assign(target=target, value=self._parse_statement())

        expr = self._parse_expression(0)
        if self._peek().kind == "ASSIGN":
            self._error(message="Invalid assignment target", expected=("SEP", "EOF"))
        return expr

    def _parse_expression(self, min_bp: int) -> Expr:
        left = self._parse_prefix()

        while True:
            tok = self._peek()
            if tok.kind != "OP":
                break
            left_bp, right_bp = _INFIX_BINDING[tok.text]
            if left_bp < min_bp:
                break
            self._advance()
            right = self._parse_expression(right_bp)
            left = Infix(op=tok.text, left=left, right=right)

        return left

    def _parse_prefix(self) -> Expr:
        tok = self._peek()
        if tok.kind == "OP" and tok.text in _PREFIX_OPS:
            self._advance()
            return Prefix(op=tok.text, right=self._parse_expression(_PREFIX_BINDING))
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        tok = self._peek()

        if tok.kind == "NUMBER":
            self._advance()
            return Number(float(tok.text))

        if tok.kind == "NAME":
            self._advance()
            if self._match("LPAREN"):
                args = self._parse_items("RPAREN")
                return Call(name=tok.text, args=args)
            return Name(tok.text)

        if tok.kind == "LPAREN":
            self._advance()
            expr = self._parse_expression(0)
            self._expect("RPAREN")
            return expr

        if tok.kind == "LBRACK":
            self._advance()
            return Vector(items=self._parse_items("RBRACK"))

        self._error(tok, message="Expected an expression", expected=("NUMBER", "NAME", "LPAREN", "LBRACK"))
        raise AssertionError("unreachable")

    def _parse_items(self, closer: str) -> tuple[Expr, ...]:
        items: list[Expr] = []
        if self._match(closer):
            return ()
        while True:
            items.append(self._parse_expression(0))
            if self._match(closer):
                return tuple(items)
            if not self._match("COMMA"):
                self._error(expected=("COMMA", closer))


def _tokenize(source: str) -> list[Token]:
    try:
        return tokenize(source)
    except LexError as exc:
        raise ParseError(exc.message, exc.pos, exc.pos + 1) from exc


def parse(source: str) -> Expr:
    tokens = _tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_expression_only()


def parse_program(source: str) -> Program:
    tokens = _tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_program()
