"""Structured error types for parser/runtime separation."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from .parser import ParseError
from .values import ValueKind


class ErrorKind(str, Enum):
    PARSE = "parse"
    TYPE_MISMATCH = "type_mismatch"
    SHAPE_MISMATCH = "shape_mismatch"
    UNDEFINED_VARIABLE = "undefined_variable"
    UNDEFINED_FUNCTION = "undefined_function"
    ARITY_MISMATCH = "arity_mismatch"
    NOT_IMPLEMENTED = "not_implemented"
    INTERNAL = "internal"
    RESOURCE_EXHAUSTED = "resource_exhausted"


class CalcError(Exception):
    """Base class for structured veccalc errors.

    ``str(err)`` is the user-facing message: a component tag followed by a
    description, e.g. ``[Interpreter]: Undefined variable: "x"``.
    """

    tag: ClassVar[str] = "[Interpreter]"
    kind: ClassVar[ErrorKind]

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.tag}: {self.detail}"


class CalcParseError(CalcError):
    """Wraps parser failures with explicit parse-stage typing."""

    tag = "[Parser]"
    kind = ErrorKind.PARSE

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found
        expected_text = ""
        if expected:
            expected_text = f"; expected {', '.join(expected)}"
        found_text = ""
        if found is not None:
            found_text = f"; found {found}"
        super().__init__(f"{message} at span [{start}, {end}){expected_text}{found_text}")

    @classmethod
    def from_parse_error(cls, err: ParseError) -> "CalcParseError":
        return cls(
            message=err.message,
            start=err.start,
            end=err.end,
            expected=err.expected,
            found=err.found,
        )


class CalcRuntimeError(CalcError):
    """Generic runtime failure after successful parse."""


class TypeMismatch(CalcRuntimeError):
    """Operand kinds are incompatible for the requested operation."""

    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, operation: str, operands: tuple[ValueKind, ...], detail: str) -> None:
        self.operation = operation
        self.operands = operands
        super().__init__(detail)


class ShapeMismatch(CalcRuntimeError):
    """Two vectors of differing lengths met in an elementwise operation."""

    kind = ErrorKind.SHAPE_MISMATCH

    def __init__(self, operation: str, left_length: int, right_length: int, detail: str) -> None:
        self.operation = operation
        self.left_length = left_length
        self.right_length = right_length
        super().__init__(f"{detail} ({left_length} vs {right_length})")


class UndefinedVariable(CalcRuntimeError):
    kind = ErrorKind.UNDEFINED_VARIABLE

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Undefined variable: "{name}"')


class UndefinedFunction(CalcRuntimeError):
    kind = ErrorKind.UNDEFINED_FUNCTION

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Undefined function "{name}"')


class ArityMismatch(CalcRuntimeError):
    kind = ErrorKind.ARITY_MISMATCH

    def __init__(self, function: str, expected: int, received: int) -> None:
        self.function = function
        self.expected = expected
        self.received = received
        noun = "argument" if expected == 1 else "arguments"
        super().__init__(f"Function {function} expects exactly {expected} {noun}, got {received}")


class NotImplementedOperation(CalcRuntimeError):
    """Structurally valid operation with no semantics for the operand kind."""

    kind = ErrorKind.NOT_IMPLEMENTED

    def __init__(self, operation: str, operand: ValueKind) -> None:
        self.operation = operation
        self.operand = operand
        super().__init__(f"Not implemented: {operation} of a {operand.value}")


class InternalError(CalcRuntimeError):
    """The evaluator met a node type the parser should never produce."""

    kind = ErrorKind.INTERNAL

    def __init__(self, node_type: str) -> None:
        self.node_type = node_type
        super().__init__(f"Unexpected node type: {node_type}")


class ResourceExhausted(CalcRuntimeError):
    kind = ErrorKind.RESOURCE_EXHAUSTED

    def __init__(self, detail: str = "Expression nesting is too deep to evaluate") -> None:
        super().__init__(detail)
