"""veccalc public API."""

from .parser import ParseError, parse, parse_program
from .values import Matrix, Scalar, Value, ValueKind, Vector, format_number, format_value
from .errors import (
    ArityMismatch,
    CalcError,
    CalcParseError,
    CalcRuntimeError,
    ErrorKind,
    InternalError,
    NotImplementedOperation,
    ResourceExhausted,
    ShapeMismatch,
    TypeMismatch,
    UndefinedFunction,
    UndefinedVariable,
)
from .evaluator import Environment, Session, evaluate, evaluate_program, run_program

__all__ = [
    "parse",
    "parse_program",
    "ParseError",
    "evaluate",
    "evaluate_program",
    "run_program",
    "Environment",
    "Session",
    "Scalar",
    "Vector",
    "Matrix",
    "Value",
    "ValueKind",
    "format_value",
    "format_number",
    "CalcError",
    "CalcParseError",
    "CalcRuntimeError",
    "ErrorKind",
    "TypeMismatch",
    "ShapeMismatch",
    "UndefinedVariable",
    "UndefinedFunction",
    "ArityMismatch",
    "NotImplementedOperation",
    "InternalError",
    "ResourceExhausted",
]
