"""Tree-walking evaluator for the calculator language on top of JAX."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .ast import Assign, Call, Expr, Infix, Name, Number, Prefix, Program, Vector as VectorLiteral
from .errors import (
    ArityMismatch,
    CalcError,
    CalcParseError,
    InternalError,
    NotImplementedOperation,
    ResourceExhausted,
    ShapeMismatch,
    TypeMismatch,
    UndefinedFunction,
    UndefinedVariable,
)
from .parser import ParseError, parse_program
from .values import FLOAT_DTYPE, Scalar, Value, Vector, format_value, validate_value

logger = logging.getLogger(__name__)

_USE_JITTED_KERNELS: Final[bool] = os.environ.get("VECCALC_DISABLE_JITTED_KERNELS", "0") != "1"
_PROGRAM_CACHE_MAX: Final[int] = max(1, int(os.environ.get("VECCALC_PROGRAM_CACHE_MAX", "256")))

Bindings = MutableMapping[str, Value]


@lru_cache(maxsize=_PROGRAM_CACHE_MAX)
def _parse_program_cached(source: str) -> Program:
    return parse_program(source)


_BINARY_KERNELS: Final[dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    "+": lambda w, x: w + x,
    "-": lambda w, x: w - x,
    "*": lambda w, x: w * x,
    "/": lambda w, x: w / x,
    "^": lambda w, x: jnp.power(w, x),
}

_FUNCTION_KERNELS: Final[dict[str, Callable[[jnp.ndarray], jnp.ndarray]]] = {
    "sin": jnp.sin,
    "cos": jnp.cos,
    "tan": jnp.tan,
}

_FUNCTION_ARITY: Final[int] = 1

_OPERATION_VERBS: Final[dict[str, str]] = {
    "+": "add",
    "-": "subtract",
}

_JITTED_BINARY_KERNELS: dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}
_JITTED_FUNCTION_KERNELS: dict[str, Callable[[jnp.ndarray], jnp.ndarray]] = {}


def _binary_kernel(op: str) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_KERNELS:
        return _BINARY_KERNELS[op]
    fn = _JITTED_BINARY_KERNELS.get(op)
    if fn is None:
        fn = jax.jit(_BINARY_KERNELS[op])
        _JITTED_BINARY_KERNELS[op] = fn
    return fn


def _function_kernel(name: str) -> Callable[[jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_KERNELS:
        return _FUNCTION_KERNELS[name]
    fn = _JITTED_FUNCTION_KERNELS.get(name)
    if fn is None:
        fn = jax.jit(_FUNCTION_KERNELS[name])
        _JITTED_FUNCTION_KERNELS[name] = fn
    return fn


def _scalar_array(value: Scalar) -> jnp.ndarray:
    return jnp.asarray(value.value, dtype=FLOAT_DTYPE)


def _apply_scalar(op: str, left: Scalar, right: Scalar) -> Scalar:
    out = _binary_kernel(op)(_scalar_array(left), _scalar_array(right))
    return Scalar(float(out))


def _apply_vector(op: str, left: jnp.ndarray, right: jnp.ndarray) -> Vector:
    return Vector(_binary_kernel(op)(left, right))


class Environment(MutableMapping[str, Value]):
    """Caller-owned variable bindings that reject non-calculator values."""

    def __init__(self, data: MutableMapping[str, Value] | None = None) -> None:
        seed_env = {} if data is None else dict(data)
        for name, value in seed_env.items():
            validate_value(value, where=f"env[{name!r}]")
        self._data: dict[str, Value] = seed_env

    def __getitem__(self, key: str) -> Value:
        return self._data[key]

    def __setitem__(self, key: str, value: Value) -> None:
        validate_value(value, where=f"env[{key!r}]")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Environment({self._data!r})"


def _eval_additive(op: str, left: Value, right: Value) -> Value:
    verb = _OPERATION_VERBS[op]
    if isinstance(left, Scalar) and isinstance(right, Scalar):
        return _apply_scalar(op, left, right)
    if isinstance(left, Vector) and isinstance(right, Vector):
        if len(left) != len(right):
            raise ShapeMismatch(op, len(left), len(right), f"Cannot {verb} two vectors of different sizes")
        return _apply_vector(op, left.values, right.values)
    raise TypeMismatch(
        op,
        (left.kind, right.kind),
        f"Cannot {verb} two different objects ({left.kind.value} {op} {right.kind.value})",
    )


def _eval_multiply(left: Value, right: Value) -> Value:
    if isinstance(left, Scalar) and isinstance(right, Scalar):
        return _apply_scalar("*", left, right)
    if isinstance(left, Scalar) and isinstance(right, Vector):
        return _apply_vector("*", _scalar_array(left), right.values)
    if isinstance(left, Vector) and isinstance(right, Scalar):
        return _apply_vector("*", left.values, _scalar_array(right))
    raise TypeMismatch(
        "*",
        (left.kind, right.kind),
        f"Only scalars and vectors may be multiplied, and not two vectors ({left.kind.value} * {right.kind.value})",
    )


def _eval_divide(left: Value, right: Value) -> Value:
    if isinstance(left, Scalar) and isinstance(right, Scalar):
        return _apply_scalar("/", left, right)
    if isinstance(left, Vector) and isinstance(right, Scalar):
        return _apply_vector("/", left.values, _scalar_array(right))
    raise TypeMismatch(
        "/",
        (left.kind, right.kind),
        f"Can only divide a scalar or a vector by a scalar ({left.kind.value} / {right.kind.value})",
    )


def _eval_power(left: Value, right: Value) -> Value:
    if isinstance(left, Scalar) and isinstance(right, Scalar):
        return _apply_scalar("^", left, right)
    raise TypeMismatch(
        "^",
        (left.kind, right.kind),
        f"Can only raise a scalar to a scalar power ({left.kind.value} ^ {right.kind.value})",
    )


def _eval_infix(op: str, left: Value, right: Value) -> Value:
    if op in _OPERATION_VERBS:
        return _eval_additive(op, left, right)
    if op == "*":
        return _eval_multiply(left, right)
    if op == "/":
        return _eval_divide(left, right)
    if op == "^":
        return _eval_power(left, right)
    raise InternalError(f"Infix({op!r})")


def _eval_prefix(op: str, right: Value) -> Value:
    if op == "+":
        return right
    if op == "-":
        if isinstance(right, Scalar):
            return Scalar(-right.value)
        raise NotImplementedOperation("negation", right.kind)
    raise InternalError(f"Prefix({op!r})")


def _eval_vector_literal(items: tuple[Expr, ...], env: Bindings) -> Vector:
    values: list[float] = []
    for item in items:
        value = evaluate(item, env)
        if not isinstance(value, Scalar):
            raise TypeMismatch(
                "vector",
                (value.kind,),
                f"Vector elements must be scalars, got '{value.kind.value}'",
            )
        values.append(value.value)
    return Vector(values)


def _eval_call(name: str, args: tuple[Expr, ...], env: Bindings) -> Value:
    if name not in _FUNCTION_KERNELS:
        raise UndefinedFunction(name)
    if len(args) != _FUNCTION_ARITY:
        raise ArityMismatch(name, _FUNCTION_ARITY, len(args))
    argument = evaluate(args[0], env)
    if not isinstance(argument, Scalar):
        raise NotImplementedOperation(name, argument.kind)
    return Scalar(float(_function_kernel(name)(_scalar_array(argument))))


def evaluate(node: Expr, env: Bindings) -> Value:
    """Evaluate one AST node against ``env``, binding names on assignment."""
    if isinstance(node, Number):
        return Scalar(node.value)

    if isinstance(node, Name):
        if node.value not in env:
            raise UndefinedVariable(node.value)
        return env[node.value]

    if isinstance(node, VectorLiteral):
        return _eval_vector_literal(node.items, env)

    if isinstance(node, Prefix):
        return _eval_prefix(node.op, evaluate(node.right, env))

    if isinstance(node, Infix):
        left = evaluate(node.left, env)
        right = evaluate(node.right, env)
        return _eval_infix(node.op, left, right)

    if isinstance(node, Assign):
        value = evaluate(node.value, env)
        env[node.target.value] = value
        return value

    if isinstance(node, Call):
        return _eval_call(node.name, node.args, env)

    raise InternalError(type(node).__name__)


def run_program(source: str, env: Bindings) -> list[Value]:
    """Parse and evaluate every statement, raising typed errors on failure.

    Assignments made by statements that completed before a failure stay in
    ``env``.
    """
    try:
        program = _parse_program_cached(source)
    except ParseError as exc:
        raise CalcParseError.from_parse_error(exc) from exc
    except RecursionError as exc:
        raise ResourceExhausted("Source nesting is too deep to parse") from exc

    logger.debug("evaluating %d statement(s)", len(program.statements))
    results: list[Value] = []
    for stmt in program.statements:
        try:
            results.append(evaluate(stmt, env))
        except RecursionError as exc:
            raise ResourceExhausted() from exc
    return results


def evaluate_program(source: str, env: Bindings) -> str:
    """Evaluate ``source`` and return its formatted output or an error message.

    One line per statement on success. On the first failure the whole
    result is the error message; earlier lines are discarded.
    """
    try:
        results = run_program(source, env)
    except CalcError as err:
        logger.debug("program failed with %s: %s", type(err).__name__, err)
        return str(err)
    return "\n".join(format_value(value) for value in results)


@dataclass
class Session:
    """Callable wrapper that evaluates source in a persistent environment.

    Calls are serialized, so one session may be shared between threads.
    """

    env: Bindings = field(default_factory=Environment)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __call__(self, source: str) -> str:
        with self._lock:
            return evaluate_program(source, self.env)

    def run(self, source: str) -> list[Value]:
        with self._lock:
            return run_program(source, self.env)
