"""Runtime value model, validators and display formatting."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Final, Union

import jax
import jax.numpy as jnp

_ENABLE_X64: Final[bool] = os.environ.get("VECCALC_DISABLE_X64", "0") != "1"

if _ENABLE_X64:
    jax.config.update("jax_enable_x64", True)

FLOAT_DTYPE: Final = jnp.float64 if _ENABLE_X64 else jnp.float32


class ValueKind(str, Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"


def as_float_array(values) -> jnp.ndarray:
    """Coerce a sequence of numbers into an immutable 1-D float array."""
    arr = jnp.asarray(values, dtype=FLOAT_DTYPE)
    if arr.ndim != 1:
        raise ValueError(f"expected a 1-D sequence of numbers, got shape {tuple(arr.shape)}")
    return arr


@dataclass(frozen=True)
class Scalar:
    value: float
    kind: ClassVar[ValueKind] = ValueKind.SCALAR

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True, eq=False)
class Vector:
    values: jnp.ndarray
    kind: ClassVar[ValueKind] = ValueKind.VECTOR

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", as_float_array(self.values))

    def __len__(self) -> int:
        return int(self.values.shape[0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.tolist() == other.tolist()

    def tolist(self) -> list[float]:
        return [float(x) for x in self.values.tolist()]


@dataclass(frozen=True, eq=False)
class Matrix:
    """Reserved variant: constructible and printable, no operations defined."""

    values: jnp.ndarray
    kind: ClassVar[ValueKind] = ValueKind.MATRIX

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", as_float_array(self.values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.tolist() == other.tolist()

    def tolist(self) -> list[float]:
        return [float(x) for x in self.values.tolist()]


Value = Union[Scalar, Vector, Matrix]


def kind_of(value: object) -> ValueKind:
    if isinstance(value, (Scalar, Vector, Matrix)):
        return value.kind
    raise TypeError(f"unsupported runtime type {type(value).__name__}")


def validate_value(value: object, *, where: str = "value") -> None:
    if isinstance(value, (Scalar, Vector, Matrix)):
        return
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")


def format_number(value: float) -> str:
    """Render a float the way a JavaScript host prints numbers.

    Shortest round-trip digits, plain notation for decimal exponents in
    ``[-6, 21)`` and ``1e+21`` style otherwise.
    """
    real = float(value)
    if math.isnan(real):
        return "NaN"
    if math.isinf(real):
        return "Infinity" if real > 0 else "-Infinity"
    if real == 0:
        return "0"

    sign = "-" if real < 0 else ""
    parts = Decimal(repr(abs(real))).normalize().as_tuple()
    digits = "".join(str(d) for d in parts.digits)
    k = len(digits)
    n = int(parts.exponent) + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits

    exponent = n - 1
    exp_text = f"e{'+' if exponent >= 0 else '-'}{abs(exponent)}"
    if k == 1:
        return sign + digits + exp_text
    return sign + digits[0] + "." + digits[1:] + exp_text


def _format_component(value: float) -> str:
    # JSON has no literal for non-finite numbers.
    if not math.isfinite(value):
        return "null"
    return format_number(value)


def format_value(value: Value) -> str:
    if isinstance(value, Scalar):
        return format_number(value.value)
    if isinstance(value, (Vector, Matrix)):
        return "[" + ",".join(_format_component(x) for x in value.tolist()) + "]"
    raise TypeError(f"cannot format runtime type {type(value).__name__}")
