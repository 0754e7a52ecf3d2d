"""AST nodes for the calculator expression language."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class Number:
    value: float
    kind: ClassVar[str] = "number"


@dataclass(frozen=True)
class Name:
    value: str
    kind: ClassVar[str] = "variable"


@dataclass(frozen=True)
class Vector:
    items: tuple["Expr", ...]
    kind: ClassVar[str] = "vector"


@dataclass(frozen=True)
class Prefix:
    op: str
    right: "Expr"

    @property
    def kind(self) -> str:
        return f"u{self.op}"


@dataclass(frozen=True)
class Infix:
    op: str
    left: "Expr"
    right: "Expr"

    @property
    def kind(self) -> str:
        return self.op


@dataclass(frozen=True)
class Assign:
    target: Name
    value: "Expr"
    kind: ClassVar[str] = "assignment"


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple["Expr", ...]
    kind: ClassVar[str] = "function"


@dataclass(frozen=True)
class Program:
    statements: tuple["Expr", ...]


Expr = Union[Number, Name, Vector, Prefix, Infix, Assign, Call]
