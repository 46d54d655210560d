"""AST node types produced by the parser.

Nodes are frozen dataclasses with tuple children, so a tree can be shared by
any number of evaluator visits (loop bodies, recursive calls). Every node
records the source line it started on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tern import TernValue


# --- Expressions ---

@dataclass(frozen=True)
class Literal:
    value: TernValue
    line: int


@dataclass(frozen=True)
class Variable:
    name: str
    line: int


@dataclass(frozen=True)
class Assign:
    name: str
    value: Expr
    line: int


@dataclass(frozen=True)
class Increment:
    """`name++` / `name--`; delta is +1.0 or -1.0."""
    name: str
    delta: float
    line: int


@dataclass(frozen=True)
class Logical:
    left: Expr
    operator: str
    right: Expr
    line: int


@dataclass(frozen=True)
class Binary:
    left: Expr
    operator: str
    right: Expr
    line: int


@dataclass(frozen=True)
class Unary:
    operator: str
    right: Expr
    line: int


@dataclass(frozen=True)
class Call:
    callee: Expr
    arguments: tuple[Expr, ...]
    line: int


@dataclass(frozen=True)
class Member:
    target: Expr
    name: str
    line: int


@dataclass(frozen=True)
class Grouping:
    expression: Expr
    line: int


@dataclass(frozen=True)
class ListLiteral:
    elements: tuple[Expr, ...]
    line: int


@dataclass(frozen=True)
class Index:
    target: Expr
    index: Expr
    line: int


@dataclass(frozen=True)
class Slice:
    target: Expr
    start: Expr | None
    end: Expr | None
    line: int


Expr = Union[
    Literal, Variable, Assign, Increment, Logical, Binary, Unary, Call,
    Member, Grouping, ListLiteral, Index, Slice,
]


# --- Statements ---

@dataclass(frozen=True)
class ExpressionStmt:
    expression: Expr
    line: int


@dataclass(frozen=True)
class VarDecl:
    name: str
    initializer: Expr | None
    line: int


@dataclass(frozen=True)
class Block:
    statements: tuple[Stmt, ...]
    line: int


@dataclass(frozen=True)
class If:
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None
    line: int


@dataclass(frozen=True)
class While:
    condition: Expr
    body: Stmt
    line: int


@dataclass(frozen=True)
class Print:
    expression: Expr
    line: int


@dataclass(frozen=True)
class Return:
    value: Expr | None
    line: int


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    params: tuple[str, ...]
    body: tuple[Stmt, ...]
    line: int


Stmt = Union[ExpressionStmt, VarDecl, Block, If, While, Print, Return, FunctionDecl]
