"""Callable values: user functions (closures) and natives."""

from __future__ import annotations

from typing import Callable

from tern import TernValue
from tern.reader.nodes import Stmt
from tern.types.environment import Environment


class Function:
    """A user-defined function with parameters, body, and closure env."""

    __slots__ = ("name", "params", "body", "env")

    def __init__(
        self, name: str, params: tuple[str, ...], body: tuple[Stmt, ...], env: Environment
    ):
        self.name = name
        self.params = params
        self.body = body
        # The environment active at `def`; calls extend this, never the caller's
        self.env = env

    @property
    def arity(self) -> int:
        return len(self.params)

    def extend_env(self, args: list[TernValue]) -> Environment:
        """Bind argument values to parameters in a fresh frame over the closure."""
        frame = Environment(outer=self.env)
        for name, value in zip(self.params, args):
            frame.define(name, value)
        return frame

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"<fn {self.name}({', '.join(self.params)})>"


class NativeFunction:
    """A host-implemented callable with a fixed arity.

    `fn` receives the already-evaluated argument list.
    """

    __slots__ = ("name", "arity", "fn")

    def __init__(self, name: str, arity: int, fn: Callable[[list[TernValue]], TernValue]):
        self.name = name
        self.arity = arity
        self.fn = fn

    def __call__(self, args: list[TernValue]) -> TernValue:
        return self.fn(args)

    def __str__(self) -> str:
        return f"<native fn {self.name}>"

    __repr__ = __str__
