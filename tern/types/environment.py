"""Runtime environment for Tern.

The Environment stores bindings of names to evaluated values and supports
nested scopes via an `outer` link. A closure keeps its defining Environment
alive simply by holding a reference to it.
"""

from __future__ import annotations

from io import StringIO
from typing import Optional

from tern import TernValue
from tern.errors import UndefinedVariable


class Environment:
    """Hierarchical mapping from names to Tern values."""

    __slots__ = ("vars", "outer")

    def __init__(self, outer: Optional[Environment] = None):
        self.vars: dict[str, TernValue] = {}
        self.outer: Environment | None = outer

    def define(self, name: str, value: TernValue) -> None:
        """Bind `name` in this frame, replacing any existing binding here."""
        self.vars[name] = value

    def find(self, name: str) -> Optional[Environment]:
        """Find the nearest environment in the chain that contains `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.vars:
                return env
            env = env.outer
        return None

    def set(self, name: str, value: TernValue) -> None:
        """Update the nearest existing binding for `name`.

        Raises UndefinedVariable if no frame in the chain binds it.
        """
        env = self.find(name)
        if env is None:
            raise UndefinedVariable(name)
        env.vars[name] = value

    def lookup(self, name: str) -> TernValue:
        """Look up the value bound to `name`, walking outward.

        Raises UndefinedVariable if not found.
        """
        env = self.find(name)
        if env is None:
            raise UndefinedVariable(name)
        return env.vars[name]

    def update(self, mapping: dict[str, TernValue]) -> None:
        """Bulk-define a mapping of name -> value in the current frame."""
        self.vars.update(mapping)

    def depth(self) -> int:
        """Number of frames above this one."""
        n = 0
        env = self.outer
        while env is not None:
            n += 1
            env = env.outer
        return n

    def _write_vars(self, buffer: StringIO) -> None:
        buffer.write("{")
        buffer.write(", ".join(f"{k}: {v!r}" for k, v in self.vars.items()))
        buffer.write("}")

    def __str__(self) -> str:
        with StringIO() as buffer:
            self._write_vars(buffer)
            if self.outer is not None:
                buffer.write(" -> ...")  # indicate parent exists
            return buffer.getvalue()

    def __repr__(self) -> str:
        """Detailed chain representation for debugging purposes."""
        with StringIO() as buffer:
            buffer.write("<Environment chain: ")
            env: Optional[Environment] = self
            chain = []
            while env is not None:
                with StringIO() as env_buf:
                    env._write_vars(env_buf)
                    chain.append(env_buf.getvalue())
                env = env.outer
            buffer.write(" -> ".join(chain))
            buffer.write(">")
            return buffer.getvalue()
