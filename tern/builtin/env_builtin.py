"""Global built-in functions for the Tern runtime environment."""
from __future__ import annotations

import hashlib

from tern import TernValue
from tern.errors import TypeMismatch
from tern.evaluation.operators import type_name
from tern.types.environment import Environment
from tern.types.function import NativeFunction


def hash_builtin(args: list[TernValue]) -> str:
    """SHA-256 of the UTF-8 encoding of a string, as 64 lowercase hex digits."""
    text = args[0]
    if not isinstance(text, str):
        raise TypeMismatch(f"hash() expects a string, got {type_name(text)}")
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


BUILTINS: dict[str, NativeFunction] = {
    "hash": NativeFunction("hash", 1, hash_builtin),
}


def register(env: Environment) -> None:
    """Register all builtin functions into the given environment."""
    env.update(dict(BUILTINS))
