"""Operator semantics over Tern values.

Every operator inspects the Python type of its operands and raises
TypeMismatch for combinations it does not define; nothing is coerced.
"""
from __future__ import annotations

from tern import TernValue
from tern.errors import DivisionByZero, TypeMismatch
from tern.types.function import Function, NativeFunction
from tern.types.null import NullType


def type_name(value: TernValue) -> str:
    """Language-level name of a value's kind, used in error messages."""
    match value:
        case bool():
            return "Bool"
        case float():
            return "Number"
        case str():
            return "String"
        case list():
            return "List"
        case NullType():
            return "Null"
        case Function():
            return "Function"
        case NativeFunction():
            return "NativeFunction"
        case _:
            return type(value).__name__


def is_number(value: TernValue) -> bool:
    # bool is a subclass of int, never of float, but be explicit
    return isinstance(value, float) and not isinstance(value, bool)


def is_truthy(value: TernValue) -> bool:
    """Only `false` and `null` are falsy."""
    if isinstance(value, NullType):
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: TernValue, b: TernValue, _seen: set[tuple[int, int]] | None = None) -> bool:
    """Structural equality; lists compare element-wise, functions by identity.

    A pair of lists already under comparison counts as equal, so
    self-containing lists terminate.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, list):
        if len(a) != len(b):
            return False
        key = (id(a), id(b))
        if _seen is None:
            _seen = set()
        elif key in _seen:
            return True
        _seen.add(key)
        for x, y in zip(a, b):
            if not is_equal(x, y, _seen):
                return False
        return True
    if isinstance(a, (Function, NativeFunction)):
        return False
    return a == b


def _numbers(op: str, left: TernValue, right: TernValue) -> tuple[float, float]:
    if not (is_number(left) and is_number(right)):
        raise TypeMismatch(
            f"Operands of '{op}' must be numbers, got {type_name(left)} and {type_name(right)}"
        )
    return left, right


def add(left: TernValue, right: TernValue) -> TernValue:
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    if is_number(left) and is_number(right):
        return left + right
    raise TypeMismatch(
        f"Operands of '+' must be two numbers or two strings, got {type_name(left)} and {type_name(right)}"
    )


def sub(left: TernValue, right: TernValue) -> float:
    a, b = _numbers("-", left, right)
    return a - b


def mul(left: TernValue, right: TernValue) -> float:
    a, b = _numbers("*", left, right)
    return a * b


def div(left: TernValue, right: TernValue) -> float:
    a, b = _numbers("/", left, right)
    if b == 0:
        raise DivisionByZero("Division by zero")
    return a / b


def lt(left: TernValue, right: TernValue) -> bool:
    a, b = _numbers("<", left, right)
    return a < b


def lte(left: TernValue, right: TernValue) -> bool:
    a, b = _numbers("<=", left, right)
    return a <= b


def gt(left: TernValue, right: TernValue) -> bool:
    a, b = _numbers(">", left, right)
    return a > b


def gte(left: TernValue, right: TernValue) -> bool:
    a, b = _numbers(">=", left, right)
    return a >= b


def negate(operand: TernValue) -> float:
    if not is_number(operand):
        raise TypeMismatch(f"Operand of unary '-' must be a number, got {type_name(operand)}")
    return -operand


BINARY_OPERATORS = {
    "+": add,
    "-": sub,
    "*": mul,
    "/": div,
    "<": lt,
    "<=": lte,
    ">": gt,
    ">=": gte,
    "==": is_equal,
    "!=": lambda a, b: not is_equal(a, b),
}
