"""Rendering of runtime values for `print`."""

import math
from decimal import Decimal

from tern import TernValue
from tern.types.null import NullType


def format_number(n: float) -> str:
    """Render positionally without an unnecessary fractional part.

    3.0 -> "3", 2.5 -> "2.5", 1e-05 -> "0.00001". Never uses exponent
    notation, so the output of any finite number lexes back to the same value.
    """
    if not math.isfinite(n):
        return repr(n)
    if n.is_integer():
        return str(int(n))
    # repr gives the shortest digits that round-trip; Decimal lays them out positionally
    text = format(Decimal(repr(n)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def stringify(value: TernValue, _active: set[int] | None = None) -> str:
    """Convert a value to its printable form. Strings inside lists stay unquoted.

    A list that contains itself renders the inner occurrence as `[...]`.
    """
    if isinstance(value, NullType):
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, list):
        if _active is None:
            _active = set()
        if id(value) in _active:
            return "[...]"
        _active.add(id(value))
        try:
            parts = []
            for item in value:
                parts.append(stringify(item, _active))
            return "[" + ", ".join(parts) + "]"
        finally:
            _active.discard(id(value))
    return str(value)
