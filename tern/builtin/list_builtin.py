"""Built-in list runtime for Tern.

Lists are plain Python lists shared by reference, so every method here
mutates the receiver in place and all aliases observe the change. Methods
are exposed to programs through `bind_method`, which wraps one of the
functions below in a NativeFunction closed over the receiver.
"""
from __future__ import annotations

from typing import Callable

from tern import TernValue
from tern.errors import EmptyListError, IndexOutOfRange, TypeMismatch
from tern.evaluation.operators import is_equal, is_number, type_name
from tern.types.function import NativeFunction
from tern.types.null import Null


def _position(value: TernValue, what: str) -> int:
    """Coerce an integer-valued Number to int; other Numbers are out of range."""
    if not is_number(value):
        raise TypeMismatch(f"{what} must be a number, got {type_name(value)}")
    if not value.is_integer():
        raise IndexOutOfRange(f"{what} must be a whole number, got {value!r}")
    return int(value)


# -------------------------------
# Indexing and slicing
# -------------------------------
def index_get(items: TernValue, index: TernValue) -> TernValue:
    """items[index] for 0 <= index < len(items)."""
    if not isinstance(items, list):
        raise TypeMismatch(f"Only lists can be indexed, got {type_name(items)}")
    i = _position(index, "List index")
    if not 0 <= i < len(items):
        raise IndexOutOfRange(f"List index {i} out of range for length {len(items)}")
    return items[i]


def _slice_bound(value: TernValue, what: str) -> int:
    if not is_number(value) or not value.is_integer():
        raise TypeMismatch(f"Slice {what} must be a whole number, got {type_name(value)}")
    return int(value)


def slice_get(items: TernValue, start: TernValue | None, end: TernValue | None) -> list:
    """items[start:end] with BOTH ends inclusive.

    start defaults to 0 and end to len-1; both are clamped into [0, len-1].
    The result is a new list, empty when start > end after clamping.
    """
    if not isinstance(items, list):
        raise TypeMismatch(f"Only lists can be sliced, got {type_name(items)}")
    last = len(items) - 1
    lo = 0 if start is None else _slice_bound(start, "start")
    hi = last if end is None else _slice_bound(end, "end")
    lo = max(lo, 0)
    hi = min(hi, last)
    if lo > hi:
        return []
    return items[lo:hi + 1]


# -------------------------------
# Methods
# -------------------------------
def push(items: list, args: list[TernValue]) -> TernValue:
    """Append a value to the end."""
    items.append(args[0])
    return Null


def pop(items: list, args: list[TernValue]) -> TernValue:
    """Remove the last element and return it."""
    if not items:
        raise EmptyListError("Cannot pop from an empty list")
    return items.pop()


def insert_at(items: list, args: list[TernValue]) -> TernValue:
    """Insert a value before position i, for i in [0, len]."""
    i = _position(args[0], "insertAt position")
    if not 0 <= i <= len(items):
        raise IndexOutOfRange(f"insertAt position {i} out of range for length {len(items)}")
    items.insert(i, args[1])
    return Null


def remove(items: list, args: list[TernValue]) -> TernValue:
    """Remove the element at position i, for i in [0, len-1]."""
    i = _position(args[0], "remove position")
    if not 0 <= i < len(items):
        raise IndexOutOfRange(f"remove position {i} out of range for length {len(items)}")
    del items[i]
    return Null


def index_of(items: list, args: list[TernValue]) -> float:
    """Position of the first element structurally equal to the argument, or -1."""
    target = args[0]
    for i, item in enumerate(items):
        if is_equal(item, target):
            return float(i)
    return -1.0


def length(items: list, args: list[TernValue]) -> float:
    return float(len(items))


def sort(items: list, args: list[TernValue]) -> list:
    """Stable ascending sort in place; returns the same list.

    Elements must be all Numbers or all Strings.
    """
    if len(items) > 1:
        kinds = {type_name(item) for item in items}
        if len(kinds) > 1 or kinds.pop() not in ("Number", "String"):
            raise TypeMismatch(
                "sort() needs a list of only numbers or only strings, got "
                + ", ".join(sorted({type_name(item) for item in items}))
            )
        items.sort()
    return items


ListMethod = Callable[[list, list[TernValue]], TernValue]

LIST_METHODS: dict[str, tuple[int, ListMethod]] = {
    "push": (1, push),
    "pop": (0, pop),
    "insertAt": (2, insert_at),
    "remove": (1, remove),
    "index": (1, index_of),
    "len": (0, length),
    "sort": (0, sort),
}


def bind_method(items: TernValue, name: str) -> NativeFunction:
    """Resolve `items.name` to a native bound to this list."""
    if not isinstance(items, list):
        raise TypeMismatch(f"{type_name(items)} has no method '{name}'")
    entry = LIST_METHODS.get(name)
    if entry is None:
        raise TypeMismatch(f"List has no method '{name}'")
    arity, method = entry
    return NativeFunction(name, arity, lambda args: method(items, args))
