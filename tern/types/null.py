from __future__ import annotations


class NullType:
    """The single `null` value. Falsy, and equal only to itself."""
    __slots__ = ()

    def __repr__(self): return "null"
    def __bool__(self): return False

    def __eq__(self, other):
        return isinstance(other, NullType)

    def __hash__(self):
        return hash(None)


Null = NullType()
