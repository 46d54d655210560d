from tern import TernValue


class ReturnSignal:
    """Completion record of a `return` statement.

    Statement execution yields None for normal completion or a ReturnSignal,
    which block/if/while pass upward untouched until a call consumes it.
    """
    __slots__ = ("value", "line")

    def __init__(self, value: TernValue, line: int):
        self.value = value
        self.line = line
