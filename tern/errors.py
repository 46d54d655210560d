from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Phase(Enum):
    LEX = "lex"
    PARSE = "parse"
    RUNTIME = "runtime"


@dataclass(frozen=True)
class Diagnostic:
    """Structured error record handed to the diagnostic sink."""
    phase: Phase
    line: int | None
    message: str
    kind: str

    def __str__(self) -> str:
        where = f"[line {self.line}] " if self.line is not None else ""
        return f"{where}{self.kind}: {self.message}"


class TernError(Exception):
    """ Base class for all Tern errors"""
    phase: Phase = Phase.RUNTIME

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(phase=self.phase, line=self.line, message=self.message, kind=self.kind)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"[line {self.line}] {self.message}"


class LexError(TernError):
    """ Raised on an unterminated string or an unrecognized character"""
    phase = Phase.LEX


class ParseError(TernError):
    """ Raised when the parser meets a token it did not expect"""
    phase = Phase.PARSE

    def __init__(self, line: int, expected: str, found: str, message: str | None = None):
        super().__init__(message or f"Expected {expected} but found {found}", line)
        self.expected = expected
        self.found = found


class TernRuntimeError(TernError):
    """ Base class for errors raised while executing a program"""
    phase = Phase.RUNTIME


class UndefinedVariable(TernRuntimeError):
    """ Raised when a name is read or assigned before it is declared"""

    def __init__(self, name: str, line: int | None = None):
        super().__init__(f"Undefined variable '{name}'", line)
        self.name = name


class ArityMismatch(TernRuntimeError):
    """ Raised when the number of arguments passed to a function is incorrect"""


class TypeMismatch(TernRuntimeError):
    """ Raised when an operation receives values of unsupported types"""


class IndexOutOfRange(TernRuntimeError):
    """ Raised when a list position falls outside the list"""


class EmptyListError(TernRuntimeError):
    """ Raised when popping from an empty list"""


class DivisionByZero(TernRuntimeError):
    """ Raised when dividing by zero"""


class IllegalReturn(TernRuntimeError):
    """ Raised when `return` executes outside of any function call"""


class StackOverflow(TernRuntimeError):
    """ Raised when function calls nest deeper than the configured limit"""
