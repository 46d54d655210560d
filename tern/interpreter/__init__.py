from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Union

from tern import OutputFn
from tern.builtin.env_builtin import register
from tern.config import get_max_call_depth
from tern.errors import Diagnostic, LexError, TernRuntimeError
from tern.evaluation.evaluator import Evaluator
from tern.reader.lexer import Token, lex
from tern.reader.nodes import Stmt
from tern.reader.parser import parse
from tern.types.environment import Environment

logger = logging.getLogger(__name__)

DiagnosticSink = Callable[[Diagnostic], None]

# Host stack frames budgeted per nested Tern call
_FRAMES_PER_CALL = 40


@dataclass(frozen=True)
class Completed:
    ok = True


@dataclass(frozen=True)
class Failed:
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)
    ok = False


ExecutionResult = Union[Completed, Failed]


def _stdout_line(line: str) -> None:
    sys.stdout.write(line + "\n")


@contextmanager
def _recursion_headroom(max_call_depth: int) -> Iterator[None]:
    """Raise the host recursion limit for the duration of one run."""
    previous = sys.getrecursionlimit()
    wanted = max_call_depth * _FRAMES_PER_CALL + 1000
    if wanted > previous:
        sys.setrecursionlimit(wanted)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Interpreter:
    """
    Orchestrates lexing, parsing and evaluating Tern programs.
    Every call to run() starts from a fresh global Environment with the
    builtins registered; `env` keeps the globals of the latest run.
    """

    def __init__(
        self,
        output: Optional[OutputFn] = None,
        on_diagnostic: Optional[DiagnosticSink] = None,
        *,
        max_call_depth: Optional[int] = None,
    ):
        self.output: OutputFn = output if output is not None else _stdout_line
        self.on_diagnostic = on_diagnostic
        self.max_call_depth = max_call_depth if max_call_depth is not None else get_max_call_depth()
        self.env: Environment = self._fresh_globals()

    @staticmethod
    def _fresh_globals() -> Environment:
        env = Environment()
        register(env)
        return env

    def _report(self, diagnostics: list[Diagnostic]) -> Failed:
        if self.on_diagnostic is not None:
            for diag in diagnostics:
                self.on_diagnostic(diag)
        return Failed(tuple(diagnostics))

    def analyze(self, source: str) -> tuple[list[Stmt], list[Diagnostic]]:
        """Lex and parse `source`, collecting every front-end diagnostic."""
        try:
            tokens: list[Token] = list(lex(source))
        except LexError as err:
            logger.debug("lexing failed: %s", err)
            return [], [err.to_diagnostic()]
        logger.debug("lexed %d tokens", len(tokens))
        with _recursion_headroom(self.max_call_depth):
            statements, errors = parse(tokens)
        return statements, [err.to_diagnostic() for err in errors]

    def run(self, source: str) -> ExecutionResult:
        statements, diagnostics = self.analyze(source)
        if diagnostics:
            return self._report(diagnostics)

        # Globals never leak from one run into the next
        self.env = self._fresh_globals()
        evaluator = Evaluator(self.env, self.output, self.max_call_depth)
        try:
            with _recursion_headroom(self.max_call_depth):
                evaluator.execute_program(statements)
        except TernRuntimeError as err:
            logger.debug("runtime error: %s", err)
            return self._report([err.to_diagnostic()])
        return Completed()


def run(
    source: str,
    *,
    output: Optional[OutputFn] = None,
    on_diagnostic: Optional[DiagnosticSink] = None,
    max_call_depth: Optional[int] = None,
) -> ExecutionResult:
    """Execute a Tern program in a fresh interpreter."""
    return Interpreter(output, on_diagnostic, max_call_depth=max_call_depth).run(source)


def check(source: str) -> list[Diagnostic]:
    """Lex and parse only; returns lex/parse diagnostics without executing."""
    _, diagnostics = Interpreter(output=lambda _line: None).analyze(source)
    return diagnostics
