"""Tree-walking evaluator for Tern.

Statements and expressions are dispatched with structural pattern matching
on the node type. Environments are passed explicitly; the evaluator itself
only holds per-run state (output sink and call depth).

Statement execution returns a completion: None for normal completion, or a
ReturnSignal that travels upward through blocks and loops until the call
that owns it (see apply.apply_function) turns it back into a value.
Runtime errors, unlike returns, are exceptions.
"""

from __future__ import annotations

from typing import Optional, Sequence

from tern import OutputFn, TernValue
from tern.builtin.list_builtin import bind_method, index_get, slice_get
from tern.errors import IllegalReturn, StackOverflow, TernRuntimeError, TypeMismatch
from tern.evaluation.apply import apply
from tern.evaluation.operators import BINARY_OPERATORS, is_number, is_truthy, negate, type_name
from tern.printer import stringify
from tern.reader.nodes import (
    Assign, Binary, Block, Call, Expr, ExpressionStmt, FunctionDecl, Grouping,
    If, Increment, Index, ListLiteral, Literal, Logical, Member, Print, Return,
    Slice, Stmt, Unary, VarDecl, Variable, While,
)
from tern.types.completion import ReturnSignal
from tern.types.environment import Environment
from tern.types.function import Function
from tern.types.null import Null

Completion = Optional[ReturnSignal]


class Evaluator:
    def __init__(self, globals_env: Environment, output: OutputFn, max_call_depth: int):
        self.globals = globals_env
        self.output = output
        self.max_call_depth = max_call_depth
        self.call_depth = 0

    def execute_program(self, statements: Sequence[Stmt]) -> None:
        """Run top-level statements in the global environment."""
        for stmt in statements:
            try:
                completion = self.execute(stmt, self.globals)
            except RecursionError:
                # Deeply nested values or expressions outside any call
                raise StackOverflow("Host recursion limit reached", stmt.line) from None
            if completion is not None:
                raise IllegalReturn("Cannot return from top-level code", completion.line)

    def execute_block(self, statements: Sequence[Stmt], env: Environment) -> Completion:
        """Execute statements in order in `env`, stopping at the first return."""
        for stmt in statements:
            completion = self.execute(stmt, env)
            if completion is not None:
                return completion
        return None

    # ------------------------
    # Statements
    # ------------------------
    def execute(self, stmt: Stmt, env: Environment) -> Completion:
        try:
            return self._execute(stmt, env)
        except TernRuntimeError as err:
            if err.line is None:
                err.line = stmt.line
            raise

    def _execute(self, stmt: Stmt, env: Environment) -> Completion:
        match stmt:
            case ExpressionStmt(expression=expr):
                self.evaluate(expr, env)
            case Print(expression=expr):
                self.output(stringify(self.evaluate(expr, env)))
            case VarDecl(name=name, initializer=init):
                value = Null if init is None else self.evaluate(init, env)
                env.define(name, value)
            case Block(statements=statements):
                return self.execute_block(statements, Environment(outer=env))
            case If(condition=cond, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(cond, env)):
                    return self.execute(then_branch, env)
                if else_branch is not None:
                    return self.execute(else_branch, env)
            case While(condition=cond, body=body):
                while is_truthy(self.evaluate(cond, env)):
                    completion = self.execute(body, env)
                    if completion is not None:
                        return completion
            case Return(value=value, line=line):
                result = Null if value is None else self.evaluate(value, env)
                return ReturnSignal(result, line)
            case FunctionDecl(name=name, params=params, body=body):
                # Bound after creation so the body can see its own name
                env.define(name, Function(name, params, body, env))
            case _:
                raise TypeError(f"Unknown statement node {stmt!r}")
        return None

    # ------------------------
    # Expressions
    # ------------------------
    def evaluate(self, expr: Expr, env: Environment) -> TernValue:
        try:
            return self._evaluate(expr, env)
        except TernRuntimeError as err:
            # Attach the line of the innermost node that raised
            if err.line is None:
                err.line = expr.line
            raise

    def _evaluate(self, expr: Expr, env: Environment) -> TernValue:
        match expr:
            case Literal(value=value):
                return value
            case Variable(name=name):
                return env.lookup(name)
            case Grouping(expression=inner):
                return self.evaluate(inner, env)
            case Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr, env)
                env.set(name, value)
                return value
            case Increment(name=name, delta=delta):
                current = env.lookup(name)
                if not is_number(current):
                    raise TypeMismatch(f"Cannot increment {type_name(current)} '{name}'")
                updated = current + delta
                env.set(name, updated)
                return updated
            case Logical(left=left, operator=op, right=right):
                value = self.evaluate(left, env)
                if op == "or":
                    return value if is_truthy(value) else self.evaluate(right, env)
                return value if not is_truthy(value) else self.evaluate(right, env)
            case Binary(left=left, operator=op, right=right):
                a = self.evaluate(left, env)
                b = self.evaluate(right, env)
                return BINARY_OPERATORS[op](a, b)
            case Unary(operator="-", right=right):
                return negate(self.evaluate(right, env))
            case Unary(operator="!", right=right):
                return not is_truthy(self.evaluate(right, env))
            case Call(callee=callee_expr, arguments=arg_exprs):
                callee = self.evaluate(callee_expr, env)
                args = [self.evaluate(arg, env) for arg in arg_exprs]
                return apply(self, callee, args)
            case Member(target=target, name=name):
                return bind_method(self.evaluate(target, env), name)
            case ListLiteral(elements=elements):
                return [self.evaluate(element, env) for element in elements]
            case Index(target=target, index=index):
                items = self.evaluate(target, env)
                return index_get(items, self.evaluate(index, env))
            case Slice(target=target, start=start, end=end):
                items = self.evaluate(target, env)
                lo = None if start is None else self.evaluate(start, env)
                hi = None if end is None else self.evaluate(end, env)
                return slice_get(items, lo, hi)
            case _:
                raise TypeError(f"Unknown expression node {expr!r}")
