"""Application engine for Tern.

This module centralizes call semantics for the evaluator:
- Dispatch between user Functions and NativeFunctions.
- Arity checks for both kinds of callable.
- A fresh frame parented on the callee's captured Environment, which is what
  gives closures their persistent state and lets recursion find the
  function's own name.
- Call-depth accounting, so runaway recursion fails with StackOverflow
  instead of exhausting the host stack.
- Consuming the ReturnSignal produced by `return`; this is the only place a
  return completion turns back into an ordinary value.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from tern import TernValue
from tern.errors import ArityMismatch, StackOverflow, TypeMismatch
from tern.evaluation.operators import type_name
from tern.types.function import Function, NativeFunction
from tern.types.null import Null

if TYPE_CHECKING:
    from tern.evaluation.evaluator import Evaluator


def _check_arity(name: str, expected: int, args: list[TernValue]) -> None:
    if len(args) != expected:
        raise ArityMismatch(
            f"{name}() expects {expected} argument{'s' if expected != 1 else ''} but got {len(args)}"
        )


def apply_function(evaluator: Evaluator, fn: Function, args: list[TernValue]) -> TernValue:
    """Run a user function's body in a new frame over its closure env.

    Yields the value carried by a `return`, or Null when the body finishes
    without one.
    """
    _check_arity(fn.name, fn.arity, args)
    if evaluator.call_depth >= evaluator.max_call_depth:
        raise StackOverflow(
            f"Maximum call depth of {evaluator.max_call_depth} exceeded in {fn.name}()"
        )

    frame = fn.extend_env(args)
    evaluator.call_depth += 1
    try:
        completion = evaluator.execute_block(fn.body, frame)
    except RecursionError:
        raise StackOverflow(f"Host recursion limit reached in {fn.name}()") from None
    finally:
        evaluator.call_depth -= 1

    if completion is None:
        return Null
    return completion.value


def apply(evaluator: Evaluator, callee: TernValue, args: list[TernValue]) -> TernValue:
    """Apply either a Function or a NativeFunction.

    - For Function, defer to apply_function.
    - For NativeFunction, check its declared arity and invoke it with the args.
    - Otherwise, raise a type error.
    """
    if isinstance(callee, Function):
        return apply_function(evaluator, callee, args)
    if isinstance(callee, NativeFunction):
        _check_arity(callee.name, callee.arity, args)
        return callee(args)
    raise TypeMismatch(f"Can only call functions, got {type_name(callee)}")
