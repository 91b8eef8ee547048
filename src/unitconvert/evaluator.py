# -----------------------------------------------------------------------------
# AST evaluator
# Purpose:
#   Walk an AST post-order and compute its numeric value against a mapping of
#   variable bindings.
# Semantics:
#   - IEEE float behaviour: x/0 → ±inf, 0/0 → nan, overflow → ±inf.
#     Python raises for these, so the arithmetic helpers below translate.
#   - '%' follows fmod (result takes the sign of the dividend).
#   - Trigonometric functions work in radians.
#   - A variable missing from the context is a caller bug and fails fast.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from typing import Callable, Dict, Mapping

from .types import AstNode, BinaryOp, Function, FunctionCall, NumberLiteral, Operator, UnaryOp, VariableRef

log = logging.getLogger(__name__)


class UnresolvedVariableError(KeyError):
    """An AST referenced a variable the evaluation context does not bind."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Variable '{self.name}' is not bound in the evaluation context"


def _div(left: float, right: float) -> float:
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        # sign follows IEEE: sign(left) * sign(right), right may be -0.0
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _mod(left: float, right: float) -> float:
    if right == 0.0 or math.isinf(left):
        return math.nan
    return math.fmod(left, right)


def _pow(left: float, right: float) -> float:
    try:
        return math.pow(left, right)
    except OverflowError:
        # Negative base with an odd integral exponent keeps its sign
        if left < 0 and right.is_integer() and int(right) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # math.pow raises for 0 ** negative (IEEE: inf) and
        # negative ** fractional (IEEE: nan)
        if left == 0.0:
            if right.is_integer() and int(right) % 2 == 1:
                return math.copysign(math.inf, left)
            return math.inf
        return math.nan


BINARY_OPS: Dict[Operator, Callable[[float, float], float]] = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUB: lambda a, b: a - b,
    Operator.MUL: lambda a, b: a * b,
    Operator.DIV: _div,
    Operator.MOD: _mod,
    Operator.POW: _pow,
}

UNARY_FUNCS: Dict[Function, Callable[[float], float]] = {
    Function.SIN: math.sin,
    Function.COS: math.cos,
    Function.TAN: math.tan,
}


def _trig(func: Callable[[float], float], value: float) -> float:
    if math.isinf(value):
        return math.nan
    return func(value)


def evaluate(node: AstNode, ctx: Mapping[str, float]) -> float:
    """
    Evaluate `node` with the variable bindings in `ctx`.

    Parameters
    ----------
    node : AstNode
        A tree produced by `build_ast`.
    ctx : Mapping[str, float]
        Variable name → value. Read only; never modified here.

    Returns
    -------
    float
        The numeric result.

    Raises
    ------
    UnresolvedVariableError
        If the tree references a name that `ctx` does not bind.
    """
    if isinstance(node, NumberLiteral):
        return node.value

    if isinstance(node, VariableRef):
        try:
            return float(ctx[node.name])
        except KeyError:
            raise UnresolvedVariableError(node.name) from None

    if isinstance(node, BinaryOp):
        left = evaluate(node.left, ctx)
        right = evaluate(node.right, ctx)
        result = BINARY_OPS[node.operator](left, right)
        log.debug("Operation: %r %s %r = %r", left, node.operator, right, result)
        return result

    if isinstance(node, UnaryOp):
        return -evaluate(node.operand, ctx)

    if isinstance(node, FunctionCall):
        values = [evaluate(arg, ctx) for arg in node.args]
        if node.function is Function.MAX:
            result = _fold(values, lambda candidate, best: candidate > best)
        elif node.function is Function.MIN:
            result = _fold(values, lambda candidate, best: candidate < best)
        else:
            result = _trig(UNARY_FUNCS[node.function], values[0])
        log.debug("Applying function %s%r = %r", node.function.value, tuple(values), result)
        return result

    raise TypeError(f"Not an AST node: {node!r}")


def _fold(values, better: Callable[[float, float], bool]) -> float:
    # The builder guarantees at least one argument
    result = values[0]
    for value in values[1:]:
        if better(value, result):
            result = value
    return result
