# -----------------------------------------------------------------------------
# Formula inversion
# Purpose:
#   Derive the reverse of a formula edge symbolically. Given the formula for
#   A → B written in terms of A (e.g. "{R} - 459.67"), solve b = f(a) for a
#   and return the result as one of our ASTs in terms of B ("{F} + 459.67").
# Approach:
#   AST → sympy expression → sympy.solve → sympy expression → AST.
#   No string round trip, so nothing depends on sympy's printer.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from typing import Callable, Dict, Optional

import sympy
from sympy import Eq, Symbol, solve

from .expression import Expression
from .types import (
    AstNode,
    BinaryOp,
    Function,
    FunctionCall,
    NumberLiteral,
    Operator,
    UnaryOp,
    VariableRef,
)

log = logging.getLogger(__name__)


class _Unsupported(Exception):
    pass


_TO_SYMPY_FUNCS: Dict[Function, Callable] = {
    Function.SIN: sympy.sin,
    Function.COS: sympy.cos,
    Function.TAN: sympy.tan,
    Function.MAX: sympy.Max,
    Function.MIN: sympy.Min,
}

_FROM_SYMPY_FUNCS = {
    sympy.sin: Function.SIN,
    sympy.cos: Function.COS,
    sympy.tan: Function.TAN,
    sympy.Max: Function.MAX,
    sympy.Min: Function.MIN,
}


def _number_to_sympy(value: float):
    if not math.isfinite(value):
        raise _Unsupported(f"non-finite literal {value!r}")
    if value.is_integer():
        return sympy.Integer(int(value))
    # Exact decimal so 273.15 stays 5463/20 through the algebra
    return sympy.Rational(repr(value))


def to_sympy(node: AstNode):
    """Translate one of our ASTs into an equivalent sympy expression."""
    if isinstance(node, NumberLiteral):
        return _number_to_sympy(node.value)
    if isinstance(node, VariableRef):
        return Symbol(node.name)
    if isinstance(node, UnaryOp):
        return -to_sympy(node.operand)
    if isinstance(node, FunctionCall):
        return _TO_SYMPY_FUNCS[node.function](*[to_sympy(a) for a in node.args])
    if isinstance(node, BinaryOp):
        left, right = to_sympy(node.left), to_sympy(node.right)
        if node.operator is Operator.ADD:
            return left + right
        if node.operator is Operator.SUB:
            return left - right
        if node.operator is Operator.MUL:
            return left * right
        if node.operator is Operator.DIV:
            return left / right
        if node.operator is Operator.POW:
            return left ** right
        if node.operator is Operator.MOD:
            return sympy.Mod(left, right)
    raise _Unsupported(f"cannot translate {node!r}")


def from_sympy(expr) -> AstNode:
    """Translate a (real-valued) sympy expression back into our AST."""
    if expr.is_Symbol:
        return VariableRef(expr.name)
    if expr.is_number:
        try:
            return NumberLiteral(float(expr))
        except TypeError:
            raise _Unsupported(f"non-real constant {expr}") from None
    if expr.is_Add or expr.is_Mul:
        op = Operator.ADD if expr.is_Add else Operator.MUL
        args = [from_sympy(a) for a in expr.args]
        node = args[0]
        for arg in args[1:]:
            node = BinaryOp(op, node, arg)
        return node
    if expr.is_Pow:
        base, exp = expr.args
        if exp == -1:
            return BinaryOp(Operator.DIV, NumberLiteral(1.0), from_sympy(base))
        return BinaryOp(Operator.POW, from_sympy(base), from_sympy(exp))
    if isinstance(expr, sympy.Mod):
        return BinaryOp(Operator.MOD, from_sympy(expr.args[0]), from_sympy(expr.args[1]))
    func = _FROM_SYMPY_FUNCS.get(expr.func)
    if func is not None:
        return FunctionCall(func, tuple(from_sympy(a) for a in expr.args))
    raise _Unsupported(f"no AST form for {expr}")


def _is_piecewise(node: AstNode) -> bool:
    # sympy.solve silently drops the branches of Max/Min/Mod
    if isinstance(node, FunctionCall):
        if node.function in (Function.MAX, Function.MIN):
            return True
        return any(_is_piecewise(a) for a in node.args)
    if isinstance(node, BinaryOp):
        return node.operator is Operator.MOD or _is_piecewise(node.left) or _is_piecewise(node.right)
    if isinstance(node, UnaryOp):
        return _is_piecewise(node.operand)
    return False


def invert_formula(formula: Expression, source_name: str, target_name: str) -> Optional[Expression]:
    """
    Solve `target = formula(source)` for `source`.

    Parameters
    ----------
    formula : Expression
        Formula for source → target, referencing only `source_name`.
    source_name : str
        Variable the formula is written in (the source unit's abbreviation).
    target_name : str
        Variable the inverse should be written in.

    Returns
    -------
    Optional[Expression]
        The inverse formula, or None when the formula does not have a single
        real inverse that maps back onto our grammar (a warning is logged).
    """
    if formula.variables != {source_name}:
        log.warning("Cannot invert %r: expected exactly the variable %r, found %s",
                    formula.text, source_name, sorted(formula.variables))
        return None

    if _is_piecewise(formula.ast):
        log.warning("Cannot invert %r: max/min/%% have no single inverse", formula.text)
        return None

    x = Symbol(source_name)
    y = Symbol(target_name)
    try:
        solutions = solve(Eq(y, to_sympy(formula.ast)), x, dict=True)
    except (_Unsupported, NotImplementedError) as e:
        log.warning("Cannot invert %r: %s", formula.text, e)
        return None

    if len(solutions) != 1:
        log.warning("Cannot invert %r: %d solutions for %s", formula.text, len(solutions), source_name)
        return None

    inverse = solutions[0][x]
    try:
        ast = from_sympy(inverse)
    except _Unsupported as e:
        log.warning("Cannot invert %r: %s", formula.text, e)
        return None

    result = Expression.from_ast(ast)
    log.info("Inverted formula %r into %r", formula.text, result.text)
    return result
