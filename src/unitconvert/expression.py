# -----------------------------------------------------------------------------
# Expression facade
# Purpose:
#   Parse an expression once (tokenize → build AST) and evaluate it any number
#   of times against different variable bindings.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import FrozenSet, Mapping, Optional

from .evaluator import evaluate as evaluate_ast
from .shunting_yard import build_ast
from .tokenizer import tokenize
from .types import AstNode, BinaryOp, FunctionCall, UnaryOp, VariableRef, render

log = logging.getLogger(__name__)


class ExpressionContext(dict):
    """
    Variable bindings used during evaluation (name → float).
    Built up front with `var`, then only read by the evaluator.
    """

    def var(self, name: str, value: float) -> "ExpressionContext":
        self[name] = float(value)
        return self


class Expression:
    def __init__(self, text: str):
        # Raises ParseError straight away; an Expression always holds a valid AST
        self.text = text
        self.ast: AstNode = build_ast(tokenize(text))
        self.variables: FrozenSet[str] = frozenset(_collect_variables(self.ast))

    @classmethod
    def from_ast(cls, ast: AstNode, text: Optional[str] = None) -> "Expression":
        # For trees built programmatically (e.g. inverted formulas)
        expr = cls.__new__(cls)
        expr.text = text if text is not None else render(ast)
        expr.ast = ast
        expr.variables = frozenset(_collect_variables(ast))
        return expr

    def eval(self, ctx: Optional[Mapping[str, float]] = None) -> float:
        return evaluate_ast(self.ast, ctx if ctx is not None else ExpressionContext())

    def __repr__(self) -> str:
        return f"Expression({self.text!r})"


def evaluate(text: str, ctx: Optional[Mapping[str, float]] = None) -> float:
    """Parse and evaluate `text` in one call, e.g. evaluate("3 + 4 * 2") → 11.0."""
    log.info("Evaluating expression %r", text)
    return Expression(text).eval(ctx)


def _collect_variables(node: AstNode):
    if isinstance(node, VariableRef):
        yield node.name
    elif isinstance(node, BinaryOp):
        yield from _collect_variables(node.left)
        yield from _collect_variables(node.right)
    elif isinstance(node, UnaryOp):
        yield from _collect_variables(node.operand)
    elif isinstance(node, FunctionCall):
        for arg in node.args:
            yield from _collect_variables(arg)
