# -----------------------------------------------------------------------------
# Shunting-yard AST builder
# Purpose:
#   Turn a token list into an abstract syntax tree honoring operator
#   precedence, associativity and function arity.
# Approach:
#   - Operators, functions and open parentheses wait on an operator stack.
#   - The output stack holds finished subtrees (not a flat RPN list), so a
#     reduction always builds a complete node from existing children.
#   - Each open parenthesis tracks how many comma-separated arguments it has
#     seen, which is how max/min receive a variable number of arguments.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List

from .tokenizer import ParseError
from .types import (
    AstNode,
    Associativity,
    BinaryOp,
    FunctionCall,
    NumberLiteral,
    Operator,
    Token,
    TokenKind,
    UnaryOp,
    VariableRef,
    format_tree,
)

log = logging.getLogger(__name__)


@dataclass
class _Group:
    # Bookkeeping for one open parenthesis on the operator stack
    output_mark: int   # output size when the '(' was pushed
    args: int = 1      # comma-separated slots seen so far


def build_ast(tokens: List[Token]) -> AstNode:
    """
    Assemble `tokens` into a single AST.
    Raises ParseError on mismatched parentheses, missing operands,
    wrong function arity or leftover operands (e.g. "10 45").
    """
    if not tokens:
        raise ParseError("Expression is empty")

    output: List[AstNode] = []
    stack: List[Token] = []
    groups: List[_Group] = []

    for token in tokens:
        kind = token.kind
        if kind is TokenKind.NUMBER:
            output.append(NumberLiteral(token.value))
        elif kind in (TokenKind.VARIABLE, TokenKind.UNIT):
            output.append(VariableRef(token.value))
        elif kind is TokenKind.FUNCTION:
            stack.append(token)
        elif kind is TokenKind.OPERATOR:
            o1: Operator = token.value
            while stack and stack[-1].kind is TokenKind.OPERATOR:
                o2: Operator = stack[-1].value
                if o2.precedence > o1.precedence or (
                    o2.precedence == o1.precedence and o1.associativity is Associativity.LEFT
                ):
                    _reduce_operator(stack.pop().value, output)
                else:
                    break
            stack.append(token)
        elif kind is TokenKind.COMMA:
            while stack and stack[-1].kind is not TokenKind.LEFT_PAREN:
                _reduce(stack.pop(), output)
            if not stack:
                raise ParseError("Unexpected ',' outside of function arguments", ",")
            groups[-1].args += 1
        elif kind is TokenKind.LEFT_PAREN:
            stack.append(token)
            groups.append(_Group(output_mark=len(output)))
        elif kind is TokenKind.RIGHT_PAREN:
            while stack and stack[-1].kind is not TokenKind.LEFT_PAREN:
                _reduce(stack.pop(), output)
            if not stack:
                raise ParseError("Mismatched parentheses", ")")
            stack.pop()
            group = groups.pop()
            if stack and stack[-1].kind is TokenKind.FUNCTION:
                _reduce_function(stack.pop(), group, output)
            elif group.args > 1:
                raise ParseError("Unexpected ',' outside of function arguments", ",")
            elif len(output) == group.output_mark:
                raise ParseError("Empty parentheses", "()")

    while stack:
        token = stack.pop()
        if token.kind in (TokenKind.LEFT_PAREN, TokenKind.RIGHT_PAREN):
            raise ParseError("Mismatched parentheses", token.kind.value)
        _reduce(token, output)

    if len(output) != 1:
        log.error("Output stack contains %d items, expected exactly 1", len(output))
        raise ParseError(f"Malformed expression: {len(output)} values without operators between them")

    root = output[0]
    if log.isEnabledFor(logging.DEBUG):
        log.debug("Built abstract syntax tree\n%s", format_tree(root))
    return root


def _reduce(token: Token, output: List[AstNode]) -> None:
    if token.kind is TokenKind.OPERATOR:
        _reduce_operator(token.value, output)
    elif token.kind is TokenKind.FUNCTION:
        raise ParseError("Function must be followed by parenthesized arguments", token.value.value)
    else:
        raise ParseError("Unexpected token", repr(token))


def _reduce_operator(op: Operator, output: List[AstNode]) -> None:
    if op is Operator.CONVERT:
        raise ParseError("Conversions must be written as '<value><unit> -> <unit>'", str(op))
    if op.is_unary:
        if not output:
            raise ParseError("Missing operand for negation", str(op))
        output.append(UnaryOp(op, output.pop()))
        return
    if len(output) < 2:
        raise ParseError("Missing operand for operator", str(op))
    right = output.pop()
    left = output.pop()
    output.append(BinaryOp(op, left, right))


def _reduce_function(token: Token, group: _Group, output: List[AstNode]) -> None:
    func = token.value
    produced = len(output) - group.output_mark
    count = group.args if produced else 0
    if produced != count:
        raise ParseError("Malformed argument list", func.value)
    if count == 0:
        raise ParseError("Function requires at least one argument", func.value)
    if not func.variadic and count != 1:
        raise ParseError(f"Function takes exactly one argument, got {count}", func.value)

    args = tuple(output[-count:])
    del output[-count:]
    output.append(FunctionCall(func, args))
