# -----------------------------------------------------------------------------
# Types module: Shared tokens, operators and AST nodes for the expression engine
# Purpose:
#   Define the structured representations passed between the tokenizer,
#   the shunting-yard builder and the evaluator.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union


class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"


class Operator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    MOD = "%"
    NEGATE = "neg"
    CONVERT = "->"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]

    @property
    def associativity(self) -> Associativity:
        return _ASSOCIATIVITY[self]

    @property
    def is_unary(self) -> bool:
        return self is Operator.NEGATE

    def __str__(self) -> str:
        return "-" if self is Operator.NEGATE else self.value


_PRECEDENCE = {
    Operator.CONVERT: 1,
    Operator.ADD: 2, Operator.SUB: 2,
    Operator.MUL: 3, Operator.DIV: 3, Operator.MOD: 3,
    Operator.POW: 4, Operator.NEGATE: 4,
}

_ASSOCIATIVITY = {
    Operator.CONVERT: Associativity.LEFT,
    Operator.ADD: Associativity.LEFT, Operator.SUB: Associativity.LEFT,
    Operator.MUL: Associativity.LEFT, Operator.DIV: Associativity.LEFT,
    Operator.MOD: Associativity.LEFT,
    Operator.POW: Associativity.RIGHT, Operator.NEGATE: Associativity.RIGHT,
}


class Function(Enum):
    MAX = "max"
    MIN = "min"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"

    @property
    def variadic(self) -> bool:
        # max/min fold over one or more arguments; trig functions are unary
        return self in (Function.MAX, Function.MIN)


class TokenKind(Enum):
    OPERATOR = "operator"
    FUNCTION = "function"
    NUMBER = "number"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COMMA = ","
    UNIT = "unit"
    VARIABLE = "variable"


@dataclass(frozen=True)
class Token:
    """
    One lexical token. `value` depends on `kind`:
      OPERATOR → Operator, FUNCTION → Function, NUMBER → float,
      UNIT / VARIABLE → identifier text (original case), punctuation → None.
    """
    kind: TokenKind
    value: Any = None

    @staticmethod
    def number(value: float) -> "Token":
        return Token(TokenKind.NUMBER, float(value))

    @staticmethod
    def operator(op: Operator) -> "Token":
        return Token(TokenKind.OPERATOR, op)

    @staticmethod
    def function(func: Function) -> "Token":
        return Token(TokenKind.FUNCTION, func)

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.kind.name})"
        return f"Token({self.kind.name}, {self.value!r})"


LEFT_PAREN = Token(TokenKind.LEFT_PAREN)
RIGHT_PAREN = Token(TokenKind.RIGHT_PAREN)
COMMA = Token(TokenKind.COMMA)


# ---------------------------- AST nodes --------------------------------------
# Every child field is required; the builder refuses to construct a node
# before all of its operands exist.

@dataclass(frozen=True)
class NumberLiteral:
    value: float


@dataclass(frozen=True)
class VariableRef:
    name: str


@dataclass(frozen=True)
class BinaryOp:
    operator: Operator
    left: "AstNode"
    right: "AstNode"


@dataclass(frozen=True)
class UnaryOp:
    operator: Operator
    operand: "AstNode"


@dataclass(frozen=True)
class FunctionCall:
    function: Function
    args: Tuple["AstNode", ...]


AstNode = Union[NumberLiteral, VariableRef, BinaryOp, UnaryOp, FunctionCall]


def render(node: AstNode) -> str:
    """Infix text for an AST, fully parenthesized (display only)."""
    if isinstance(node, NumberLiteral):
        return repr(node.value) if node.value >= 0 else f"({node.value!r})"
    if isinstance(node, VariableRef):
        return f"{{{node.name}}}"
    if isinstance(node, BinaryOp):
        return f"({render(node.left)} {node.operator} {render(node.right)})"
    if isinstance(node, UnaryOp):
        return f"-{render(node.operand)}"
    return f"{node.function.value}({', '.join(render(a) for a in node.args)})"


def format_tree(node: AstNode) -> str:
    """
    Render an AST as an indented box-drawing tree (used in debug logs), e.g.
        +
        ├── 3
        └── *
            ├── 4
            └── 2
    """
    lines = []
    _format_node(node, "", "", lines)
    return "\n".join(lines)


def _format_node(node: AstNode, prefix: str, child_prefix: str, lines: list) -> None:
    if isinstance(node, NumberLiteral):
        lines.append(f"{prefix}{node.value:g}")
        return
    if isinstance(node, VariableRef):
        lines.append(f"{prefix}{{{node.name}}}")
        return
    if isinstance(node, BinaryOp):
        lines.append(f"{prefix}{node.operator}")
        children = [node.left, node.right]
    elif isinstance(node, UnaryOp):
        lines.append(f"{prefix}{node.operator}")
        children = [node.operand]
    else:
        lines.append(f"{prefix}{node.function.value}")
        children = list(node.args)

    for i, child in enumerate(children):
        last = i == len(children) - 1
        _format_node(
            child,
            child_prefix + ("└── " if last else "├── "),
            child_prefix + ("    " if last else "│   "),
            lines,
        )
