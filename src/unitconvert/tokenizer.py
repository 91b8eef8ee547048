# -----------------------------------------------------------------------------
# Tokenizer
# Purpose:
#   Scan a raw expression string left to right and emit an ordered list of
#   tokens (numbers, operators, functions, parentheses, units, variables).
# Notes:
#   - A minus sign with no left operand becomes the unary NEGATE operator.
#   - Function keywords are case-insensitive; unit and variable names keep
#     their original case because they are later used as context keys.
#   - Unknown characters are skipped with a warning rather than aborting.
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
from typing import List, Optional, Tuple

from .log import TRACE
from .types import COMMA, LEFT_PAREN, RIGHT_PAREN, Function, Operator, Token, TokenKind

log = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when an expression cannot be tokenized or assembled into an AST."""

    def __init__(self, message: str, token: str | None = None):
        super().__init__(message)
        self.message = message
        self.token = token

    def __str__(self) -> str:
        if self.token is None:
            return self.message
        return f"{self.message} ({self.token!r})"


# Single-character operators; '-' is handled separately ('->' and NEGATE)
OPERATORS = {
    "+": Operator.ADD,
    "-": Operator.SUB,
    "−": Operator.SUB,   # unicode minus sign
    "*": Operator.MUL,
    "×": Operator.MUL,
    "/": Operator.DIV,
    "÷": Operator.DIV,
    "^": Operator.POW,
    "%": Operator.MOD,
}
OPERATOR_CHARS = set(OPERATORS) | {"<", ">", "π"}

# Alphabetic keywords (matched case-insensitively)
KEYWORDS = {
    "max": Token.function(Function.MAX),
    "min": Token.function(Function.MIN),
    "sin": Token.function(Function.SIN),
    "cos": Token.function(Function.COS),
    "tan": Token.function(Function.TAN),
    "to": Token.operator(Operator.CONVERT),
}

_NUMBER_CHARS = set("0123456789.e")


def tokenize(text: str) -> List[Token]:
    """
    Convert `text` into a list of tokens.
    Raises ParseError for malformed numbers, unknown operators and
    unterminated `{variable}` references.
    """
    log.debug("Tokenizing expression %r", text)
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        c = text[pos]

        if c.isspace():
            pos += 1
            continue
        if c == "(":
            tokens.append(LEFT_PAREN)
            pos += 1
            continue
        if c == ")":
            tokens.append(RIGHT_PAREN)
            pos += 1
            continue
        if c == ",":
            tokens.append(COMMA)
            pos += 1
            continue

        if c == "{":
            token, pos = _variable(text, pos)
        elif c in OPERATOR_CHARS:
            token, pos = _operator(text, pos, tokens[-1] if tokens else None)
        elif c.isascii() and c.isdigit():
            token, pos = _number(text, pos)
        elif c.isalpha():
            token, pos = _identifier(text, pos)
        else:
            log.warning("Skipping unknown character %r in expression %r", c, text)
            pos += 1
            continue

        tokens.append(token)

    log.log(TRACE, "Tokenized %d token(s): %s", len(tokens), tokens)
    return tokens


def _number(text: str, start: int) -> Tuple[Token, int]:
    end = start
    while end < len(text) and text[end] in _NUMBER_CHARS:
        end += 1
    raw = text[start:end]
    try:
        value = float(raw)
    except ValueError:
        raise ParseError("Token is not a valid number", raw) from None
    return Token.number(value), end


def _identifier(text: str, start: int) -> Tuple[Token, int]:
    end = start
    while end < len(text) and text[end].isalpha() and text[end] != "π":
        end += 1
    raw = text[start:end]
    keyword = KEYWORDS.get(raw.lower())
    if keyword is not None:
        return keyword, end
    # Anything else is a unit suffix / bare name; keep the caller's casing
    return Token(TokenKind.UNIT, raw), end


def _variable(text: str, start: int) -> Tuple[Token, int]:
    close = text.find("}", start + 1)
    if close == -1:
        raise ParseError("Unterminated variable reference", text[start:])
    name = text[start + 1:close].strip()
    if not name:
        raise ParseError("Empty variable reference", text[start:close + 1])
    return Token(TokenKind.VARIABLE, name), close + 1


def _operator(text: str, start: int, prev: Optional[Token]) -> Tuple[Token, int]:
    c = text[start]
    if c == "-" and text.startswith("->", start):
        return Token.operator(Operator.CONVERT), start + 2
    if c == "π":
        return Token.number(math.pi), start + 1
    if c not in OPERATORS:
        raise ParseError("Token is not a valid operator", c)

    op = OPERATORS[c]
    # A minus with nothing to its left is a negation, not a subtraction
    if op is Operator.SUB and (
        prev is None
        or prev.kind in (TokenKind.LEFT_PAREN, TokenKind.COMMA, TokenKind.OPERATOR)
    ):
        op = Operator.NEGATE
    return Token.operator(op), start + 1
