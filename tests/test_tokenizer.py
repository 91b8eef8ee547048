import math
import pytest
from unitconvert.tokenizer import ParseError, tokenize
from unitconvert.types import COMMA, LEFT_PAREN, RIGHT_PAREN, Function, Operator, Token, TokenKind

def _kinds(tokens):
    return [t.kind for t in tokens]

def test_numbers_and_operators():
    assert tokenize("3 + 4.5 * 2") == [
        Token.number(3), Token.operator(Operator.ADD), Token.number(4.5),
        Token.operator(Operator.MUL), Token.number(2),
    ]

def test_unicode_operators():
    ops = [t.value for t in tokenize("1 − 2 × 3 ÷ 4") if t.kind is TokenKind.OPERATOR]
    assert ops == [Operator.SUB, Operator.MUL, Operator.DIV]

def test_minus_becomes_negate_without_left_operand():
    tokens = tokenize("-5 - -(2)")
    assert tokens[0] == Token.operator(Operator.NEGATE)
    assert tokens[2] == Token.operator(Operator.SUB)
    assert tokens[3] == Token.operator(Operator.NEGATE)
    assert tokens[4] == LEFT_PAREN

def test_negate_after_comma_and_paren():
    tokens = tokenize("max(-1,-2)")
    assert tokens[2] == Token.operator(Operator.NEGATE)
    assert tokens[5] == Token.operator(Operator.NEGATE)

def test_functions_are_case_insensitive():
    tokens = tokenize("MAX(1, 2) + Sin(0)")
    assert tokens[0] == Token.function(Function.MAX)
    assert tokens[1:3] == [LEFT_PAREN, Token.number(1)]
    assert COMMA in tokens and RIGHT_PAREN in tokens
    assert Token.function(Function.SIN) in tokens

def test_convert_arrow_and_keyword():
    assert tokenize("2km -> m")[2] == Token.operator(Operator.CONVERT)
    assert tokenize("2 km to m")[2] == Token.operator(Operator.CONVERT)

def test_units_keep_their_case():
    tokens = tokenize("5 Mm")
    assert tokens[1] == Token(TokenKind.UNIT, "Mm")

def test_pi_is_a_number():
    (tok,) = tokenize("π")
    assert tok.kind is TokenKind.NUMBER
    assert tok.value == math.pi

def test_variables():
    tokens = tokenize("{ C } * 9")
    assert tokens[0] == Token(TokenKind.VARIABLE, "C")

@pytest.mark.parametrize("text", ["{C * 9", "{} + 1"])
def test_bad_variable_reference(text):
    with pytest.raises(ParseError):
        tokenize(text)

@pytest.mark.parametrize("text", ["1 < 2", "3 > 1"])
def test_comparison_characters_are_rejected(text):
    with pytest.raises(ParseError) as e:
        tokenize(text)
    assert "not a valid operator" in str(e.value)

def test_malformed_number():
    with pytest.raises(ParseError) as e:
        tokenize("1.2.3 + 1")
    assert e.value.token == "1.2.3"

def test_unknown_characters_are_skipped():
    assert _kinds(tokenize("3 # 4")) == [TokenKind.NUMBER, TokenKind.NUMBER]

def test_empty_input():
    assert tokenize("   ") == []
