import math
import pytest
from unitconvert.evaluator import UnresolvedVariableError
from unitconvert.evaluator import evaluate as evaluate_ast
from unitconvert.expression import Expression, ExpressionContext, evaluate
from unitconvert.types import BinaryOp, NumberLiteral, Operator, VariableRef

@pytest.mark.parametrize("text, expected", [
    ("3 + 4 * 2", 11.0),
    ("2^(10-2) % 10", 6.0),
    ("2*-(1+2)^-(2+5*-(2+4))", -45753584909922.0),
    ("-5 - -10", 5.0),
    ("-max(5.3,3)", -5.3),
    ("max(2,3)", 3.0),
    ("min(4, -1, 7)", -1.0),
    ("(1 + 2) * 3", 9.0),
    ("2 ^ 3 ^ 2", 512.0),
    ("-2 ^ 2", -4.0),
    ("7 % 3", 1.0),
    ("-7 % 3", -1.0),
    ("3 + 4 × 2 ÷ ( 1 − 5 ) ^ 2 ^ 3", 3.0001220703125),
])
def test_expressions(text, expected):
    assert evaluate(text) == expected

def test_trigonometry_in_radians():
    assert evaluate("sin(max(2,3)/3*π)") == pytest.approx(1.2246e-16, abs=1e-19)
    assert evaluate("cos(0)") == 1.0
    assert evaluate("tan(π/4)") == pytest.approx(1.0)

def test_ieee_division():
    assert evaluate("1 / 0") == math.inf
    assert evaluate("-1 / 0") == -math.inf
    assert math.isnan(evaluate("0 / 0"))
    assert math.isnan(evaluate("5 % 0"))

def test_ieee_power():
    assert evaluate("10 ^ 400") == math.inf
    assert evaluate("0 ^ -1") == math.inf
    assert math.isnan(evaluate("(-8) ^ 0.5"))

def test_variables_from_context():
    expr = Expression("{C} * 9 / 5 + 32")
    assert expr.variables == {"C"}
    assert expr.eval(ExpressionContext().var("C", 100)) == 212.0
    assert expr.eval({"C": -40}) == -40.0

def test_reevaluation_is_deterministic():
    expr = Expression("sin({x}) + {x} ^ 2")
    ctx = ExpressionContext().var("x", 1.25)
    assert expr.eval(ctx) == expr.eval(ctx)

def test_unresolved_variable_fails_fast():
    with pytest.raises(UnresolvedVariableError) as e:
        evaluate("{x} + 1")
    assert e.value.name == "x"
    assert isinstance(e.value, KeyError)

def test_from_ast_renders_text():
    node = BinaryOp(Operator.ADD, VariableRef("F"), NumberLiteral(459.67))
    expr = Expression.from_ast(node)
    assert expr.text == "({F} + 459.67)"
    assert expr.variables == {"F"}
    assert evaluate_ast(expr.ast, {"F": 0.0}) == 459.67
