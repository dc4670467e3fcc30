"""
Tests for compile_expression and interpret.
"""

import math

import pytest

from arithex import (
    Cell,
    CompilerConfig,
    ExpressionLimits,
    compile_expression,
    count_nodes,
    evaluate,
    free,
    function,
    interpret,
    variable,
)

# Expressions paired with the same formula written in Python.
REFERENCE_CASES = [
    ("1", 1.0),
    ("1 + 2 * 3", 1 + 2 * 3),
    ("(1 + 2) * 3", (1 + 2) * 3),
    ("10 / 4 - 1", 10 / 4 - 1),
    ("2 ^ 0.5", 2**0.5),
    ("7 % 4 + 1", math.fmod(7, 4) + 1),
    ("-(3 - 5) * 2", -(3 - 5) * 2),
    ("sqrt(16) + abs(-2.5)", math.sqrt(16) + abs(-2.5)),
    ("sin(pi / 6) * cos(0)", math.sin(math.pi / 6) * math.cos(0)),
    ("exp(1) - e", math.exp(1) - math.e),
    ("pow(2, 8) / 2^4", math.pow(2, 8) / 2**4),
    ("atan2(1, 2) + atan(0.5)", math.atan2(1, 2) + math.atan(0.5)),
    ("log10(1e3) * ln(e^2)", math.log10(1e3) * math.log(math.e**2)),
    ("floor(3.7) - ceil(3.2)", math.floor(3.7) - math.ceil(3.2)),
    ("fac(6) / ncr(6, 2)", math.factorial(6) / math.comb(6, 2)),
    ("npr(7, 3)", math.perm(7, 3)),
    ("1.5e2 + .25", 1.5e2 + 0.25),
    ("(1, 2 + 2)", 4.0),
    ("tanh(1) + sinh(1) - cosh(1)", math.tanh(1) + math.sinh(1) - math.cosh(1)),
]


class TestReferenceArithmetic:
    """interpret agrees with Python's own arithmetic."""

    @pytest.mark.parametrize("expression,expected", REFERENCE_CASES)
    def test_interpret_matches_reference(self, expression, expected):
        value, error = interpret(expression)
        assert error == 0
        assert value == pytest.approx(expected)

    @pytest.mark.parametrize("expression,expected", REFERENCE_CASES)
    def test_compile_then_evaluate_matches_interpret(self, expression, expected):
        for optimized in (True, False):
            result = compile_expression(expression, config={"optimize": optimized})
            assert result.success
            assert evaluate(result.expr) == pytest.approx(interpret(expression)[0])
            free(result.expr)


class TestLiteralCases:
    """Pinned results."""

    def test_grouping(self):
        assert interpret("(5+3)*2") == (16.0, 0)

    def test_power_right_to_left(self):
        assert interpret("2^3^2") == (512.0, 0)

    def test_power_left_to_right(self):
        assert interpret("2^3^2", config={"pow_associativity": "left_to_right"}) == (
            64.0,
            0,
        )

    def test_negated_power(self):
        assert interpret("-2^2") == (-4.0, 0)

    def test_negated_power_left_to_right(self):
        config = CompilerConfig(pow_associativity="left_to_right")
        assert interpret("-2^2", config=config) == (4.0, 0)

    def test_parenthesized_negative_base(self):
        assert interpret("(-2)^2") == (4.0, 0)

    def test_parenthesized_negative_variable_base(self):
        result = compile_expression("(-x)^2", [variable("x", Cell(3.0))])
        assert evaluate(result.expr) == 9

    def test_hex_literal(self):
        assert interpret("0x10 + 0x1.8p1") == (19.0, 0)

    def test_comma(self):
        assert interpret("1,2,3") == (3.0, 0)

    def test_sine(self):
        assert interpret("sin(0)") == (0.0, 0)


class TestCompileFailures:
    """Failures report a nonzero, 1-based offset."""

    def test_dangling_operator_points_past_operator(self):
        result = compile_expression("3+")
        assert result.expr is None
        assert result.error == 3
        assert not result.success

    def test_unknown_function_points_at_its_start(self):
        result = compile_expression("foo(1,2)")
        assert result.expr is None
        assert result.error == 1
        assert "foo" in result.message

    def test_unknown_identifier_mid_expression(self):
        assert compile_expression("1 + bar").error == 5

    def test_unterminated_group(self):
        result = compile_expression("(1+2")
        assert result.expr is None
        assert result.error == 5

    def test_empty_expression_never_reports_zero(self):
        result = compile_expression("")
        assert result.expr is None
        assert result.error == 1

    def test_leading_garbage_never_reports_zero(self):
        assert compile_expression(")").error == 1

    def test_two_arity_builtin_with_one_argument(self):
        assert compile_expression("atan2(1)").expr is None

    def test_two_arity_builtin_with_three_arguments(self):
        assert compile_expression("pow(1, 2, 3)").expr is None

    def test_host_function_arity_mismatch(self):
        bindings = [function("f3", lambda a, b, c: a, 3)]
        assert compile_expression("f3(1, 2)", bindings).expr is None
        assert compile_expression("f3(1, 2, 3, 4)", bindings).expr is None
        assert compile_expression("f3(1, 2, 3)", bindings).success

    def test_message_has_context(self):
        result = compile_expression("1 + * 2")
        assert result.error == 5
        assert "1 + * 2" in result.message

    def test_limit_failure(self):
        result = compile_expression("1+1", limits=ExpressionLimits(max_expression_length=2))
        assert result.expr is None
        assert result.error == 3

    def test_interpret_failure_is_nan(self):
        value, error = interpret("3+")
        assert math.isnan(value)
        assert error == 3


class TestCompileSuccess:
    """Tests for successful compiles."""

    def test_success_has_zero_error(self):
        result = compile_expression("1 + 1")
        assert result.success
        assert result.error == 0
        assert result.message is None

    def test_optimizes_by_default(self):
        result = compile_expression("1 + 2 * 3")
        assert result.expr.type == "Constant"
        assert result.expr.value == 7

    def test_optimization_can_be_disabled(self):
        result = compile_expression("1 + 2 * 3", config={"optimize": False})
        assert result.expr.type == "Call"
        assert count_nodes(result.expr) == 5

    def test_variables(self):
        x = Cell(2.0)
        result = compile_expression("x^2 + 1", [variable("x", x)])
        assert evaluate(result.expr) == 5
        x.value = 3.0
        assert evaluate(result.expr) == 10

    def test_release_exactly_once(self):
        result = compile_expression("x * (1 + y)", [variable("x", Cell()), variable("y", Cell())])
        nodes = count_nodes(result.expr)
        assert free(result.expr) == nodes
        assert free(result.expr) == 0

    def test_release_none(self):
        assert free(None) == 0

    def test_none_bindings(self):
        result = compile_expression("sin(0) + 1", None)
        assert result.success
        assert evaluate(result.expr) == 1

    def test_none_bindings_with_unknown_identifier(self):
        result = compile_expression("foo + 1", variables=None)
        assert result.expr is None
        assert result.error == 1


class TestLongExpressions:
    """Long operator chains compile and evaluate."""

    @pytest.mark.parametrize("terms", [300, 2000])
    def test_long_sum(self, terms):
        assert interpret("+".join(["1"] * terms)) == (float(terms), 0)

    def test_long_sum_with_variable_is_not_folded(self):
        x = Cell(2.0)
        source = "+".join(["x"] * 1500)
        result = compile_expression(source, [variable("x", x)])
        assert result.success
        assert evaluate(result.expr) == 3000
        assert free(result.expr) == 2999

    def test_long_unoptimized_product(self):
        source = "*".join(["1"] * 1000)
        result = compile_expression(source, config={"optimize": False})
        assert result.success
        assert evaluate(result.expr) == 1
        assert free(result.expr) == 1999
