from __future__ import annotations

import pytest

from funcplot.expression import compile_expression
from funcplot.expression_nodes import BinaryOp, Call, Constant, Negate, Number, Variable
from funcplot.expression_parser import normalize_text, parse
from funcplot.plot_errors import ParseError


def test_normalize_text_lowercases_and_drops_whitespace() -> None:
    assert normalize_text("  Sin( X ) +\t2 ") == "sin(x)+2"


def test_precedence_of_sum_product_and_power() -> None:
    tree = parse("1+2*x^2")
    assert tree == BinaryOp("+", Number(1.0), BinaryOp("*", Number(2.0), BinaryOp("^", Variable("x"), Number(2.0))))


def test_power_is_right_associative() -> None:
    tree = parse("2^3^2")
    assert tree == BinaryOp("^", Number(2.0), BinaryOp("^", Number(3.0), Number(2.0)))
    assert compile_expression("2^3^2").evaluate() == 512.0


def test_unary_minus_binds_looser_than_power() -> None:
    assert parse("-x^2") == Negate(BinaryOp("^", Variable("x"), Number(2.0)))
    assert compile_expression("-x^2").evaluate(3) == -9.0


def test_exponent_accepts_signed_factor() -> None:
    assert compile_expression("2^-1").evaluate() == 0.5


def test_implicit_multiplication_is_marked() -> None:
    tree = parse("2x")
    assert tree == BinaryOp("*", Number(2.0), Variable("x"), implicit=True)


def test_implicit_multiplication_chains_through_every_atom_kind() -> None:
    expr = compile_expression("2x(x+1)sin(x)")
    explicit = compile_expression("2*x*(x+1)*sin(x)")
    for x in (-1.5, 0.3, 2.0):
        assert expr.evaluate(x) == pytest.approx(explicit.evaluate(x), rel=1e-12)


def test_implicit_after_closing_parenthesis_and_constant() -> None:
    assert compile_expression("(x+1)(x-1)").evaluate(3) == 8.0
    assert compile_expression("2pi").evaluate() == pytest.approx(6.283185307179586)
    assert compile_expression("pix").evaluate(2) == pytest.approx(6.283185307179586)


def test_identifier_prefix_split() -> None:
    assert compile_expression("xsin(x)").evaluate(2) == pytest.approx(2 * 0.9092974268256817)


def test_function_names_with_digits() -> None:
    assert compile_expression("log2(8)").evaluate() == pytest.approx(3.0)
    assert compile_expression("log10(1000)").evaluate() == pytest.approx(3.0)
    assert compile_expression("sqrt2").evaluate() == pytest.approx(2**0.5)


def test_two_argument_calls() -> None:
    tree = parse("max(x,1)")
    assert tree == Call("max", (Variable("x"), Number(1.0)))
    assert compile_expression("atan2(1,1)").evaluate() == pytest.approx(0.7853981633974483)


def test_constants_parse_as_constant_nodes() -> None:
    assert parse("pi") == Constant("pi")
    assert parse("e") == Constant("e")


def test_second_variable_only_in_two_variable_mode() -> None:
    assert parse("x+y", ("x", "y")) == BinaryOp("+", Variable("x"), Variable("y"))
    with pytest.raises(ParseError) as info:
        parse("x+y")
    assert info.value.reason == ParseError.UNKNOWN_IDENTIFIER


@pytest.mark.parametrize(
    "text, reason",
    [
        ("2$x", ParseError.UNEXPECTED_CHARACTER),
        ("x,1", ParseError.TRAILING_INPUT),
        ("$", ParseError.UNEXPECTED_CHARACTER),
        ("x+#", ParseError.UNEXPECTED_CHARACTER),
        ("foo(x)", ParseError.UNKNOWN_IDENTIFIER),
        ("sin", ParseError.UNKNOWN_IDENTIFIER),
        ("(x+1", ParseError.UNMATCHED_PARENTHESIS),
        ("x+1)", ParseError.UNMATCHED_PARENTHESIS),
        ("sin(x", ParseError.UNMATCHED_PARENTHESIS),
        ("x+", ParseError.UNEXPECTED_END),
        ("", ParseError.UNEXPECTED_END),
        ("   ", ParseError.UNEXPECTED_END),
        ("1.2.3", ParseError.MALFORMED_NUMBER),
        ("sin(x,1)", ParseError.WRONG_ARITY),
        ("max(x)", ParseError.WRONG_ARITY),
        ("x2", ParseError.TRAILING_INPUT),
    ],
)
def test_parse_errors(text: str, reason: str) -> None:
    with pytest.raises(ParseError) as info:
        compile_expression(text)
    assert info.value.reason == reason


def test_parse_error_reports_position_and_is_value_error() -> None:
    with pytest.raises(ValueError) as info:
        compile_expression("x + 1 $")
    err = info.value
    assert isinstance(err, ParseError)
    assert err.text == "x+1$"
    assert err.position == 3
    assert "position 3" in str(err)


def test_compile_rejects_non_string() -> None:
    with pytest.raises(TypeError):
        compile_expression(42)  # type: ignore[arg-type]


def test_variable_names_must_not_shadow_known_names() -> None:
    with pytest.raises(ValueError):
        compile_expression("1", variables=("e",))
    with pytest.raises(ValueError):
        compile_expression("1", variables=("x", "x"))
