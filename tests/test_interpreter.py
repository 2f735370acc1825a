"""Interpreter and value-model tests driven through the Python API."""

import io
import math

import pytest

import tabby
from tabby.ast import (
    Assignment,
    BinaryOp,
    Block,
    Boolean,
    IfStatement,
    Number,
    Print,
    Return,
    String,
    Variable,
)
from tabby.runtime import (
    NULL,
    EvaluationError,
    Interpreter,
    VBool,
    VFunction,
    VNull,
    VNumber,
    VReturn,
    VString,
    eval_binary,
    eval_unary,
    format_number,
    is_truthy,
    values_equal,
)


def run(source: str) -> tuple[Interpreter, str]:
    out = io.StringIO()
    interp = Interpreter(out)
    tabby.run(source, interp)
    return interp, out.getvalue()


# ---------------------------------------------------------------------------
# Environment and scoping
# ---------------------------------------------------------------------------


def test_block_restores_environment():
    interp = Interpreter(io.StringIO())
    interp.environment["x"] = VNumber(1.0)
    block = Block([Assignment("x", Number(2.0)), Assignment("y", Number(3.0))])
    result = interp.interpret(block)
    assert result == VNumber(3.0)
    assert interp.environment == {"x": VNumber(1.0)}


def test_block_with_return_restores_environment():
    interp = Interpreter(io.StringIO())
    block = Block([Assignment("x", Number(2.0)), Return(Variable("x")), Assignment("z", Number(0.0))])
    result = interp.interpret(block)
    assert result == VReturn(VNumber(2.0))
    assert interp.environment == {}


def test_if_bindings_persist():
    interp = Interpreter(io.StringIO())
    node = IfStatement(Boolean(True), Block([Assignment("x", Number(1.0))]), None)
    interp.interpret(node)
    assert interp.environment["x"] == VNumber(1.0)


def test_if_without_else_is_null():
    interp = Interpreter(io.StringIO())
    node = IfStatement(Boolean(False), Block([Assignment("x", Number(1.0))]), None)
    assert interp.interpret(node) is NULL
    assert "x" not in interp.environment


def test_top_level_bindings():
    interp, out = run("x = 2\ny = x * 3\ndef f(a): return a")
    assert interp.environment["x"] == VNumber(2.0)
    assert interp.environment["y"] == VNumber(6.0)
    assert isinstance(interp.environment["f"], VFunction)
    assert interp.environment["f"].params == ["a"]
    assert out == ""


def test_call_leaves_caller_environment_untouched():
    interp, _ = run("x = 1\ndef f(x):\n    y = x\n    return y\nr = f(5)")
    assert interp.environment["x"] == VNumber(1.0)
    assert interp.environment["r"] == VNumber(5.0)
    assert "y" not in interp.environment


def test_interpreters_are_independent():
    a, _ = run("x = 1")
    b, _ = run("print x")
    assert "x" in a.environment
    assert "x" not in b.environment


def test_pure_expression_is_idempotent():
    interp, _ = run("a = 4\nb = 2.5")
    expr = BinaryOp(BinaryOp(Variable("a"), "*", Variable("b")), "-", Number(1.0))
    first = interp.interpret(expr)
    second = interp.interpret(expr)
    assert first == second == VNumber(9.0)


def test_print_returns_null_and_writes_line():
    out = io.StringIO()
    interp = Interpreter(out)
    assert interp.interpret(Print(String("hi"))) is NULL
    assert out.getvalue() == "hi\n"


def test_run_returns_last_value():
    assert tabby.run("1 + 1\n2 * 5", Interpreter(io.StringIO())) == VNumber(10.0)


def test_top_level_return_yields_return_value():
    interp = Interpreter(io.StringIO())
    result = tabby.run("return 7\nx = 1", interp)
    assert result == VReturn(VNumber(7.0))
    assert "x" not in interp.environment


def test_default_output_is_stdout(capsys):
    Interpreter().interpret(Print(Number(3.0)))
    assert capsys.readouterr().out == "3\n"


def test_error_carries_position():
    with pytest.raises(EvaluationError) as exc:
        run("x = 1\ny = x / 0")
    assert exc.value.msg == "division by zero"
    assert exc.value.line == 2
    assert exc.value.pos is not None


def test_error_types_share_a_base():
    for source in ['x = "', "x = )", "x = -true"]:
        with pytest.raises(tabby.TabbyError):
            run(source)


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


def test_format_number():
    assert format_number(3.0) == "3"
    assert format_number(-2.0) == "-2"
    assert format_number(0.0) == "0"
    assert format_number(-0.0) == "-0"
    assert format_number(2.5) == "2.5"
    assert format_number(0.00001) == "0.00001"
    assert format_number(1.5e-7) == "0.00000015"
    assert format_number(-0.0001) == "-0.0001"
    assert format_number(1 / 3) == "0.3333333333333333"
    assert format_number(1e20) == "100000000000000000000"
    assert format_number(float("nan")) == "NaN"
    assert format_number(float("inf")) == "inf"
    assert format_number(float("-inf")) == "-inf"


def test_to_string():
    assert VNull().to_string() == "null"
    assert VBool(True).to_string() == "true"
    assert VString("a b").to_string() == "a b"
    assert VFunction([], Block([])).to_string() == "<function>"
    assert VReturn(VReturn(VNumber(4.0))).to_string() == "4"


def test_truthiness():
    assert not is_truthy(NULL)
    assert not is_truthy(VNumber(0.0))
    assert not is_truthy(VNumber(-0.0))
    assert not is_truthy(VString(""))
    assert not is_truthy(VBool(False))
    assert is_truthy(VNumber(float("nan")))
    assert is_truthy(VString(" "))
    assert is_truthy(VFunction([], Block([])))
    assert is_truthy(VReturn(NULL))


def test_values_equal():
    assert values_equal(VNumber(1.0), VNumber(1.0))
    assert not values_equal(VNumber(1.0), VString("1"))
    assert not values_equal(VBool(False), VNumber(0.0))
    assert not values_equal(NULL, VBool(False))
    assert values_equal(NULL, VNull())
    assert values_equal(VReturn(VNumber(2.0)), VReturn(VNumber(2.0)))
    nan = VNumber(float("nan"))
    assert not values_equal(nan, nan)


def test_function_equality_is_structural():
    body = Block([Return(Variable("a"))])
    assert values_equal(VFunction(["a"], body), VFunction(["a"], Block([Return(Variable("a"))])))
    assert not values_equal(VFunction(["a"], body), VFunction(["b"], body))


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def test_modulo_edge_cases():
    assert math.isnan(eval_binary("%", VNumber(1.0), VNumber(0.0)).value)
    assert math.isnan(eval_binary("%", VNumber(float("inf")), VNumber(2.0)).value)
    assert eval_binary("%", VNumber(-7.0), VNumber(3.0)) == VNumber(-1.0)


def test_division_by_zero_raises():
    with pytest.raises(EvaluationError, match="division by zero"):
        eval_binary("/", VNumber(1.0), VNumber(0.0))


def test_unknown_binary_operator():
    with pytest.raises(EvaluationError, match="unknown operator '\\^'"):
        eval_binary("^", VNumber(1.0), VNumber(2.0))


def test_unknown_unary_operator():
    with pytest.raises(EvaluationError, match="unknown operator '~'"):
        eval_unary("~", VNumber(1.0))


def test_comparison_requires_numbers():
    with pytest.raises(EvaluationError, match="string and number"):
        eval_binary(">=", VString("a"), VNumber(1.0))


def test_logic_always_yields_booleans():
    assert eval_binary("and", VNumber(1.0), VString("a")) == VBool(True)
    assert eval_binary("or", NULL, VNumber(0.0)) == VBool(False)
    assert eval_unary("not", VString("")) == VBool(True)
