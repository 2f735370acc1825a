"""Tabby runtime: tree-walking evaluation of a parsed program.

One Interpreter owns one environment (a plain name -> Value dict) and one
output stream. Evaluation never prints diagnostics; every failure surfaces
as an EvaluationError for the caller to report.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import TextIO

from .ast import (
    Assignment,
    BinaryOp,
    Block,
    Boolean,
    FunctionCall,
    FunctionDef,
    IfStatement,
    Node,
    Number,
    Pos,
    Print,
    Program,
    Return,
    Statement,
    String,
    UnaryOp,
    Variable,
    WhileLoop,
)
from .errors import TabbyError


# ============================================================
# Diagnostics
# ============================================================


class EvaluationError(TabbyError):
    """Runtime fault: bad operand types, division by zero, bad call."""

    def __init__(self, msg: str, pos: Pos | None = None):
        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(msg, pos.line, pos.col)
        self.pos = pos


# ============================================================
# Values
# ============================================================


class Value:
    """A runtime value."""

    def kind(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError


@dataclass
class VNull(Value):
    def kind(self) -> str:
        return "null"

    def to_string(self) -> str:
        return "null"


@dataclass
class VNumber(Value):
    value: float

    def kind(self) -> str:
        return "number"

    def to_string(self) -> str:
        return format_number(self.value)


@dataclass
class VString(Value):
    value: str

    def kind(self) -> str:
        return "string"

    def to_string(self) -> str:
        return self.value


@dataclass
class VBool(Value):
    value: bool

    def kind(self) -> str:
        return "boolean"

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass
class VFunction(Value):
    """A function value: its own copy of the parameters and body."""

    params: list[str]
    body: Block

    def kind(self) -> str:
        return "function"

    def to_string(self) -> str:
        return "<function>"


@dataclass
class VReturn(Value):
    """Signal carrying a returned value up to the enclosing call."""

    value: Value

    def kind(self) -> str:
        return "return"

    def to_string(self) -> str:
        return self.value.to_string()


NULL = VNull()


def format_number(x: float) -> str:
    """Integral values print without a fractional part."""
    if x != x:
        return "NaN"
    if x == float("inf"):
        return "inf"
    if x == float("-inf"):
        return "-inf"
    if x == int(x):
        if x == 0 and math.copysign(1.0, x) < 0:
            return "-0"
        return str(int(x))
    text = repr(x)
    if "e" in text:
        # Shortest round-trip digits, written out positionally
        return format(Decimal(text), "f")
    return text


def is_truthy(v: Value) -> bool:
    if isinstance(v, VBool):
        return v.value
    if isinstance(v, VNumber):
        return v.value != 0.0
    if isinstance(v, VString):
        return v.value != ""
    if isinstance(v, VNull):
        return False
    return True


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality; values of different variants are never equal."""
    if type(a) is not type(b):
        return False
    if isinstance(a, VNumber) and isinstance(b, VNumber):
        # NaN is unequal to itself
        return a.value == b.value
    if isinstance(a, VReturn) and isinstance(b, VReturn):
        return values_equal(a.value, b.value)
    return a == b


# ============================================================
# Interpreter
# ============================================================


Environment = dict[str, Value]


class Interpreter:
    """Evaluates AST nodes against a single mutable environment."""

    def __init__(self, out: TextIO | None = None, environment: Environment | None = None):
        self.out = out
        self.environment: Environment = environment if environment is not None else {}

    def write_line(self, text: str) -> None:
        out = self.out if self.out is not None else sys.stdout
        out.write(text + "\n")

    # ---- Entry -------------------------------------------------------------

    def interpret(self, node: Node) -> Value:
        if isinstance(node, Program):
            return self._eval_statements(node.statements)

        if isinstance(node, Block):
            saved = dict(self.environment)
            try:
                return self._eval_statements(node.statements)
            finally:
                self.environment = saved

        if isinstance(node, Statement):
            return self.interpret(node.expr)

        if isinstance(node, Number):
            return VNumber(node.value)
        if isinstance(node, String):
            return VString(node.value)
        if isinstance(node, Boolean):
            return VBool(node.value)

        if isinstance(node, Variable):
            return self.environment.get(node.name, NULL)

        if isinstance(node, Assignment):
            val = self.interpret(node.value)
            self.environment[node.name] = val
            return val

        if isinstance(node, BinaryOp):
            left = self.interpret(node.left)
            right = self.interpret(node.right)
            return eval_binary(node.op, left, right, pos=node.pos)

        if isinstance(node, UnaryOp):
            operand = self.interpret(node.operand)
            return eval_unary(node.op, operand, pos=node.pos)

        if isinstance(node, IfStatement):
            cond = self.interpret(node.condition)
            if is_truthy(cond):
                return self._eval_statements(node.then_block.statements)
            if node.else_block is not None:
                return self._eval_statements(node.else_block.statements)
            return NULL

        if isinstance(node, WhileLoop):
            result: Value = NULL
            while is_truthy(self.interpret(node.condition)):
                result = self._eval_statements(node.body.statements)
                if isinstance(result, VReturn):
                    return result
            return result

        if isinstance(node, FunctionDef):
            func = VFunction(list(node.params), node.body)
            self.environment[node.name] = func
            return func

        if isinstance(node, FunctionCall):
            return self._call(node)

        if isinstance(node, Return):
            return VReturn(self.interpret(node.expr))

        if isinstance(node, Print):
            val = self.interpret(node.expr)
            self.write_line(val.to_string())
            return NULL

        raise EvaluationError(f"unsupported node {type(node).__name__}", node.pos)

    # ---- Statements --------------------------------------------------------

    def _eval_statements(self, statements: list[Node]) -> Value:
        """Run statements in order against the live environment.

        Stops at the first VReturn and hands it back unchanged.
        """
        result: Value = NULL
        for st in statements:
            result = self.interpret(st)
            if isinstance(result, VReturn):
                return result
        return result

    # ---- Functions ---------------------------------------------------------

    def _call(self, node: FunctionCall) -> Value:
        func = self.environment.get(node.name)
        if not isinstance(func, VFunction):
            raise EvaluationError(f"'{node.name}' is not a function", node.pos)
        if len(func.params) != len(node.args):
            raise EvaluationError(
                f"function '{node.name}' expects {len(func.params)} "
                f"argument{'' if len(func.params) == 1 else 's'}, got {len(node.args)}",
                node.pos,
            )
        args = [self.interpret(a) for a in node.args]

        # The callee sees every function but none of the caller's variables.
        # Functions are carried over so recursive and sibling calls resolve.
        env: Environment = {
            name: v for name, v in self.environment.items() if isinstance(v, VFunction)
        }
        for param, arg in zip(func.params, args):
            env[param] = arg

        callee = Interpreter(self.out, env)
        result = callee.interpret(func.body)
        if isinstance(result, VReturn):
            return result.value
        return NULL


# ============================================================
# Operators
# ============================================================


def _numbers(op: str, left: Value, right: Value, pos: Pos | None) -> tuple[float, float]:
    if isinstance(left, VNumber) and isinstance(right, VNumber):
        return left.value, right.value
    raise EvaluationError(
        f"unsupported operand types for '{op}': {left.kind()} and {right.kind()}", pos
    )


def eval_binary(op: str, left: Value, right: Value, *, pos: Pos | None = None) -> Value:
    if op == "==":
        return VBool(values_equal(left, right))
    if op == "!=":
        return VBool(not values_equal(left, right))

    if op == "and":
        return VBool(is_truthy(left) and is_truthy(right))
    if op == "or":
        return VBool(is_truthy(left) or is_truthy(right))

    if op == "+":
        if isinstance(left, VString) and isinstance(right, VString):
            return VString(left.value + right.value)
        a, b = _numbers(op, left, right, pos)
        return VNumber(a + b)

    if op in ("-", "*", "/", "%"):
        a, b = _numbers(op, left, right, pos)
        if op == "-":
            return VNumber(a - b)
        if op == "*":
            return VNumber(a * b)
        if op == "/":
            if b == 0.0:
                raise EvaluationError("division by zero", pos)
            return VNumber(a / b)
        if b == 0.0 or math.isinf(a):
            return VNumber(float("nan"))
        return VNumber(math.fmod(a, b))

    if op in ("<", ">", "<=", ">="):
        a, b = _numbers(op, left, right, pos)
        if op == "<":
            return VBool(a < b)
        if op == ">":
            return VBool(a > b)
        if op == "<=":
            return VBool(a <= b)
        return VBool(a >= b)

    raise EvaluationError(f"unknown operator '{op}'", pos)


def eval_unary(op: str, operand: Value, *, pos: Pos | None = None) -> Value:
    if op == "not":
        return VBool(not is_truthy(operand))
    if op in ("-", "+"):
        if not isinstance(operand, VNumber):
            raise EvaluationError(
                f"unsupported operand type for unary '{op}': {operand.kind()}", pos
            )
        if op == "-":
            return VNumber(-operand.value)
        return VNumber(operand.value)
    raise EvaluationError(f"unknown operator '{op}'", pos)
