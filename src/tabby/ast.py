"""Tabby AST: parse-time node definitions."""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


def _pos() -> Pos | None:
    """Position field: reported in errors, ignored by equality."""
    return field(default=None, compare=False, repr=False)


# ============================================================
# BASES
# ============================================================


class Node:
    """Base for all AST nodes."""

    pos: Pos | None


class Expr(Node):
    """Base for expression nodes."""


class Stmt(Node):
    """Base for statement nodes."""


# ============================================================
# STRUCTURE
# ============================================================


@dataclass
class Program(Node):
    """Ordered top-level statements."""

    statements: list[Node]
    pos: Pos | None = _pos()


@dataclass
class Block(Node):
    """Indented body, or a single inline statement after ':'."""

    statements: list[Node]
    pos: Pos | None = _pos()


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Number(Expr):
    value: float
    pos: Pos | None = _pos()


@dataclass
class String(Expr):
    value: str
    pos: Pos | None = _pos()


@dataclass
class Boolean(Expr):
    value: bool
    pos: Pos | None = _pos()


@dataclass
class Variable(Expr):
    name: str
    pos: Pos | None = _pos()


@dataclass
class BinaryOp(Expr):
    """left op right; op is the operator text, 'and' or 'or'."""

    left: Expr
    op: str
    right: Expr
    pos: Pos | None = _pos()


@dataclass
class UnaryOp(Expr):
    """Prefix '-', '+' or 'not'."""

    op: str
    operand: Expr
    pos: Pos | None = _pos()


@dataclass
class FunctionCall(Expr):
    name: str
    args: list[Expr]
    pos: Pos | None = _pos()


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Statement(Stmt):
    """A bare expression used as a statement."""

    expr: Expr
    pos: Pos | None = _pos()


@dataclass
class Assignment(Stmt):
    name: str
    value: Expr
    pos: Pos | None = _pos()


@dataclass
class IfStatement(Stmt):
    condition: Expr
    then_block: Block
    else_block: Block | None
    pos: Pos | None = _pos()


@dataclass
class WhileLoop(Stmt):
    condition: Expr
    body: Block
    pos: Pos | None = _pos()


@dataclass
class FunctionDef(Stmt):
    name: str
    params: list[str]
    body: Block
    pos: Pos | None = _pos()


@dataclass
class Return(Stmt):
    expr: Expr
    pos: Pos | None = _pos()


@dataclass
class Print(Stmt):
    expr: Expr
    pos: Pos | None = _pos()
