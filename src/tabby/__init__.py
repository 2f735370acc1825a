"""Tabby lexer, parser and interpreter: public API."""

from __future__ import annotations

from .ast import Program
from .errors import TabbyError as TabbyError
from .parse import ParseError as ParseError, Parser
from .runtime import (
    EvaluationError as EvaluationError,
    Interpreter as Interpreter,
    Value as Value,
)
from .tokens import LexicalError as LexicalError, Token as Token, tokenize

__version__ = "0.1.0"


def parse(source: str) -> Program:
    """Parse Tabby source code into a Program AST."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse()


def run(source: str, interpreter: Interpreter | None = None) -> Value:
    """Parse and evaluate source, returning the value of the last statement."""
    program = parse(source)
    if interpreter is None:
        interpreter = Interpreter()
    return interpreter.interpret(program)


__all__ = [
    "EvaluationError",
    "Interpreter",
    "LexicalError",
    "ParseError",
    "TabbyError",
    "Token",
    "Value",
    "parse",
    "run",
    "tokenize",
]
