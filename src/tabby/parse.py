"""Tabby parser: recursive descent over the token list, one method per production."""

from __future__ import annotations

from .ast import (
    Assignment,
    BinaryOp,
    Block,
    Boolean,
    Expr,
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
from .tokens import (
    TK_ASSIGN,
    TK_COLON,
    TK_COMMA,
    TK_DEDENT,
    TK_EOF,
    TK_IDENT,
    TK_INDENT,
    TK_LPAREN,
    TK_NEWLINE,
    TK_NUMBER,
    TK_OP,
    TK_RPAREN,
    TK_STRING,
    Token,
)

EQUALITY_OPS: set[str] = {"==", "!="}

COMPARE_OPS: set[str] = {"<", ">", "<=", ">="}

ADDITIVE_OPS: set[str] = {"+", "-"}

MULTIPLICATIVE_OPS: set[str] = {"*", "/", "%"}


class ParseError(TabbyError):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        super().__init__(msg, line, col)


class Parser:
    """Recursive descent parser for Tabby.

    NEWLINE tokens only separate statements, so advance() skips them and
    no grammar rule ever sees one as the current token.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        self._skip_newlines()

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self._eof()
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self._eof()
        return self.tokens[idx]

    def _eof(self) -> Token:
        if self.tokens:
            last = self.tokens[len(self.tokens) - 1]
            return Token(TK_EOF, "", last.line, last.col)
        return Token(TK_EOF, "", 1, 1)

    def advance(self) -> Token:
        tok = self.current()
        self.pos += 1
        self._skip_newlines()
        return tok

    def _skip_newlines(self) -> None:
        while self.pos < len(self.tokens) and self.tokens[self.pos].type == TK_NEWLINE:
            self.pos += 1

    def at(self, type_: str) -> bool:
        return self.current().type == type_

    def at_op(self, ops: set[str]) -> bool:
        tok = self.current()
        return tok.type == TK_OP and tok.value in ops

    def expect(self, type_: str) -> Token:
        tok = self.current()
        if tok.type != type_:
            raise self.error(
                "expected " + _describe_type(type_) + ", got " + tok.describe()
            )
        return self.advance()

    def expect_ident(self, what: str) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected " + what + ", got " + tok.describe())
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    # ── Top Level ────────────────────────────────────────────

    def parse(self) -> Program:
        pos = self._pos()
        statements: list[Node] = []
        while not self.at(TK_EOF):
            statements.append(self.parse_statement())
        return Program(statements, pos)

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Node:
        tok = self.current()
        if tok.type == "if":
            return self.parse_if_statement()
        if tok.type == "while":
            return self.parse_while_loop()
        if tok.type == "def":
            return self.parse_function_def()
        if tok.type == "return":
            return self.parse_return()
        if tok.type == "print":
            return self.parse_print()
        if tok.type == TK_IDENT and self.peek(1).type == TK_ASSIGN:
            return self.parse_assignment()
        return self.parse_expression_statement()

    def parse_if_statement(self) -> IfStatement:
        pos = self._pos()
        self.expect("if")
        condition = self.parse_expression()
        self.expect(TK_COLON)
        then_block = self.parse_block()
        else_block: Block | None = None
        if self.at("else"):
            self.advance()
            self.expect(TK_COLON)
            else_block = self.parse_block()
        return IfStatement(condition, then_block, else_block, pos)

    def parse_while_loop(self) -> WhileLoop:
        pos = self._pos()
        self.expect("while")
        condition = self.parse_expression()
        self.expect(TK_COLON)
        body = self.parse_block()
        return WhileLoop(condition, body, pos)

    def parse_function_def(self) -> FunctionDef:
        pos = self._pos()
        self.expect("def")
        name_tok = self.expect_ident("function name")
        self.expect(TK_LPAREN)
        params: list[str] = []
        if not self.at(TK_RPAREN):
            params.append(self.expect_ident("parameter name").value)
            while self.at(TK_COMMA):
                self.advance()
                params.append(self.expect_ident("parameter name").value)
        self.expect(TK_RPAREN)
        self.expect(TK_COLON)
        body = self.parse_block()
        return FunctionDef(name_tok.value, params, body, pos)

    def parse_return(self) -> Return:
        pos = self._pos()
        self.expect("return")
        return Return(self.parse_expression(), pos)

    def parse_print(self) -> Print:
        pos = self._pos()
        self.expect("print")
        return Print(self.parse_expression(), pos)

    def parse_assignment(self) -> Assignment:
        pos = self._pos()
        name_tok = self.expect_ident("variable name")
        self.expect(TK_ASSIGN)
        return Assignment(name_tok.value, self.parse_expression(), pos)

    def parse_expression_statement(self) -> Statement:
        pos = self._pos()
        return Statement(self.parse_expression(), pos)

    def parse_block(self) -> Block:
        """Block = INDENT Statement* DEDENT | Statement"""
        pos = self._pos()
        if not self.at(TK_INDENT):
            return Block([self.parse_statement()], pos)
        self.expect(TK_INDENT)
        statements: list[Node] = []
        while not self.at(TK_DEDENT):
            if self.at(TK_EOF):
                raise self.error("expected dedent, got end of input")
            statements.append(self.parse_statement())
        self.expect(TK_DEDENT)
        return Block(statements, pos)

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Expr:
        return self.parse_or()

    def parse_or(self) -> Expr:
        """Or = And ( 'or' And )*"""
        left = self.parse_and()
        while self.at("or"):
            pos = self._pos()
            self.advance()
            right = self.parse_and()
            left = BinaryOp(left, "or", right, pos)
        return left

    def parse_and(self) -> Expr:
        """And = Equality ( 'and' Equality )*"""
        left = self.parse_equality()
        while self.at("and"):
            pos = self._pos()
            self.advance()
            right = self.parse_equality()
            left = BinaryOp(left, "and", right, pos)
        return left

    def parse_equality(self) -> Expr:
        left = self.parse_comparison()
        while self.at_op(EQUALITY_OPS):
            pos = self._pos()
            op = self.advance().value
            right = self.parse_comparison()
            left = BinaryOp(left, op, right, pos)
        return left

    def parse_comparison(self) -> Expr:
        left = self.parse_additive()
        while self.at_op(COMPARE_OPS):
            pos = self._pos()
            op = self.advance().value
            right = self.parse_additive()
            left = BinaryOp(left, op, right, pos)
        return left

    def parse_additive(self) -> Expr:
        left = self.parse_multiplicative()
        while self.at_op(ADDITIVE_OPS):
            pos = self._pos()
            op = self.advance().value
            right = self.parse_multiplicative()
            left = BinaryOp(left, op, right, pos)
        return left

    def parse_multiplicative(self) -> Expr:
        left = self.parse_unary()
        while self.at_op(MULTIPLICATIVE_OPS):
            pos = self._pos()
            op = self.advance().value
            right = self.parse_unary()
            left = BinaryOp(left, op, right, pos)
        return left

    def parse_unary(self) -> Expr:
        """Unary = ( '-' | '+' | 'not' ) Unary | Atom"""
        pos = self._pos()
        if self.at_op(ADDITIVE_OPS):
            op = self.advance().value
            return UnaryOp(op, self.parse_unary(), pos)
        if self.at("not"):
            self.advance()
            return UnaryOp("not", self.parse_unary(), pos)
        return self.parse_atom()

    def parse_atom(self) -> Expr:
        pos = self._pos()
        tok = self.current()
        if tok.type == TK_NUMBER:
            self.advance()
            return Number(float(tok.value), pos)
        if tok.type == TK_STRING:
            self.advance()
            return String(tok.value, pos)
        if tok.type == "true":
            self.advance()
            return Boolean(True, pos)
        if tok.type == "false":
            self.advance()
            return Boolean(False, pos)
        if tok.type == TK_IDENT:
            self.advance()
            if self.at(TK_LPAREN):
                return FunctionCall(tok.value, self.parse_call_args(), pos)
            return Variable(tok.value, pos)
        if tok.type == TK_LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(TK_RPAREN)
            return expr
        raise self.error("unexpected " + tok.describe())

    def parse_call_args(self) -> list[Expr]:
        self.expect(TK_LPAREN)
        args: list[Expr] = []
        if self.at(TK_RPAREN):
            self.advance()
            return args
        args.append(self.parse_expression())
        while self.at(TK_COMMA):
            self.advance()
            args.append(self.parse_expression())
        self.expect(TK_RPAREN)
        return args


def _describe_type(type_: str) -> str:
    names = {
        TK_ASSIGN: "'='",
        TK_COLON: "':'",
        TK_COMMA: "','",
        TK_LPAREN: "'('",
        TK_RPAREN: "')'",
        TK_INDENT: "indent",
        TK_DEDENT: "dedent",
        TK_EOF: "end of input",
    }
    if type_ in names:
        return names[type_]
    return "'" + type_ + "'"
