"""Tabby tokenizer: lexes indentation-structured source one token at a time."""

from __future__ import annotations

from .errors import TabbyError

# Token type constants
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_ASSIGN = "ASSIGN"
TK_LPAREN = "LPAREN"
TK_RPAREN = "RPAREN"
TK_LBRACKET = "LBRACKET"
TK_RBRACKET = "RBRACKET"
TK_COMMA = "COMMA"
TK_COLON = "COLON"
TK_NEWLINE = "NEWLINE"
TK_INDENT = "INDENT"
TK_DEDENT = "DEDENT"
TK_EOF = "EOF"

# Keywords lex to a token whose type is the word itself.
KEYWORDS: set[str] = {
    "and",
    "def",
    "else",
    "false",
    "if",
    "not",
    "or",
    "print",
    "return",
    "true",
    "while",
}

# Operators that may be followed by '=' to form a two-character operator.
# The value is the token for the one-character fallback.
PREFIX_OPS: dict[str, tuple[str, str]] = {
    "=": (TK_ASSIGN, "="),
    "!": ("not", "!"),
    "<": (TK_OP, "<"),
    ">": (TK_OP, ">"),
}

SINGLE_CHARS: dict[str, str] = {
    "+": TK_OP,
    "-": TK_OP,
    "*": TK_OP,
    "/": TK_OP,
    "%": TK_OP,
    "(": TK_LPAREN,
    ")": TK_RPAREN,
    "[": TK_LBRACKET,
    "]": TK_RBRACKET,
    ",": TK_COMMA,
    ":": TK_COLON,
}


class LexicalError(TabbyError):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        super().__init__(msg, line, col)


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

    def describe(self) -> str:
        """Human-readable form used in parse errors."""
        if self.type == TK_EOF:
            return "end of input"
        if self.type in (TK_NEWLINE, TK_INDENT, TK_DEDENT):
            return self.type.lower()
        if self.type == TK_STRING:
            return '"' + self.value + '"'
        return "'" + self.value + "'"

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


class Lexer:
    """Produces tokens lazily, synthesizing NEWLINE/INDENT/DEDENT from leading spaces.

    The indentation stack starts at [0]. A dedent that closes several levels
    at once is drained across successive next_token() calls: the target
    level is remembered in _dedent_to until the stack top reaches it.
    """

    def __init__(self, source: str):
        self.source: str = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1
        self.indent_stack: list[int] = [0]
        self._dedent_to: int | None = None

    # ── Cursor ───────────────────────────────────────────────

    def current(self) -> str:
        if self.pos >= len(self.source):
            return ""
        return self.source[self.pos]

    def peek(self) -> str:
        if self.pos + 1 >= len(self.source):
            return ""
        return self.source[self.pos + 1]

    def advance(self) -> None:
        if self.current() == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        self.pos += 1

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    # ── Tokens ───────────────────────────────────────────────

    def next_token(self) -> Token:
        if self._dedent_to is not None:
            return self._drain_dedent()

        if self.current() == "\n":
            return self._indentation()

        while not self.at_end() and self.current() != "\n" and self.current().isspace():
            self.advance()

        if self.at_end():
            if len(self.indent_stack) > 1:
                self.indent_stack.pop()
                return Token(TK_DEDENT, "", self.line, self.col)
            return Token(TK_EOF, "", self.line, self.col)

        c = self.current()

        # Line comment: consumed up to, not including, the newline
        if c == "#":
            while not self.at_end() and self.current() != "\n":
                self.advance()
            return self.next_token()

        if c == "\n":
            return self._indentation()

        if c == '"':
            return self._string()

        if _is_digit(c):
            return self._number()

        if _is_alpha(c):
            return self._identifier()

        line = self.line
        col = self.col

        if c in PREFIX_OPS:
            if self.peek() == "=":
                self.advance()
                self.advance()
                return Token(TK_OP, c + "=", line, col)
            self.advance()
            type_, value = PREFIX_OPS[c]
            return Token(type_, value, line, col)

        if c in SINGLE_CHARS:
            self.advance()
            return Token(SINGLE_CHARS[c], c, line, col)

        raise LexicalError("unexpected character: " + repr(c), line, col)

    def _indentation(self) -> Token:
        """Consume a newline and the next line's leading spaces."""
        self.advance()
        if self.current() == "\r":
            self.advance()
        spaces = 0
        while not self.at_end():
            c = self.current()
            if c == " ":
                spaces += 1
                self.advance()
            elif c == "\r":
                self.advance()
            elif c == "\n":
                # Blank line
                spaces = 0
                self.advance()
            elif c == "#":
                # Comment-only line counts as blank
                while not self.at_end() and self.current() != "\n":
                    self.advance()
                spaces = 0
            else:
                break
        if self.at_end():
            spaces = 0

        line = self.line
        col = self.col
        top = self.indent_stack[-1]
        if spaces > top:
            self.indent_stack.append(spaces)
            return Token(TK_INDENT, "", line, col)
        if spaces < top:
            if self.at_end():
                # End-of-input dedents are emitted by next_token itself.
                self.indent_stack.pop()
                return Token(TK_DEDENT, "", line, col)
            self._dedent_to = spaces
            return self._drain_dedent()
        return Token(TK_NEWLINE, "", line, col)

    def _drain_dedent(self) -> Token:
        target = self._dedent_to
        assert target is not None
        self.indent_stack.pop()
        top = self.indent_stack[-1]
        if top < target:
            self._dedent_to = None
            raise LexicalError("inconsistent dedent", self.line, self.col)
        if top == target:
            self._dedent_to = None
        return Token(TK_DEDENT, "", self.line, self.col)

    def _string(self) -> Token:
        line = self.line
        col = self.col
        self.advance()  # opening "
        chars: list[str] = []
        while not self.at_end() and self.current() != '"':
            chars.append(self.current())
            self.advance()
        if self.at_end():
            raise LexicalError("unterminated string literal", line, col)
        self.advance()  # closing "
        return Token(TK_STRING, "".join(chars), line, col)

    def _number(self) -> Token:
        line = self.line
        col = self.col
        start = self.pos
        seen_dot = False
        while not self.at_end():
            c = self.current()
            if _is_digit(c):
                self.advance()
            elif c == "." and not seen_dot:
                seen_dot = True
                self.advance()
            else:
                break
        return Token(TK_NUMBER, self.source[start : self.pos], line, col)

    def _identifier(self) -> Token:
        line = self.line
        col = self.col
        start = self.pos
        while not self.at_end() and _is_alnum(self.current()):
            self.advance()
        word = self.source[start : self.pos]
        if word in KEYWORDS:
            return Token(word, word, line, col)
        return Token(TK_IDENT, word, line, col)


def tokenize(source: str) -> list[Token]:
    """Tokenize Tabby source into a flat list ending with TK_EOF."""
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == TK_EOF:
            return tokens
