"""Base error for Tabby lexing, parsing and evaluation."""

from __future__ import annotations


class TabbyError(Exception):
    """Error with an optional 1-indexed source location."""

    def __init__(self, msg: str, line: int | None = None, col: int | None = None):
        self.msg: str = msg
        self.line: int | None = line
        self.col: int | None = col
        if line is None or col is None:
            super().__init__(msg)
        else:
            super().__init__(msg + " at line " + str(line) + " col " + str(col))
