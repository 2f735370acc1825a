"""Tabby CLI: run .tb files or start an interactive session."""

from __future__ import annotations

import sys
from typing import TextIO

from . import __version__, parse
from .parse import ParseError
from .runtime import EvaluationError, Interpreter, VNull
from .tokens import LexicalError


USAGE: str = """\
tabby [OPTIONS] [FILE]

Run a Tabby (.tb) program. Without FILE, start an interactive session.

Options:
  --version  Show the version and exit
  --help     Show this help message
"""

PROMPT = ">> "
CONTINUATION_PROMPT = ".. "
EXIT_COMMAND = "exit"

# Each Tabby call nests several interpreter frames.
RECURSION_LIMIT = 10000


def report(exc: BaseException, stderr: TextIO) -> None:
    """Write one diagnostic line for a failed program or input."""
    if isinstance(exc, LexicalError):
        kind = "lex error"
    elif isinstance(exc, ParseError):
        kind = "parse error"
    elif isinstance(exc, RecursionError):
        kind = "runtime error"
        exc = EvaluationError("maximum recursion depth exceeded")
    else:
        kind = "runtime error"
    print("tabby: " + kind + ": " + str(exc), file=stderr)


def execute(source: str, interpreter: Interpreter, stderr: TextIO) -> bool:
    """Parse and run source against interpreter. Returns False on error."""
    try:
        program = parse(source)
        interpreter.interpret(program)
    except (LexicalError, ParseError, EvaluationError, RecursionError) as e:
        report(e, stderr)
        return False
    return True


def run_file(filepath: str) -> int:
    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("tabby: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("tabby: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("tabby: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    if not execute(source, Interpreter(sys.stdout), sys.stderr):
        return 1
    return 0


def _read_input(stdin: TextIO, stdout: TextIO) -> str | None:
    """Read one REPL input; a line ending in ':' continues until a blank line."""
    stdout.write(PROMPT)
    stdout.flush()
    line = stdin.readline()
    if line == "":
        return None
    lines = [line.rstrip("\n")]
    if not lines[0].rstrip().endswith(":"):
        return lines[0]
    while True:
        stdout.write(CONTINUATION_PROMPT)
        stdout.flush()
        more = stdin.readline()
        if more == "" or more.strip() == "":
            break
        lines.append(more.rstrip("\n"))
    return "\n".join(lines)


def repl(
    interpreter: Interpreter | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Evaluate inputs one at a time against one long-lived interpreter."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    if interpreter is None:
        interpreter = Interpreter(stdout)
    while True:
        source = _read_input(stdin, stdout)
        if source is None:
            stdout.write("\n")
            return 0
        stripped = source.strip()
        if stripped == EXIT_COMMAND:
            return 0
        if stripped == "":
            continue
        try:
            result = interpreter.interpret(parse(source))
        except (LexicalError, ParseError, EvaluationError, RecursionError) as e:
            report(e, stderr)
            continue
        if not isinstance(result, VNull):
            stdout.write(result.to_string() + "\n")


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)
    filepath: str = ""
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--version":
            print("tabby " + __version__)
            return 0
        elif arg.startswith("-"):
            print("tabby: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("tabby: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2

    if filepath == "":
        return repl()
    return run_file(filepath)


if __name__ == "__main__":
    sys.exit(main())
