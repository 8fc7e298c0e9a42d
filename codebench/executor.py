"""In-process Python evaluation with scoped output and input redirection."""

from __future__ import annotations

import ast
import asyncio
import builtins
import io
import sys
import threading
import traceback
import warnings
from contextlib import ExitStack, contextmanager, redirect_stderr, redirect_stdout
from types import CodeType
from typing import Callable, Iterator

from codebench.models import (
    Diagnostic,
    ExecutionReport,
    ExecutionRequest,
    ReportStatus,
    Severity,
    StrategyKind,
)
from codebench.output_sink import STDERR, STDOUT, WARNING, OutputSink

_FILENAME = "<main>"
NO_OUTPUT_MESSAGE = "Python executed successfully (no output)"

Prompt = Callable[[str], str]

# sys.stdout, builtins.input and the warnings hook are process-wide
_REDIRECT_LOCK = threading.Lock()


class DirectEvaluationStrategy:
    """Runs Python source inside the host interpreter, on a worker thread.

    The event loop stays free while the guest runs; the guest itself cannot
    be interrupted once started.
    """

    kind = StrategyKind.DIRECT

    def __init__(self, prompt: Prompt | None = None) -> None:
        self._prompt = prompt

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        return await asyncio.to_thread(evaluate, request.source, request.stdin, self._prompt)


# ---------------------------------------------------------------------------
# Module-level functions
# ---------------------------------------------------------------------------


def evaluate(source: str, stdin: str | None = None, prompt: Prompt | None = None) -> ExecutionReport:
    """Run *source* in a fresh namespace and report its output.

    If the last top-level statement is an expression its value is the
    program's return value. ``sys.stdout``, ``sys.stderr``, the warnings hook
    and (when *stdin* or *prompt* is given) ``input``/``sys.stdin`` are redirected for the
    duration of the call only.
    """
    try:
        body, tail = _split_trailing_expression(source)
    except (SyntaxError, ValueError) as e:
        return ExecutionReport.error(
            f"Python Error: {_describe_syntax_error(e)}",
            metadata={"error_kind": "guest-error"},
        )

    sink = OutputSink()
    namespace: dict = {"__name__": "__main__", "__builtins__": builtins}
    try:
        with _REDIRECT_LOCK, _redirected_diagnostics(sink), _input_provider(sink, stdin, prompt):
            exec(body, namespace)
            result = eval(tail, namespace) if tail is not None else None
            if result is not None:
                sink.return_value(result)
    except SystemExit as e:
        if e.code in (None, 0):
            return sink.to_report(ReportStatus.SUCCESS, NO_OUTPUT_MESSAGE)
        return _failure(sink, f"Program exited with status {e.code}", None)
    except BaseException as e:  # KeyboardInterrupt, GeneratorExit and other guest raises
        return _failure(sink, f"Python Error: {type(e).__name__}: {e}", e)

    return sink.to_report(ReportStatus.SUCCESS, NO_OUTPUT_MESSAGE)


def _split_trailing_expression(source: str) -> tuple[CodeType, CodeType | None]:
    tree = ast.parse(source, filename=_FILENAME, mode="exec")
    tail = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = tree.body.pop()
        tail = compile(ast.Expression(last.value), _FILENAME, "eval")
    return compile(tree, _FILENAME, "exec"), tail


def _describe_syntax_error(error: Exception) -> str:
    if isinstance(error, SyntaxError):
        return f"SyntaxError: {error.msg} (line {error.lineno})"
    return f"{type(error).__name__}: {error}"


def _failure(sink: OutputSink, message: str, error: Exception | None) -> ExecutionReport:
    captured = sink.text()
    diagnostics = ()
    if error is not None:
        guest_frames = [f for f in traceback.extract_tb(error.__traceback__) if f.filename == _FILENAME]
        if guest_frames:
            diagnostics = (Diagnostic(Severity.ERROR, f"Raised at line {guest_frames[-1].lineno}"),)
    return ExecutionReport.error(
        f"{captured}\n{message}" if captured else message,
        diagnostics=diagnostics,
        metadata={"error_kind": "guest-error"},
    )


@contextmanager
def _redirected_diagnostics(sink: OutputSink) -> Iterator[None]:
    def _show(message, category, filename, lineno, file=None, line=None):
        sink.line(WARNING, f"{category.__name__}: {message}")

    with ExitStack() as stack:
        stack.enter_context(redirect_stdout(sink.stream(STDOUT)))
        stack.enter_context(redirect_stderr(sink.stream(STDERR)))
        stack.enter_context(warnings.catch_warnings())
        warnings.simplefilter("always")
        warnings.showwarning = _show
        yield


def _terminal_prompt(message: str) -> str:
    """Blocking read from the real terminal, bypassing any redirection."""
    sys.__stdout__.write(message)
    sys.__stdout__.flush()
    line = sys.__stdin__.readline()
    if not line:
        raise EOFError("EOF when reading a line")
    return line.rstrip("\n")


@contextmanager
def _input_provider(sink: OutputSink, stdin: str | None, prompt: Prompt | None) -> Iterator[None]:
    if stdin is None and prompt is None:
        yield
        return

    buffer = io.StringIO(stdin or "")
    fallback = prompt or _terminal_prompt

    def _input(message: object = "") -> str:
        line = buffer.readline()
        if not line:
            return fallback(str(message))
        if message:
            sink.write(STDOUT, str(message))
        return line.rstrip("\n")

    saved_input, saved_stdin = builtins.input, sys.stdin
    builtins.input = _input
    sys.stdin = buffer
    try:
        yield
    finally:
        builtins.input = saved_input
        sys.stdin = saved_stdin
