"""Host entry points: parse, evaluate, execute and run Quill programs."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional

from .config import Settings
from .evaluator import eval_expr
from .parser_rd import parse_source
from .runtime import (
    Frame,
    QBuiltin,
    QNothing,
    QValue,
    QuillAssertionError,
    QuillRecursionError,
    QuillRuntimeError,
    make_root_frame,
)
from .tree import Node, node_meta

logger = logging.getLogger(__name__)


class Status(Enum):
    OK = "ok"
    RUNTIME_ERROR = "runtime_error"
    ASSERTION_FAILED = "assertion_failed"


@dataclass
class ExecutionOutcome:
    """Result of evaluating a program: final value or error, plus printed lines."""

    status: Status
    value: QValue = field(default_factory=QNothing)
    output: List[str] = field(default_factory=list)
    error: Optional[QuillRuntimeError] = None

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    @property
    def line(self) -> Optional[int]:
        return self.error.line if self.error is not None else None

    @property
    def column(self) -> Optional[int]:
        return self.error.column if self.error is not None else None


@contextmanager
def _recursion_limit(limit: int) -> Iterator[None]:
    previous = sys.getrecursionlimit()

    if limit > previous:
        sys.setrecursionlimit(limit)

    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def parse(source: str, settings: Optional[Settings] = None) -> Node:
    """Parse source into a program tree; raises LexError or ParseError."""
    settings = settings or Settings.from_env()

    with _recursion_limit(settings.recursion_limit):
        ast = parse_source(source)

    logger.debug("parsed %d top-level statement(s)", len(ast.children))
    return ast


def _evaluate_raw(
    ast: Node,
    source: Optional[str],
    lines: List[str],
    builtins: Optional[Dict[str, QBuiltin]],
    out: Optional[Callable[[str], None]],
    settings: Settings,
) -> QValue:
    def emit(line: str) -> None:
        lines.append(line)
        if out is not None:
            out(line)
        if settings.echo_output:
            print(line)

    root = make_root_frame(source=source, emit=emit, builtins=builtins)
    program_frame = Frame(parent=root)

    with _recursion_limit(settings.recursion_limit):
        try:
            return eval_expr(ast, program_frame)
        except RecursionError:
            err = QuillRecursionError()
            meta = node_meta(ast)
            if meta is not None:
                err.q_meta = meta
            raise err from None


def evaluate(
    ast: Node,
    builtins: Optional[Dict[str, QBuiltin]] = None,
    out: Optional[Callable[[str], None]] = None,
    *,
    source: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ExecutionOutcome:
    """
    Evaluate a parsed program. Runtime errors are captured in the outcome rather
    than raised; printed lines are collected in order and forwarded to `out`.
    """
    settings = settings or Settings.from_env()
    lines: List[str] = []

    try:
        value = _evaluate_raw(ast, source, lines, builtins, out, settings)
    except QuillAssertionError as exc:
        logger.debug("assertion failed: %s", exc)
        return ExecutionOutcome(Status.ASSERTION_FAILED, output=lines, error=exc)
    except QuillRuntimeError as exc:
        logger.debug("runtime error (%s): %s", exc.kind, exc)
        return ExecutionOutcome(Status.RUNTIME_ERROR, output=lines, error=exc)

    logger.debug("program finished with %d output line(s)", len(lines))
    return ExecutionOutcome(Status.OK, value=value, output=lines)


def execute(
    source: str,
    builtins: Optional[Dict[str, QBuiltin]] = None,
    out: Optional[Callable[[str], None]] = None,
    *,
    settings: Optional[Settings] = None,
) -> ExecutionOutcome:
    """Parse then evaluate; lex and parse errors propagate before anything runs."""
    settings = settings or Settings.from_env()
    ast = parse(source, settings)
    return evaluate(ast, builtins, out, source=source, settings=settings)


def run(source: str, out: Optional[Callable[[str], None]] = None, settings: Optional[Settings] = None) -> QValue:
    """Run a program and return its last statement's value; runtime errors are raised."""
    settings = settings or Settings.from_env()
    ast = parse(source, settings)
    return _evaluate_raw(ast, source, [], None, out, settings)
