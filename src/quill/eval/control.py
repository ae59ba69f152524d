from __future__ import annotations

from typing import Any, Callable

from ..runtime import (
    Frame,
    QNothing,
    QuillAssertionError,
    QuillBreakSignal,
    QuillContinueSignal,
    QuillReturnSignal,
    QuillRuntimeError,
)
from ..utils import stringify as _stringify
from .common import get_source_segment as _get_source_segment, render_expr as _render_expr
from .helpers import is_truthy as _is_truthy

EvalFunc = Callable[[Any, Frame], Any]

def eval_return_stmt(children: list[Any], frame: Frame, eval_func: EvalFunc) -> Any:
    value = eval_func(children[0], frame) if children else QNothing()

    raise QuillReturnSignal(value)

def eval_break_stmt(frame: Frame) -> Any:
    raise QuillBreakSignal()

def eval_continue_stmt(frame: Frame) -> Any:
    raise QuillContinueSignal()

def eval_assert(children: list[Any], frame: Frame, eval_func: EvalFunc) -> Any:
    if not children:
        raise QuillRuntimeError("Malformed assert statement")

    cond_val = eval_func(children[0], frame)

    if _is_truthy(cond_val):
        return QNothing()

    message = f"Assertion failed: {_assert_source_snippet(children[0], frame)}"

    if len(children) > 1:
        msg_val = eval_func(children[1], frame)
        message = _stringify(msg_val)

    raise QuillAssertionError(message)

def _assert_source_snippet(node: Any, frame: Frame) -> str:
    snippet = _get_source_segment(node, frame)

    if snippet is not None:
        return snippet.strip()

    return _render_expr(node)
