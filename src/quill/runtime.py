from __future__ import annotations

import importlib
import logging
from typing import Dict, List, Optional

from .types import (
    QNothing, QBool, QInt, QFloat, QString, QRange, QFn, QBuiltin,
    QValue, Frame, OutputSink, Builtins, BuiltinFn,
    QuillRuntimeError, QuillTypeError, QuillArityError, QuillNameError,
    QuillIndexError, QuillZeroStepError, QuillZeroDivisionError,
    QuillRecursionError, QuillAssertionError,
    QuillReturnSignal, QuillBreakSignal, QuillContinueSignal,
    is_q_value, type_name,
)

logger = logging.getLogger(__name__)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("quill.stdlib")
    _STDLIB_INITIALIZED = True
    logger.debug("stdlib loaded: %s", ", ".join(sorted(Builtins.stdlib_functions)))

def register_stdlib(name: str, *, arity: Optional[int] = None):
    def dec(fn: BuiltinFn):
        Builtins.stdlib_functions[name] = QBuiltin(name=name, fn=fn, arity=arity)
        return fn

    return dec

def make_root_frame(
    source: Optional[str] = None,
    emit: Optional[OutputSink] = None,
    builtins: Optional[Dict[str, QBuiltin]] = None,
) -> Frame:
    """Root frame holding the builtins; programs run in a child of it."""
    init_stdlib()
    root = Frame(source=source, emit=emit)
    Builtins.install(root, builtins)

    return root

def _ensure_q_value(value: object) -> QValue:
    if value is None:
        return QNothing()
    if is_q_value(value):
        return value
    raise QuillTypeError(f"Unexpected value type {type(value).__name__}")

def call_value(callee: QValue, args: List[QValue], caller_frame: Frame) -> QValue:
    match callee:
        case QFn():
            return call_fn(callee, args)
        case QBuiltin(name=name, fn=fn, arity=arity):
            if arity is not None and len(args) != arity:
                raise QuillArityError(name, arity, len(args))
            return _ensure_q_value(fn(caller_frame, args))
        case _:
            raise QuillTypeError(f"{type_name(callee)} value is not callable")

def call_fn(fn: QFn, args: List[QValue]) -> QValue:
    """
    Call a user function:
    - arity must match len(fn.params) exactly
    - a fresh child of the captured frame holds the parameters and body-level lets
    - `return` unwinds to here; a body that never returns yields nothing
    - arrow bodies yield their expression's value
    """
    from .evaluator import eval_node  # local import to avoid cycle
    from .eval.blocks import eval_block_in

    label = fn.name or "lambda"

    if len(args) != len(fn.params):
        raise QuillArityError(label, len(fn.params), len(args))

    callee_frame = Frame(parent=fn.frame)

    for name, val in zip(fn.params, args):
        callee_frame.define(name, val)

    if fn.body.data == 'arrowbody':
        return _ensure_q_value(eval_node(fn.body.children[0], callee_frame))

    try:
        eval_block_in(fn.body, callee_frame, eval_node)
    except QuillReturnSignal as signal:
        return signal.value

    return QNothing()

__all__ = [
    "QNothing", "QBool", "QInt", "QFloat", "QString", "QRange", "QFn", "QBuiltin",
    "QValue", "Frame", "Builtins",
    "QuillRuntimeError", "QuillTypeError", "QuillArityError", "QuillNameError",
    "QuillIndexError", "QuillZeroStepError", "QuillZeroDivisionError",
    "QuillRecursionError", "QuillAssertionError",
    "QuillReturnSignal", "QuillBreakSignal", "QuillContinueSignal",
    "init_stdlib", "register_stdlib", "make_root_frame", "call_value", "call_fn",
    "type_name",
]
