from __future__ import annotations

from typing import Any, Callable, List, Optional

from ..runtime import (
    Frame,
    QInt,
    QRange,
    QString,
    QValue,
    QuillIndexError,
    QuillTypeError,
    QuillZeroStepError,
    type_name,
)
from ..tree import tree_label
from .helpers import require_int

EvalFunc = Callable[[Any, Frame], QValue]

def eval_range(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QRange:
    start_node, stop_node = children
    start = eval_func(start_node, frame)
    stop = eval_func(stop_node, frame)

    if not isinstance(start, QInt) or not isinstance(stop, QInt):
        raise QuillTypeError(f"Range bounds must be Int; got {type_name(start)}..{type_name(stop)}")

    return QRange(start.value, stop.value)

def eval_index(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QValue:
    target_node, index_node = children
    target = eval_func(target_node, frame)
    index = require_int(eval_func(index_node, frame), "Index")

    return index_value(target, index)

def index_value(target: QValue, index: int) -> QValue:
    """Single-element lookup; negative indices count from the end."""
    match target:
        case QString(value=s):
            return QString(s[_normalize_index(index, len(s), "String")])
        case QRange():
            rng = target.as_range()
            return QInt(rng[_normalize_index(index, len(rng), "Range")])
        case _:
            raise QuillTypeError(f"{type_name(target)} value is not indexable")

def _normalize_index(index: int, length: int, kind: str) -> int:
    pos = index + length if index < 0 else index

    if pos < 0 or pos >= length:
        raise QuillIndexError(f"{kind} index {index} out of range for length {length}")

    return pos

def eval_slice(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QValue:
    target_node, *arm_nodes = children
    target = eval_func(target_node, frame)
    start, stop, step = (_eval_arm(node, frame, eval_func, label) for node, label in zip(arm_nodes, ("start", "stop", "step")))

    return slice_value(target, start, stop, step)

def _eval_arm(node: Any, frame: Frame, eval_func: EvalFunc, label: str) -> Optional[int]:
    if tree_label(node) == 'emptyarm':
        return None

    return require_int(eval_func(node, frame), f"Slice {label}")

def slice_value(target: QValue, start: Optional[int], stop: Optional[int], step: Optional[int]) -> QValue:
    """Python slice semantics: clamped bounds, negative indices and steps."""
    if step == 0:
        raise QuillZeroStepError()

    sl = slice(start, stop, step)

    match target:
        case QString(value=s):
            return QString(s[sl])
        case QRange():
            rng = target.as_range()[sl]
            return QRange(rng.start, rng.stop, rng.step)
        case _:
            raise QuillTypeError(f"{type_name(target)} value cannot be sliced")

def iter_values(value: QValue):
    """Iteration protocol for `for`: String yields characters, Range yields Ints."""
    match value:
        case QString(value=s):
            for ch in s:
                yield QString(ch)
        case QRange():
            for i in value.as_range():
                yield QInt(i)
        case _:
            raise QuillTypeError(f"{type_name(value)} value is not iterable")
