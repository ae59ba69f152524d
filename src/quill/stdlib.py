"""Built-in functions (print, len, str) registered via quill.runtime."""

from __future__ import annotations

from typing import List

from .runtime import register_stdlib, QInt, QNothing, QRange, QString, QValue, QuillTypeError, type_name
from .utils import stringify

@register_stdlib("print")
def std_print(frame, args: List[QValue]) -> QNothing:
    line = " ".join(stringify(arg) for arg in args)

    if frame.emit is not None:
        frame.emit(line)
    else:
        print(line)

    return QNothing()

@register_stdlib("len", arity=1)
def std_len(_frame, args: List[QValue]) -> QInt:
    match args[0]:
        case QString(value=s):
            return QInt(len(s))
        case QRange() as rng:
            return QInt(len(rng))
        case other:
            raise QuillTypeError(f"len expects a String or Range; got {type_name(other)}")

@register_stdlib("str", arity=1)
def std_str(_frame, args: List[QValue]) -> QString:
    return QString(stringify(args[0]))
