from __future__ import annotations

from ..runtime import QBool, QFloat, QInt, QNothing, QRange, QString, QValue, QuillTypeError, type_name

def is_truthy(val: QValue) -> bool:
    match val:
        case QBool(value=b):
            return b
        case QNothing():
            return False
        case QInt(value=num) | QFloat(value=num):
            return num != 0
        case QString(value=s):
            return bool(s)
        case QRange():
            return len(val) > 0
        case _:
            return True

def require_int(value: QValue, context: str) -> int:
    if isinstance(value, QInt):
        return value.value

    raise QuillTypeError(f"{context} must be an Int; got {type_name(value)}")
