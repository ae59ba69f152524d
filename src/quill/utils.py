from __future__ import annotations

from .types import QBool, QBuiltin, QFloat, QFn, QInt, QNothing, QRange, QString, QValue


def q_equals(lhs: QValue, rhs: QValue) -> bool:
    """Structural equality; Int and Float compare numerically, functions by identity."""
    match (lhs, rhs):
        case (QNothing(), QNothing()):
            return True
        case (QBool(value=a), QBool(value=b)):
            return a == b
        case (QInt(value=a) | QFloat(value=a), QInt(value=b) | QFloat(value=b)):
            return a == b
        case (QString(value=a), QString(value=b)):
            return a == b
        case (QRange(), QRange()):
            return lhs.as_range() == rhs.as_range()
        case (QFn() | QBuiltin(), QFn() | QBuiltin()):
            return lhs is rhs
        case _:
            return False


def stringify(value: QValue) -> str:
    """Render a value the way `print` shows it."""
    match value:
        case QString(value=s):
            return s
        case QBool(value=b):
            return "true" if b else "false"
        case QNothing():
            return "nothing"
        case QInt() | QFloat() | QRange() | QFn() | QBuiltin():
            return repr(value)
        case None:
            return "nothing"
        case _:
            return str(value)
