from __future__ import annotations

import operator
from typing import Callable, List

from lark import Token

from ..runtime import (
    Frame,
    QBool,
    QFloat,
    QInt,
    QString,
    QValue,
    QuillRuntimeError,
    QuillTypeError,
    QuillZeroDivisionError,
    type_name,
)
from ..tree import Node, Tree
from ..utils import q_equals
from .helpers import is_truthy

EvalFunc = Callable[[Node, Frame], QValue]

_OP_SYMBOLS = {
    'PLUS': '+',
    'MINUS': '-',
    'STAR': '*',
    'SLASH': '/',
    'EQ': '==',
    'NEQ': '!=',
    'LT': '<',
    'GT': '>',
    'LTE': '<=',
    'GTE': '>=',
}

_ORDERING = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
}

_ARITH = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
}

def as_op(x: Node) -> str:
    if isinstance(x, Token):
        return _OP_SYMBOLS.get(x.type, str(x.value))

    if isinstance(x, Tree) and x.children:
        return as_op(x.children[0])

    raise QuillRuntimeError(f"Expected operator token, got {x!r}")

def eval_unary(op_node: Node, rhs_node: Node, frame: Frame, eval_func: EvalFunc) -> QValue:
    rhs = eval_func(rhs_node, frame)

    match op_node:
        case Token(type='MINUS'):
            match rhs:
                case QInt(value=v):
                    return QInt(-v)
                case QFloat(value=v):
                    return QFloat(-v)
                case _:
                    raise QuillTypeError(f"Unary '-' expects a number; got {type_name(rhs)}")
        case Token(type='NOT'):
            return QBool(not is_truthy(rhs))
        case _:
            raise QuillRuntimeError("Unsupported unary op")

def eval_binary(children: List[Node], frame: Frame, eval_func: EvalFunc) -> QValue:
    lhs_node, op_node, rhs_node = children
    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)

    return apply_binary_operator(as_op(op_node), lhs, rhs)

def apply_binary_operator(op: str, lhs: QValue, rhs: QValue) -> QValue:
    match op:
        case '==':
            return QBool(q_equals(lhs, rhs))
        case '!=':
            return QBool(not q_equals(lhs, rhs))
        case '<' | '>' | '<=' | '>=':
            return QBool(_compare_values(op, lhs, rhs))
        case '+':
            if isinstance(lhs, QString) and isinstance(rhs, QString):
                return QString(lhs.value + rhs.value)
            return _arith(op, lhs, rhs)
        case '*':
            repeated = _repeat_string(lhs, rhs)
            if repeated is not None:
                return repeated
            return _arith(op, lhs, rhs)
        case '-':
            return _arith(op, lhs, rhs)
        case '/':
            return _divide(lhs, rhs)

    raise QuillRuntimeError(f"Unknown operator {op}")

def _operand_error(op: str, lhs: QValue, rhs: QValue) -> QuillTypeError:
    return QuillTypeError(f"Unsupported operand types for {op}: {type_name(lhs)} and {type_name(rhs)}")

def _arith(op: str, lhs: QValue, rhs: QValue) -> QValue:
    fn = _ARITH[op]

    match (lhs, rhs):
        case (QInt(value=a), QInt(value=b)):
            return QInt(fn(a, b))
        case (QInt(value=a) | QFloat(value=a), QInt(value=b) | QFloat(value=b)):
            return QFloat(fn(float(a), float(b)))

    raise _operand_error(op, lhs, rhs)

def _divide(lhs: QValue, rhs: QValue) -> QFloat:
    match (lhs, rhs):
        case (QInt(value=a) | QFloat(value=a), QInt(value=b) | QFloat(value=b)):
            if b == 0:
                raise QuillZeroDivisionError()
            return QFloat(a / b)

    raise _operand_error('/', lhs, rhs)

def _repeat_string(lhs: QValue, rhs: QValue) -> QString | None:
    match (lhs, rhs):
        case (QString(value=s), QInt(value=n)) | (QInt(value=n), QString(value=s)):
            return QString(s * n) if n > 0 else QString("")

    return None

def _compare_values(op: str, lhs: QValue, rhs: QValue) -> bool:
    fn = _ORDERING[op]

    match (lhs, rhs):
        case (QInt(value=a) | QFloat(value=a), QInt(value=b) | QFloat(value=b)):
            return fn(a, b)
        case (QString(value=a), QString(value=b)):
            return fn(a, b)

    raise QuillTypeError(f"Cannot compare {type_name(lhs)} and {type_name(rhs)} with {op}")

def eval_logical(kind: str, children: List[Node], frame: Frame, eval_func: EvalFunc) -> QValue:
    """Short-circuit `and`/`or`; the deciding operand is the result."""
    lhs_node, rhs_node = children
    lhs = eval_func(lhs_node, frame)

    if kind == 'and' and not is_truthy(lhs):
        return lhs

    if kind == 'or' and is_truthy(lhs):
        return lhs

    return eval_func(rhs_node, frame)
