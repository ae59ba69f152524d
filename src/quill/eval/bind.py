from __future__ import annotations

from typing import Any, Callable, List

from lark import Token

from ..runtime import Frame, QNothing, QValue
from .common import expect_ident_token

EvalFunc = Callable[[Any, Frame], Any]

def eval_let(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QValue:
    """`let name = expr` binds in the current frame, shadowing outer names."""
    name_node, value_node = children
    name = expect_ident_token(name_node, "let target")
    # the initializer sees the outer binding of a shadowed name
    value = eval_func(value_node, frame)
    frame.define(name, value)

    return QNothing()

def eval_assign(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QValue:
    """`name = expr` rebinds the nearest existing binding."""
    name_node, value_node = children
    name = expect_ident_token(name_node, "Assignment target")
    value = eval_func(value_node, frame)
    frame.set(name, value)

    return QNothing()

def eval_ident(token: Token, frame: Frame) -> QValue:
    return frame.get(str(token.value))
