from __future__ import annotations

from typing import Any, Callable

from lark import Tree

from ..runtime import Frame, QNothing, QValue, QuillBreakSignal, QuillContinueSignal
from ..tree import tree_children, tree_label
from .blocks import eval_block, eval_block_in
from .common import expect_ident_token
from .helpers import is_truthy as _is_truthy
from .selector import iter_values

EvalFunc = Callable[[Any, Frame], Any]

def eval_if_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> QValue:
    """First branch whose condition is truthy runs; the else block is the fallback."""
    for clause in tree_children(n):
        label = tree_label(clause)

        if label == 'ifbranch':
            cond_node, body_node = clause.children
            if _is_truthy(eval_func(cond_node, frame)):
                return eval_block(body_node, frame, eval_func)
            continue

        if label == 'elseblock':
            return eval_block(clause.children[0], frame, eval_func)

    return QNothing()

def eval_while_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> QValue:
    cond_node, body_node = n.children

    while _is_truthy(eval_func(cond_node, frame)):
        try:
            eval_block(body_node, frame, eval_func)
        except QuillContinueSignal:
            continue
        except QuillBreakSignal:
            break

    return QNothing()

def eval_for_in(n: Tree, frame: Frame, eval_func: EvalFunc) -> QValue:
    """
    `for x in e`: each iteration runs in a fresh frame holding `x`, so closures
    created in the body keep that iteration's binding.
    """
    var_node, iter_node, body_node = n.children
    name = expect_ident_token(var_node, "Loop variable")
    iterable = eval_func(iter_node, frame)

    for item in iter_values(iterable):
        loop_frame = Frame(parent=frame)
        loop_frame.define(name, item)

        try:
            eval_block_in(body_node, loop_frame, eval_func)
        except QuillContinueSignal:
            continue
        except QuillBreakSignal:
            break

    return QNothing()
