from __future__ import annotations

from typing import Any, Callable, List

from lark import Tree

from ..runtime import Frame, QNothing, QValue
from ..tree import tree_children

EvalFunc = Callable[[Any, Frame], Any]

def eval_program(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QValue:
    """Run a statement list in `frame`, returning the last statement's value."""
    result: QValue = QNothing()

    for child in children:
        result = eval_func(child, frame)

    return result

def eval_block_in(n: Tree, frame: Frame, eval_func: EvalFunc) -> QValue:
    return eval_program(tree_children(n), frame, eval_func)

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> QValue:
    """Nested blocks get their own scope so inner lets never leak out."""
    return eval_block_in(n, Frame(parent=frame), eval_func)
