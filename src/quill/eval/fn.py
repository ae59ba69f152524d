from __future__ import annotations

import logging
from typing import Any, Callable, List

from lark import Tree

from ..runtime import Frame, QFn, QNothing, QValue, QuillRuntimeError, call_value
from ..tree import is_tree, tree_children, tree_label
from .common import expect_ident_token as _expect_ident_token, ident_token_value as _ident_token_value

logger = logging.getLogger(__name__)

EvalFunc = Callable[[Any, Frame], Any]

def extract_param_names(params_node: Any, context: str="parameter list") -> List[str]:
    if params_node is None:
        return []

    names: List[str] = []

    for p in tree_children(params_node):
        name = _ident_token_value(p)

        if name is None:
            raise QuillRuntimeError(f"Unsupported parameter node in {context}: {p}")
        names.append(name)

    return names

def eval_fn_def(children: List[Any], frame: Frame, eval_func: EvalFunc) -> QValue:
    """
    `def name(params) body`, optionally preceded by decorators.

    Decorator expressions run top-to-bottom when the definition executes, then
    wrap the function innermost-first, so `@a @b def f` binds `f = a(b(f))`.
    """
    if len(children) < 3:
        raise QuillRuntimeError("Malformed function definition")

    name = _expect_ident_token(children[0], "Function name")
    params_node, body_node = children[1], children[2]
    decorators_node = children[3] if len(children) > 3 else None

    params = extract_param_names(params_node, context="function definition")
    value: QValue = QFn(name=name, params=params, body=body_node, frame=frame)

    if decorators_node is not None:
        decorators = evaluate_decorator_list(decorators_node, frame, eval_func)

        for decorator in reversed(decorators):
            value = call_value(decorator, [value], frame)

        logger.debug("applied %d decorator(s) to %s", len(decorators), name)

    frame.define(name, value)

    return QNothing()

def eval_lambda(n: Tree, frame: Frame) -> QFn:
    params_node, body_node = n.children
    params = extract_param_names(params_node, context="lambda")

    return QFn(name=None, params=params, body=body_node, frame=frame)

def evaluate_decorator_list(node: Tree, frame: Frame, eval_func: EvalFunc) -> List[QValue]:
    decorators: List[QValue] = []

    for entry in tree_children(node):
        kids = tree_children(entry) if is_tree(entry) and tree_label(entry) == 'decorator' else [entry]
        decorators.append(eval_func(kids[0], frame))

    return decorators
