from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Callable, Optional
from lark import Token

from .runtime import (
    Frame,
    QValue,
    QuillRuntimeError,
    call_value,
    make_root_frame,
)

from .tree import Node, Tree, is_token, node_meta

from .eval.bind import eval_assign, eval_ident, eval_let
from .eval.blocks import eval_block, eval_program
from .eval.control import eval_assert, eval_break_stmt, eval_continue_stmt, eval_return_stmt
from .eval.expr import eval_binary, eval_logical, eval_unary
from .eval.fn import eval_fn_def, eval_lambda
from .eval.literals import eval_keyword_literal, token_float, token_int, token_string
from .eval.loops import eval_for_in, eval_if_stmt, eval_while_stmt
from .eval.selector import eval_index, eval_range, eval_slice

logger = logging.getLogger(__name__)

EvalFunc = Callable[[Node, Frame], QValue]


def _maybe_attach_location(exc: QuillRuntimeError, node: Node) -> None:
    """Record the innermost node position on the error; outer nodes leave it alone."""
    if getattr(exc, "_augmented", False):
        return

    meta = node_meta(node)

    if meta is not None and getattr(meta, "line", None) is not None:
        exc.q_meta = SimpleNamespace(line=meta.line, column=meta.column)
        exc._augmented = True  # type: ignore[attr-defined]

# ---------------- Public API ----------------

def eval_expr(ast: Node, frame: Optional[Frame]=None, source: Optional[str]=None) -> QValue:
    """Evaluate a program or expression node; a fresh root frame is made when none is given."""
    if frame is None:
        frame = Frame(parent=make_root_frame(source=source))
    elif source is not None:
        frame.source = source

    try:
        return eval_node(ast, frame)
    except QuillRuntimeError as e:
        _maybe_attach_location(e, ast)
        raise

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> QValue:
    try:
        return _eval_node_inner(n, frame)
    except QuillRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, frame: Frame) -> QValue:
    if is_token(n):
        return _eval_token(n, frame)

    d = n.data
    handler = _NODE_DISPATCH.get(d)
    if handler is not None:
        return handler(n, frame)

    match d:
        case 'program':
            return eval_program(n.children, frame, eval_node)
        case 'block':
            return eval_block(n, frame, eval_node)
        case 'exprstmt':
            return eval_node(n.children[0], frame)
        case 'unary':
            op, rhs_node = n.children
            return eval_unary(op, rhs_node, frame, eval_node)
        case 'binary':
            return eval_binary(n.children, frame, eval_node)
        case 'and' | 'or':
            return eval_logical(d, n.children, frame, eval_node)
        case 'call':
            callee_node, args_node = n.children
            callee = eval_node(callee_node, frame)
            args = [eval_node(arg, frame) for arg in args_node.children]
            return call_value(callee, args, frame)
        case 'return':
            return eval_return_stmt(n.children, frame, eval_func=eval_node)
        case 'assert':
            return eval_assert(n.children, frame, eval_func=eval_node)
        case 'fndef':
            return eval_fn_def(n.children, frame, eval_node)
        case _:
            raise QuillRuntimeError(f"Unknown node: {d}")

# ---------------- Tokens ----------------

def _eval_token(t: Token, frame: Frame) -> QValue:
    handler = _TOKEN_DISPATCH.get(t.type)
    if handler:
        return handler(t, frame)

    raise QuillRuntimeError(f"Unhandled token {t.type}:{t.value}")

# ---------------- Dispatch ----------------

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame], QValue]] = {
    'let': lambda n, frame: eval_let(n.children, frame, eval_node),
    'assign': lambda n, frame: eval_assign(n.children, frame, eval_node),
    'if': lambda n, frame: eval_if_stmt(n, frame, eval_node),
    'while': lambda n, frame: eval_while_stmt(n, frame, eval_node),
    'for': lambda n, frame: eval_for_in(n, frame, eval_node),
    'break': lambda _, frame: eval_break_stmt(frame),
    'continue': lambda _, frame: eval_continue_stmt(frame),
    'lambda': eval_lambda,
    'range': lambda n, frame: eval_range(n.children, frame, eval_node),
    'index': lambda n, frame: eval_index(n.children, frame, eval_node),
    'slice': lambda n, frame: eval_slice(n.children, frame, eval_node),
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Frame], QValue]] = {
    'INT': token_int,
    'FLOAT': token_float,
    'STRING': token_string,
    'TRUE': eval_keyword_literal,
    'FALSE': eval_keyword_literal,
    'NOTHING': eval_keyword_literal,
    'IDENT': eval_ident,
}
