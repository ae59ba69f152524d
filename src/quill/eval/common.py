from __future__ import annotations

from typing import Any, Optional

from lark import Token

from ..runtime import Frame, QuillRuntimeError
from ..tree import (
    is_token,
    is_tree,
    node_meta,
    tree_children,
)

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    raise QuillRuntimeError(f"{context} must be an identifier")

def ident_token_value(node: Any) -> Optional[str]:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    return None

def node_source_span(node: Any) -> tuple[int | None, int | None]:
    meta = node_meta(node)
    start = getattr(meta, 'start_pos', None)
    end = getattr(meta, 'end_pos', None)

    if start is not None and end is not None:
        return start, end

    if is_tree(node):
        child_spans = [node_source_span(child) for child in tree_children(node)]
        child_starts = [s for s, _ in child_spans if s is not None]
        child_ends = [e for _, e in child_spans if e is not None]

        if child_starts and child_ends:
            return min(child_starts), max(child_ends)

    return None, None

def get_source_segment(node: Any, frame: Frame) -> Optional[str]:
    source = getattr(frame, 'source', None)
    if source is None:
        return None

    start, end = node_source_span(node)
    if start is None or end is None:
        return None

    return str(source[start:end])

def render_expr(node: Any) -> str:
    """Approximate source text for a node when the original source is unavailable."""
    if is_token(node):
        if token_kind(node) == 'STRING':
            return '"' + str(node.value) + '"'
        return str(node.value)

    if not is_tree(node):
        return str(node)

    parts = [render_expr(child) for child in tree_children(node)]

    match node.data:
        case 'call':
            callee, args = parts
            return f"{callee}({args})"
        case 'arglist' | 'paramlist':
            return ", ".join(parts)
        case 'index':
            return f"{parts[0]}[{parts[1]}]"
        case 'range':
            return f"{parts[0]}..{parts[1]}"
        case 'and' | 'or':
            return f" {node.data} ".join(parts)
        case 'unary':
            op, operand = parts
            return f"{op} {operand}" if op == 'not' else f"{op}{operand}"
        case 'emptyarm':
            return ""
        case 'slice':
            return f"{parts[0]}[" + ":".join(parts[1:]) + "]"

    return " ".join(p for p in parts if p)
