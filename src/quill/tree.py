"""Shared helpers for working with the Tree/Token nodes that make up Quill ASTs.

Statements and compound expressions are `lark.Tree` nodes labelled by their
grammar rule; identifiers, literals and operators are `lark.Token`s.
"""
from __future__ import annotations
from typing import Any, List, Optional, Union

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias, TypeGuard

from .token_types import Tok


Node: TypeAlias = Union[Tree, Token]


def make_meta(first: Tok, last: Tok) -> Meta:
    """Build Lark metadata spanning two lexer tokens."""
    meta = Meta()
    meta.empty = False
    meta.line = first.line
    meta.column = first.column
    meta.start_pos = first.start
    meta.end_pos = last.end
    return meta


def make_token(type_: str, tok: Tok, value: Any = None) -> Token:
    """Wrap a lexer token as a Lark token, keeping its position."""
    text = tok.value if value is None else value
    return Token(type_, text, tok.start, tok.line, tok.column, None, None, tok.end)


def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Any) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Any) -> List[Node]:
    if not is_tree(node):
        return []

    children = getattr(node, "children", None)
    if children is None:
        return []

    return list(children)

def node_meta(node: Any) -> Optional[Any]:
    if is_token(node):
        return node

    meta = getattr(node, "_meta", None)
    if meta is None or getattr(meta, "empty", True):
        return None

    return meta
