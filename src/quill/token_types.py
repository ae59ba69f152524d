"""
Token Types for Quill

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    IDENT = auto()

    # Keywords
    LET = auto()
    DEF = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    IN = auto()
    RETURN = auto()
    ASSERT = auto()
    BREAK = auto()
    CONTINUE = auto()

    # Keyword literals
    TRUE = auto()
    FALSE = auto()
    NOTHING = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Logical
    AND = auto()
    OR = auto()
    NOT = auto()

    # Assignment / arrows
    ASSIGN = auto()  # =
    ARROW = auto()  # =>
    DOTDOT = auto()  # ..

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    DOT = auto()
    COMMA = auto()
    COLON = auto()
    SEMI = auto()
    AT = auto()
    PIPE = auto()  # |

    # Special
    EOF = auto()


KEYWORD_TYPES = frozenset({
    TT.LET, TT.DEF, TT.IF, TT.ELSE, TT.WHILE, TT.FOR, TT.IN, TT.RETURN,
    TT.ASSERT, TT.BREAK, TT.CONTINUE, TT.TRUE, TT.FALSE, TT.NOTHING,
    TT.AND, TT.OR, TT.NOT,
})

LITERAL_TYPES = frozenset({TT.INT, TT.FLOAT, TT.STRING})

PUNCTUATION_TYPES = frozenset({
    TT.LPAR, TT.RPAR, TT.LSQB, TT.RSQB, TT.LBRACE, TT.RBRACE,
    TT.COMMA, TT.COLON, TT.SEMI, TT.AT, TT.PIPE, TT.DOT,
})


@dataclass(frozen=True)
class Tok:
    """Token with position info.

    ``start``/``end`` are character offsets into the source; ``newline_before``
    is set when a line break separates this token from the previous one.
    """

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    start: int = 0
    end: int = 0
    newline_before: bool = False

    @property
    def kind(self) -> str:
        """Coarse token family: keyword, identifier, literal, operator, punctuation or eof."""
        if self.type == TT.EOF:
            return "eof"
        if self.type == TT.IDENT:
            return "identifier"
        if self.type in KEYWORD_TYPES:
            return "keyword"
        if self.type in LITERAL_TYPES:
            return "literal"
        if self.type in PUNCTUATION_TYPES:
            return "punctuation"
        return "operator"

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
