"""Quill: a small dynamically-typed scripting language."""

from .config import Settings
from .lexer_rd import LexError, Lexer, tokenize
from .parser_rd import ParseError, Parser, parse_source
from .runner import ExecutionOutcome, Status, evaluate, execute, parse, run
from .runtime import register_stdlib
from .types import (
    QBool,
    QBuiltin,
    QFloat,
    QFn,
    QInt,
    QNothing,
    QRange,
    QString,
    QValue,
    QuillArityError,
    QuillAssertionError,
    QuillIndexError,
    QuillNameError,
    QuillRecursionError,
    QuillRuntimeError,
    QuillTypeError,
    QuillZeroDivisionError,
    QuillZeroStepError,
)
from .utils import q_equals, stringify

__all__ = [
    "Settings",
    "LexError", "Lexer", "tokenize",
    "ParseError", "Parser", "parse_source",
    "ExecutionOutcome", "Status", "evaluate", "execute", "parse", "run",
    "register_stdlib",
    "QBool", "QBuiltin", "QFloat", "QFn", "QInt", "QNothing", "QRange", "QString", "QValue",
    "QuillArityError", "QuillAssertionError", "QuillIndexError", "QuillNameError",
    "QuillRecursionError", "QuillRuntimeError", "QuillTypeError",
    "QuillZeroDivisionError", "QuillZeroStepError",
    "q_equals", "stringify",
]
