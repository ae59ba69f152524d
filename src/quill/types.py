from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard
from .tree import Node

# ---------- Value Model ----------

@dataclass
class QNothing:
    def __repr__(self) -> str:
        return "nothing"

@dataclass
class QBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class QInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class QFloat:
    value: float
    def __repr__(self) -> str:
        text = repr(self.value)
        if "e" not in text:
            return text
        # positional notation: 1e+17 prints as 100000000000000000.0
        text = format(Decimal(text), "f")
        return text if "." in text else text + ".0"

@dataclass
class QString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class QRange:
    """Half-open integer range `start..stop`, optionally strided by a slice."""
    start: int
    stop: int
    step: int = 1

    def as_range(self) -> range:
        return range(self.start, self.stop, self.step)

    def __len__(self) -> int:
        return len(self.as_range())

    def __repr__(self) -> str:
        if self.step == 1:
            return f"{self.start}..{self.stop}"
        return f"{self.start}..{self.stop}:{self.step}"

@dataclass(eq=False)
class QFn:
    name: Optional[str]          # None for lambdas
    params: List[str]
    body: Node                   # block or arrowbody
    frame: 'Frame'               # Closure frame
    def __repr__(self) -> str:
        return f"<fn {self.name or 'lambda'}>"

BuiltinFn = Callable[['Frame', List['QValue']], 'QValue']

@dataclass(frozen=True, eq=False)
class QBuiltin:
    name: str
    fn: BuiltinFn
    arity: Optional[int] = None   # None accepts any count
    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

QValue: TypeAlias = (
    QNothing
    | QBool
    | QInt
    | QFloat
    | QString
    | QRange
    | QFn
    | QBuiltin
)

_Q_VALUE_TYPES: Tuple[type, ...] = (QNothing, QBool, QInt, QFloat, QString, QRange, QFn, QBuiltin)

def is_q_value(value: object) -> TypeGuard[QValue]:
    return isinstance(value, _Q_VALUE_TYPES)

TYPE_NAMES: Dict[type, str] = {
    QNothing: "Nothing",
    QBool: "Bool",
    QInt: "Int",
    QFloat: "Float",
    QString: "String",
    QRange: "Range",
    QFn: "Function",
    QBuiltin: "Function",
}

def type_name(value: object) -> str:
    return TYPE_NAMES.get(type(value), type(value).__name__)

# ---------- Environments ----------

OutputSink = Callable[[str], None]

class Frame:
    """
    One lexical scope. Lookups and assignments walk the parent chain; `define`
    always binds in this frame, shadowing any outer binding.

    The root frame holds the builtins and carries the program source and the
    output sink; child frames inherit both.
    """

    def __init__(self, parent: Optional['Frame']=None, source: Optional[str]=None, emit: Optional[OutputSink]=None):
        self.parent = parent
        self.vars: Dict[str, QValue] = {}
        self.source: Optional[str]
        self.emit: Optional[OutputSink]

        if source is not None:
            self.source = source
        elif parent is not None:
            self.source = parent.source
        else:
            self.source = None

        if emit is not None:
            self.emit = emit
        elif parent is not None:
            self.emit = parent.emit
        else:
            self.emit = None

    def define(self, name: str, val: QValue) -> None:
        self.vars[name] = val

    def lookup(self, name: str) -> Optional[QValue]:
        cur: Optional[Frame] = self

        while cur is not None:
            if name in cur.vars:
                return cur.vars[name]
            cur = cur.parent

        return None

    def get(self, name: str) -> QValue:
        val = self.lookup(name)

        if val is None:
            raise QuillNameError(name, f"Undefined variable '{name}'")

        return val

    def set(self, name: str, val: QValue) -> None:
        cur: Optional[Frame] = self

        while cur is not None:
            if name in cur.vars:
                cur.vars[name] = val
                return
            cur = cur.parent

        raise QuillNameError(name, f"Cannot assign to undeclared variable '{name}'")

# ---------- Exceptions ----------

class QuillRuntimeError(Exception):
    q_meta: Optional[object]
    kind = "RuntimeError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.q_meta = None

    @property
    def line(self) -> Optional[int]:
        return getattr(self.q_meta, "line", None)

    @property
    def column(self) -> Optional[int]:
        return getattr(self.q_meta, "column", None)

    def __str__(self) -> str:
        msg = super().__str__()

        line = self.line
        col = self.column

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class QuillNameError(QuillRuntimeError):
    kind = "NameError"

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(message or f"Undefined variable '{name}'")
        self.name = name

class QuillTypeError(QuillRuntimeError):
    kind = "TypeError"

class QuillArityError(QuillRuntimeError):
    kind = "ArityError"

    def __init__(self, callee: str, expected: int, got: int):
        super().__init__(f"{callee} expects {expected} argument(s); got {got}")
        self.callee = callee
        self.expected = expected
        self.got = got

class QuillZeroStepError(QuillRuntimeError):
    kind = "ZeroStepError"

    def __init__(self, message: str = "Slice step cannot be zero"):
        super().__init__(message)

class QuillIndexError(QuillRuntimeError):
    kind = "IndexError"

    def __init__(self, message: str = "Index out of bounds"):
        super().__init__(message)

class QuillZeroDivisionError(QuillRuntimeError):
    kind = "ZeroDivisionError"

    def __init__(self, message: str = "Division by zero"):
        super().__init__(message)

class QuillRecursionError(QuillRuntimeError):
    kind = "RecursionError"

    def __init__(self, message: str = "Maximum recursion depth exceeded"):
        super().__init__(message)

class QuillAssertionError(QuillRuntimeError):
    kind = "AssertionError"

class QuillReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: QValue):
        self.value = value

class QuillBreakSignal(Exception):
    """Internal control flow for `break`."""

class QuillContinueSignal(Exception):
    """Internal control flow for `continue`."""

# ---------- Builtin registry ----------

class Builtins:
    stdlib_functions: Dict[str, QBuiltin] = {}

    @classmethod
    def install(cls, frame: Frame, extra: Optional[Dict[str, QBuiltin]] = None) -> None:
        for name, builtin in cls.stdlib_functions.items():
            frame.define(name, builtin)

        for name, builtin in (extra or {}).items():
            frame.define(name, builtin)

