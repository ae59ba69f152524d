from __future__ import annotations

from lark import Token

from ..runtime import Frame, QBool, QFloat, QInt, QNothing, QString, QValue, QuillRuntimeError

_BASES = {'0b': 2, '0o': 8, '0x': 16}

def parse_int_literal(text: str) -> int:
    """Convert INT token text (`1_000`, `0b_101`, `0XFF`) to an integer."""
    digits = text.replace('_', '')
    base = _BASES.get(digits[:2].lower())

    if base is None:
        return int(digits, 10)

    if len(digits) == 2:
        raise QuillRuntimeError(f"Malformed number literal '{text}'")

    return int(digits[2:], base)

def parse_float_literal(text: str) -> float:
    whole, _, frac = text.replace('_', '').partition('.')
    return float(f"{whole}.{frac or '0'}")

def token_int(token: Token, _: Frame) -> QInt:
    return QInt(parse_int_literal(str(token.value)))

def token_float(token: Token, _: Frame) -> QFloat:
    return QFloat(parse_float_literal(str(token.value)))

def token_string(token: Token, _: Frame) -> QString:
    # escapes are decoded by the lexer
    return QString(str(token.value))

def eval_keyword_literal(token: Token, _: Frame) -> QValue:
    match token.type:
        case 'TRUE':
            return QBool(True)
        case 'FALSE':
            return QBool(False)
        case 'NOTHING':
            return QNothing()

    raise QuillRuntimeError(f"Unknown literal {token.value!r}")
