"""
Lexer for Quill - Recursive Descent Parser

Tokenizes Quill source code into a stream of tokens.

Features:
- Lazy, single-pass tokenization (iterate a Lexer to pull tokens on demand)
- Restartable from any saved position
- Position tracking (line, column, character span)
- Numeric literals with `_` separators and 0b/0o/0x prefixes
- String literal escape decoding
"""

from typing import Iterator, List, NamedTuple, Optional

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexState(NamedTuple):
    """A resumable lexer position."""

    pos: int
    line: int
    column: int


class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(
            f"{message} at line {line}, col {column}" if line is not None else message
        )


class Lexer:
    """
    Quill lexer.

    Whitespace (including newlines) is insignificant except that every token
    remembers whether a newline preceded it; the parser uses that flag to end
    statements.
    """

    # Keyword mapping
    KEYWORDS = {
        'let': TT.LET,
        'def': TT.DEF,
        'if': TT.IF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'for': TT.FOR,
        'in': TT.IN,
        'return': TT.RETURN,
        'assert': TT.ASSERT,
        'break': TT.BREAK,
        'continue': TT.CONTINUE,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'nothing': TT.NOTHING,
        'and': TT.AND,
        'or': TT.OR,
        'not': TT.NOT,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('..', TT.DOTDOT),
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('=>', TT.ARROW),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('<', TT.LT),
        ('>', TT.GT),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
        ('@', TT.AT),
        ('|', TT.PIPE),
    ]

    ESCAPES = {
        'n': '\n',
        't': '\t',
        'r': '\r',
        '0': '\0',
        '\\': '\\',
        '"': '"',
        "'": "'",
    }

    # Digits accepted after each base prefix
    BASE_DIGITS = {
        'b': (2, frozenset('01')),
        'o': (8, frozenset('01234567')),
        'x': (16, frozenset('0123456789abcdefABCDEF')),
    }

    def __init__(self, source: str, state: Optional[LexState] = None):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.seen_newline = False

        if state is not None:
            self.pos, self.line, self.column = state

        # Position of the token being scanned
        self.tok_pos = self.pos
        self.tok_line = self.line
        self.tok_column = self.column

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def __iter__(self) -> Iterator[Tok]:
        """Yield tokens lazily, ending with a single EOF token."""
        while True:
            self.skip_trivia()

            if self.pos >= len(self.source):
                self.mark_start()
                yield self.make(TT.EOF, None)
                return

            yield self.scan_token()

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        return list(self)

    def save(self) -> LexState:
        """Capture the current position so a new Lexer can resume from it."""
        return LexState(self.pos, self.line, self.column)

    def scan_token(self) -> Tok:
        """Scan next token"""
        self.mark_start()
        ch = self.peek()

        # String literals
        if ch == '"':
            return self.scan_string()

        # Numbers
        if ch.isdigit():
            return self.scan_number()

        # Identifiers and keywords
        if ch.isalpha() or ch == '_':
            return self.scan_identifier()

        # Operators and punctuation
        return self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self) -> Tok:
        """Scan string literal "..." and decode its escapes"""
        self.advance()  # Opening quote
        value = ''

        while True:
            ch = self.peek()

            if self.pos >= len(self.source) or ch == '\n':
                raise LexError("Unterminated string", self.tok_line, self.tok_column)

            if ch == '"':
                self.advance()
                break

            if ch == '\\':
                esc_line, esc_col = self.line, self.column
                self.advance()
                esc = self.peek()

                if self.pos >= len(self.source):
                    raise LexError("Unterminated string", self.tok_line, self.tok_column)
                if esc not in self.ESCAPES:
                    raise LexError(f"Unknown escape sequence '\\{esc}'", esc_line, esc_col)

                value += self.ESCAPES[esc]
                self.advance()
                continue

            value += self.advance()

        return self.make(TT.STRING, value)

    def scan_number(self) -> Tok:
        """Scan number literal; separators are kept and stripped on conversion"""
        if self.peek() == '0' and self.peek(1).lower() in self.BASE_DIGITS:
            prefix = self.advance(2)
            base, valid = self.BASE_DIGITS[prefix[1].lower()]
            digits = self.scan_digit_run(valid)

            if not digits.replace('_', ''):
                raise LexError(f"Unterminated number literal '{prefix}{digits}'", self.tok_line, self.tok_column)

            self.reject_number_suffix(f"base-{base} literal")
            return self.make(TT.INT, prefix + digits)

        value = self.scan_digit_run(frozenset('0123456789'))

        # Decimal part: '.' only starts a fraction when a digit follows, so `0..5` stays a range
        if self.peek() == '.' and self.peek(1).isdigit():
            value += self.advance()
            value += self.scan_digit_run(frozenset('0123456789'))
            self.reject_number_suffix("float literal")
            return self.make(TT.FLOAT, value)

        self.reject_number_suffix("integer literal")
        return self.make(TT.INT, value)

    def scan_digit_run(self, valid: frozenset) -> str:
        run = ''

        while self.peek() in valid or self.peek() == '_':
            run += self.advance()

        return run

    def reject_number_suffix(self, what: str):
        ch = self.peek()

        if ch.isalnum():
            raise LexError(f"Invalid digit '{ch}' in {what}", self.line, self.column)

    def scan_identifier(self) -> Tok:
        """Scan identifier or keyword"""
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        # Check if keyword
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        return self.make(token_type, value)

    def scan_operator(self) -> Tok:
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                return self.make(op_type, op_str)

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            if self.pos >= len(self.source):
                break
            ch = self.source[self.pos]
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
                self.seen_newline = True
            else:
                self.column += 1
        return result

    def skip_trivia(self):
        """Skip whitespace and `//` comments"""
        while self.pos < len(self.source):
            ch = self.peek()

            if ch.isspace():
                self.advance()
            elif ch == '/' and self.peek(1) == '/':
                while self.pos < len(self.source) and self.peek() != '\n':
                    self.advance()
            else:
                return

    def mark_start(self):
        self.tok_pos = self.pos
        self.tok_line = self.line
        self.tok_column = self.column

    def make(self, token_type: TT, value) -> Tok:
        """Build a token spanning from the marked start to the current position"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column,
            start=self.tok_pos,
            end=self.pos,
            newline_before=self.seen_newline,
        )
        self.seen_newline = False
        return tok


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
