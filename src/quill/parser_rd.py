"""
Recursive Descent Parser for Quill

Structure:
- Lexer: lazy token stream from source
- Parser: recursive descent for statements, precedence climbing for expressions
- AST: Lark Tree/Token nodes, labelled by construct

Statements end at a line break, a `;`, a closing `}` or end of input.
"""

from collections import deque
from typing import Deque, Iterable, Iterator, List, Optional

from lark import Token, Tree

from .lexer_rd import Lexer
from .token_types import TT, Tok
from .tree import make_meta, make_token

# ============================================================================
# Parser
# ============================================================================

_LEXEMES = {tt: text for text, tt in Lexer.OPERATORS}
_LEXEMES.update({tt: word for word, tt in Lexer.KEYWORDS.items()})

_TYPE_NAMES = {
    TT.IDENT: "identifier",
    TT.INT: "number",
    TT.FLOAT: "number",
    TT.STRING: "string",
}


def describe_type(token_type: TT) -> str:
    """Human readable name for a token type, e.g. `')'` or `identifier`."""
    if token_type == TT.EOF:
        return "end of input"
    if token_type in _LEXEMES:
        return f"'{_LEXEMES[token_type]}'"
    return _TYPE_NAMES.get(token_type, token_type.name.lower())


def describe_token(tok: Tok) -> str:
    if tok.type == TT.IDENT:
        return f"identifier '{tok.value}'"
    if tok.type == TT.STRING:
        return f"string {tok.value!r}"
    if tok.type in (TT.INT, TT.FLOAT):
        return f"number {tok.value}"
    return describe_type(tok.type)


class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None, expected: Optional[TT] = None):
        self.message = message
        self.token = token
        self.expected = expected
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )


class Parser:
    """
    Recursive descent parser for Quill.

    Expression precedence (lowest to highest):
    1. or
    2. and
    3. not
    4. equality (==, !=)
    5. relational (<, >, <=, >=)
    6. additive (+, -)
    7. multiplicative (*, /)
    8. range (..)
    9. unary (-)
    10. postfix (call, index, slice)
    11. primary (literals, identifiers, parens, lambdas)
    """

    def __init__(self, tokens: Iterable[Tok]):
        self._stream: Iterator[Tok] = iter(tokens)
        self._buffer: Deque[Tok] = deque()
        self._eof: Optional[Tok] = None
        self.prev: Optional[Tok] = None
        self.loop_depth = 0
        self.fn_depth = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        return self.peek()

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token, pulling from the lexer as needed"""
        while len(self._buffer) <= offset:
            if self._eof is not None:
                return self._eof
            tok = next(self._stream, None)
            if tok is None:
                tok = Tok(TT.EOF, None)
            if tok.type == TT.EOF:
                self._eof = tok
            self._buffer.append(tok)
        return self._buffer[offset]

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        tok = self.peek()
        if tok.type != TT.EOF:
            self._buffer.popleft()
        self.prev = tok
        return tok

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {describe_type(token_type)}, got {describe_token(self.current)}"
            raise ParseError(msg, self.current, expected=token_type)
        return self.advance()

    def node(self, label: str, children: list, start: Tok) -> Tree:
        """Build a tree whose source span runs from `start` to the last consumed token"""
        end = self.prev if self.prev is not None else start
        return Tree(label, children, make_meta(start, end))

    def consume_line_end(self):
        """A statement must be followed by a newline, `;`, `}` or end of input"""
        if self.match(TT.SEMI):
            return
        if self.current.newline_before or self.check(TT.RBRACE, TT.EOF):
            return
        raise ParseError(f"Expected end of statement, got {describe_token(self.current)}", self.current)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        start = self.current
        stmts = []

        while not self.check(TT.EOF):
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        return self.node('program', stmts, start)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        Statements include:
        - Declarations (let, def, decorated def)
        - Control flow (if, while, for, return, break, continue)
        - Assertions
        - Assignments and expression statements
        """
        if self.check(TT.LET):
            return self.parse_let_stmt()
        if self.check(TT.AT, TT.DEF):
            return self.parse_fn_stmt()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.ASSERT):
            return self.parse_assert_stmt()
        if self.check(TT.BREAK, TT.CONTINUE):
            return self.parse_loop_control()

        start = self.current
        expr = self.parse_expr()

        if self.check(TT.ASSIGN):
            eq_tok = self.advance()
            if not (isinstance(expr, Token) and expr.type == 'IDENT'):
                raise ParseError("Invalid assignment target", eq_tok)
            rhs = self.parse_expr()
            self.consume_line_end()
            return self.node('assign', [expr, rhs], start)

        self.consume_line_end()
        return self.node('exprstmt', [expr], start)

    def parse_let_stmt(self) -> Tree:
        """Parse declaration: let name = expr"""
        start = self.expect(TT.LET)
        name = self.expect(TT.IDENT)
        self.expect(TT.ASSIGN)
        value = self.parse_expr()
        self.consume_line_end()
        return self.node('let', [make_token('IDENT', name), value], start)

    def parse_fn_stmt(self) -> Tree:
        """
        Parse function declaration (possibly with decorators):
        [@decorator_expr]*
        def name(params) { body }   |   def name(params) => expr
        """
        start = self.current

        # Check for decorator list before def
        decorators = []
        while self.check(TT.AT):
            at_tok = self.advance()
            decorator_expr = self.parse_postfix_expr()
            self.consume_line_end()
            decorators.append(self.node('decorator', [decorator_expr], at_tok))

        self.expect(TT.DEF, None if not decorators else
                    f"Expected 'def' after decorator, got {describe_token(self.current)}")
        name = self.expect(TT.IDENT)

        self.expect(TT.LPAR)
        params = self.parse_param_list(TT.RPAR)
        self.expect(TT.RPAR)

        body = self.parse_fn_body()

        # `def f(x) => expr` is a simple statement and must end like one
        if body.data == 'arrowbody':
            self.consume_line_end()

        # fndef structure: [name, params, body] or [name, params, body, decorator_list]
        children = [make_token('IDENT', name), params, body]
        if decorators:
            children.append(self.node('decorator_list', decorators, start))

        return self.node('fndef', children, start)

    def parse_fn_body(self) -> Tree:
        """Function body: `{ block }` or `=> expr`, parsed outside any loop context"""
        saved_loop = self.loop_depth
        self.loop_depth = 0
        self.fn_depth += 1

        try:
            if self.check(TT.ARROW):
                arrow = self.advance()
                expr = self.parse_expr()
                return self.node('arrowbody', [expr], arrow)
            return self.parse_block()
        finally:
            self.fn_depth -= 1
            self.loop_depth = saved_loop

    def parse_if_stmt(self) -> Tree:
        """
        Parse if statement:
        if expr { } [else if expr { }]* [else { }]
        """
        start = self.current
        branches = []

        while True:
            branch_tok = self.expect(TT.IF)
            cond = self.parse_expr()
            body = self.parse_block()
            branches.append(self.node('ifbranch', [cond, body], branch_tok))

            if not self.check(TT.ELSE):
                break

            else_tok = self.advance()
            if self.check(TT.IF):
                continue

            body = self.parse_block()
            branches.append(self.node('elseblock', [body], else_tok))
            break

        return self.node('if', branches, start)

    def parse_while_stmt(self) -> Tree:
        """Parse while loop: while expr { body }"""
        start = self.expect(TT.WHILE)
        cond = self.parse_expr()
        body = self.parse_loop_body()
        return self.node('while', [cond, body], start)

    def parse_for_stmt(self) -> Tree:
        """Parse for loop: for x in expr { body }"""
        start = self.expect(TT.FOR)
        var = self.expect(TT.IDENT)
        self.expect(TT.IN)
        iterable = self.parse_expr()
        body = self.parse_loop_body()
        return self.node('for', [make_token('IDENT', var), iterable, body], start)

    def parse_loop_body(self) -> Tree:
        self.loop_depth += 1
        try:
            return self.parse_block()
        finally:
            self.loop_depth -= 1

    def parse_return_stmt(self) -> Tree:
        """Parse return statement: return [expr]"""
        start = self.expect(TT.RETURN)

        if self.fn_depth == 0:
            raise ParseError("return outside of a function", start)

        # Check if there's a value
        if self.check(TT.SEMI, TT.RBRACE, TT.EOF) or self.current.newline_before:
            self.consume_line_end()
            return self.node('return', [], start)

        value = self.parse_expr()
        self.consume_line_end()
        return self.node('return', [value], start)

    def parse_assert_stmt(self) -> Tree:
        """Parse assert: assert expr [, message]"""
        start = self.expect(TT.ASSERT)
        children = [self.parse_expr()]

        if self.match(TT.COMMA):
            children.append(self.parse_expr())

        self.consume_line_end()
        return self.node('assert', children, start)

    def parse_loop_control(self) -> Tree:
        """Parse break / continue"""
        tok = self.advance()
        label = 'break' if tok.type == TT.BREAK else 'continue'

        if self.loop_depth == 0:
            raise ParseError(f"{label} outside of a loop", tok)

        self.consume_line_end()
        return self.node(label, [], tok)

    def parse_block(self) -> Tree:
        """Parse brace block: { stmts }"""
        start = self.expect(TT.LBRACE)
        stmts = []

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError(f"Expected '}}', got {describe_token(self.current)}", self.current, expected=TT.RBRACE)
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        self.expect(TT.RBRACE)
        return self.node('block', stmts, start)

    # ========================================================================
    # Expressions - Precedence Climbing
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse expression (top level)"""
        return self.parse_or_expr()

    def parse_or_expr(self) -> Tree:
        """Parse logical OR: expr or expr"""
        start = self.current
        left = self.parse_and_expr()

        while self.match(TT.OR):
            right = self.parse_and_expr()
            left = self.node('or', [left, right], start)

        return left

    def parse_and_expr(self) -> Tree:
        """Parse logical AND: expr and expr"""
        start = self.current
        left = self.parse_not_expr()

        while self.match(TT.AND):
            right = self.parse_not_expr()
            left = self.node('and', [left, right], start)

        return left

    def parse_not_expr(self) -> Tree:
        """Parse logical negation: not expr"""
        if self.check(TT.NOT):
            op = self.advance()
            operand = self.parse_not_expr()
            return self.node('unary', [make_token('NOT', op), operand], op)

        return self.parse_binary_level(0)

    # Binary levels from loosest to tightest; each is left associative
    BINARY_LEVELS = [
        (TT.EQ, TT.NEQ),
        (TT.LT, TT.GT, TT.LTE, TT.GTE),
        (TT.PLUS, TT.MINUS),
        (TT.STAR, TT.SLASH),
    ]

    def parse_binary_level(self, level: int) -> Tree:
        """Parse equality, relational, additive and multiplicative levels"""
        if level >= len(self.BINARY_LEVELS):
            return self.parse_range_expr()

        start = self.current
        left = self.parse_binary_level(level + 1)

        while self.check(*self.BINARY_LEVELS[level]):
            op = self.advance()
            right = self.parse_binary_level(level + 1)
            left = self.node('binary', [left, make_token(op.type.name, op), right], start)

        return left

    def parse_range_expr(self) -> Tree:
        """Parse half-open range: start..stop (non-associative)"""
        start = self.current
        left = self.parse_unary_expr()

        if not self.match(TT.DOTDOT):
            return left

        right = self.parse_unary_expr()

        if self.check(TT.DOTDOT):
            raise ParseError("Range expressions cannot be chained", self.current)

        return self.node('range', [left, right], start)

    def parse_unary_expr(self) -> Tree:
        """Parse unary minus: -expr"""
        if self.check(TT.MINUS):
            op = self.advance()
            operand = self.parse_unary_expr()
            return self.node('unary', [make_token('MINUS', op), operand], op)

        return self.parse_postfix_expr()

    def parse_postfix_expr(self) -> Tree:
        """
        Parse postfix expressions:
        - calls: expr(args)
        - indexing: expr[index]
        - slicing: expr[start:stop:step]

        A `(` or `[` on a new line starts a new statement instead.
        """
        start = self.current
        expr = self.parse_primary_expr()

        while not self.current.newline_before:
            if self.match(TT.LPAR):
                args = self.parse_arg_list()
                self.expect(TT.RPAR)
                expr = self.node('call', [expr, args], start)
            elif self.check(TT.LSQB):
                expr = self.parse_subscript(expr, start)
            else:
                break

        return expr

    def parse_subscript(self, target, start: Tok) -> Tree:
        """
        Parse `[...]` after an expression. A colon makes it a slice with up to
        three optional parts; otherwise it is a single-expression index.
        """
        lsqb = self.expect(TT.LSQB)

        first = self.parse_slice_arm()
        if self.check(TT.RSQB):
            if first is None:
                raise ParseError("Empty index", lsqb)
            self.advance()
            return self.node('index', [target, first], start)

        self.expect(TT.COLON, f"Expected ':' or ']', got {describe_token(self.current)}")
        stop = self.parse_slice_arm()

        step = None
        if self.match(TT.COLON):
            step = self.parse_slice_arm()

        self.expect(TT.RSQB)

        arms = [first, stop, step]
        return self.node('slice', [target] + [arm if arm is not None else Tree('emptyarm', []) for arm in arms], start)

    def parse_slice_arm(self) -> Optional[Tree]:
        if self.check(TT.COLON, TT.RSQB):
            return None
        return self.parse_expr()

    def parse_primary_expr(self) -> Tree:
        """
        Parse primary expressions:
        - Literals (numbers, strings, true, false, nothing)
        - Identifiers
        - Parenthesized expressions
        - Lambdas
        """
        tok = self.current

        # Literals - just return tokens
        if self.check(TT.INT, TT.FLOAT, TT.STRING, TT.TRUE, TT.FALSE, TT.NOTHING):
            self.advance()
            return make_token(tok.type.name, tok)

        # Identifiers
        if self.check(TT.IDENT):
            self.advance()
            return make_token('IDENT', tok)

        # Parenthesized expression
        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR)
            return expr

        # Lambda
        if self.check(TT.PIPE):
            return self.parse_lambda()

        raise ParseError(f"Unexpected {describe_token(tok)} in expression", tok)

    # ========================================================================
    # Helper Parsers
    # ========================================================================

    def parse_lambda(self) -> Tree:
        """
        Parse lambda:
        |params| => expr
        |params| { body }
        """
        start = self.expect(TT.PIPE)
        params = self.parse_param_list(TT.PIPE)
        self.expect(TT.PIPE)

        if not self.check(TT.ARROW, TT.LBRACE):
            raise ParseError(f"Expected '=>' or '{{' after lambda parameters, got {describe_token(self.current)}", self.current)

        body = self.parse_fn_body()
        return self.node('lambda', [params, body], start)

    def parse_param_list(self, closer: TT) -> Tree:
        """Parse parameter names up to (not including) `closer`"""
        start = self.current
        params: List[Token] = []
        seen = set()

        while not self.check(closer):
            param = self.expect(TT.IDENT)

            if param.value in seen:
                raise ParseError(f"Duplicate parameter '{param.value}'", param)

            seen.add(param.value)
            params.append(make_token('IDENT', param))

            if not self.match(TT.COMMA):
                break

        return self.node('paramlist', params, start)

    def parse_arg_list(self) -> Tree:
        """Parse call arguments up to (not including) `)`"""
        start = self.current
        args = []

        while not self.check(TT.RPAR):
            args.append(self.parse_expr())

            if not self.match(TT.COMMA):
                if not self.check(TT.RPAR):
                    raise ParseError(f"Expected ')' or ',', got {describe_token(self.current)}", self.current, expected=TT.RPAR)
                break

        return self.node('arglist', args, start)


# ============================================================================
# Entry Points
# ============================================================================

def parse_source(source: str) -> Tree:
    """
    Parse Quill source code to AST.

    Tokens are pulled from the lexer lazily, so a lexical error surfaces at the
    point the parser reaches it.
    """
    parser = Parser(Lexer(source))

    try:
        return parser.parse()
    except RecursionError:
        raise ParseError("Expression nested too deeply", parser.current) from None


def parse_expr_fragment(source: str) -> Tree:
    """Parse a standalone expression fragment."""
    parser = Parser(Lexer(source))
    expr = parser.parse_expr()

    # Ensure we've consumed the entire fragment
    if not parser.check(TT.EOF):
        raise ParseError("Unexpected tokens after expression fragment", parser.current)
    return expr
