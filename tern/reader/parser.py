"""
  Tern Parser

Recursive descent with one token of lookahead. Each binary precedence level
parses its left operand at the next-tighter level and then loops over
operators of its own level, which makes every binary operator
left-associative:

    assignment -> or -> and -> equality -> comparison -> term -> factor
               -> unary -> call -> primary

Syntax errors do not stop the parser. The error is recorded, tokens are
discarded up to the next statement boundary, and parsing resumes, so a
single pass reports every independent mistake.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from tern.errors import ParseError
from tern.reader.lexer import Token, TokenKind, lex
from tern.reader.nodes import (
    Assign, Binary, Block, Call, Expr, ExpressionStmt, FunctionDecl, Grouping,
    If, Increment, Index, ListLiteral, Literal, Logical, Member, Print, Return,
    Slice, Stmt, Unary, VarDecl, Variable, While,
)
from tern.types.null import Null

logger = logging.getLogger(__name__)

MAX_ARGUMENTS = 255

# Tokens that may begin a statement; synchronization stops in front of them.
STATEMENT_STARTS = frozenset({
    TokenKind.DEF, TokenKind.VAR, TokenKind.FOR, TokenKind.IF,
    TokenKind.WHILE, TokenKind.PRINT, TokenKind.RETURN,
})

EQUALITY_OPS = (TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL)
COMPARISON_OPS = (TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.LESS_EQUAL)
TERM_OPS = (TokenKind.MINUS, TokenKind.PLUS)
FACTOR_OPS = (TokenKind.SLASH, TokenKind.STAR)
UNARY_OPS = (TokenKind.BANG, TokenKind.MINUS)


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self.tokens = iter(tokens)
        self.buffer: list[Token] = []
        self.last: Optional[Token] = None
        self.errors: list[ParseError] = []
        # Number of enclosing `{ ... }` blocks
        self.depth = 0

    # ------------------------
    # Token stream
    # ------------------------
    def peek(self) -> Token:
        if not self.buffer:
            tok = next(self.tokens, None)
            if tok is None:
                # Streams without a trailing EOF still terminate cleanly
                line = self.last.line if self.last is not None else 1
                tok = Token(TokenKind.EOF, "", None, line)
            self.buffer.append(tok)
        return self.buffer[0]

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind is not TokenKind.EOF:
            self.buffer.pop(0)
        self.last = tok
        return tok

    def previous(self) -> Token:
        return self.last

    def at_end(self) -> bool:
        return self.peek().kind is TokenKind.EOF

    def check(self, kind: TokenKind) -> bool:
        return self.peek().kind is kind

    def match(self, *kinds: TokenKind) -> bool:
        if self.peek().kind in kinds:
            self.advance()
            return True
        return False

    def consume(self, kind: TokenKind, expected: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise self.error(expected)

    def error(self, expected: str, token: Token | None = None) -> ParseError:
        tok = token or self.peek()
        return ParseError(tok.line, expected, str(tok))

    def _at_closing_brace(self) -> bool:
        # A `}` inside a block belongs to that block; leave it for block() to consume
        return self.depth > 0 and self.check(TokenKind.RBRACE)

    def synchronize(self) -> None:
        """Discard tokens up to the next statement boundary.

        Stops just past a `;` or a stray top-level `}`, in front of a
        statement keyword, or in front of the `}` closing the current block.
        """
        if self._at_closing_brace():
            return
        self.advance()
        while not self.at_end():
            if self.previous().kind in (TokenKind.SEMICOLON, TokenKind.RBRACE):
                return
            if self.peek().kind in STATEMENT_STARTS or self._at_closing_brace():
                return
            self.advance()

    # ------------------------
    # Statements
    # ------------------------
    def parse(self) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        logger.debug("parsed %d statements with %d errors", len(statements), len(self.errors))
        return statements

    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TokenKind.DEF):
                return self.function()
            if self.match(TokenKind.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError as err:
            self.errors.append(err)
            self.synchronize()
            return None
        except RecursionError:
            tok = self.peek()
            self.errors.append(
                ParseError(tok.line, "expression", str(tok), message="Expression nested too deeply")
            )
            self.synchronize()
            return None

    def function(self) -> FunctionDecl:
        line = self.previous().line
        name = self.consume(TokenKind.IDENTIFIER, "function name")
        self.consume(TokenKind.LPAREN, "'(' after function name")
        params: list[str] = []
        if not self.check(TokenKind.RPAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.errors.append(self.error(f"at most {MAX_ARGUMENTS} parameters"))
                params.append(self.consume(TokenKind.IDENTIFIER, "parameter name").lexeme)
                if not self.match(TokenKind.COMMA):
                    break
        self.consume(TokenKind.RPAREN, "')' after parameters")
        self.consume(TokenKind.LBRACE, "'{' before function body")
        body = self.block()
        return FunctionDecl(name.lexeme, tuple(params), tuple(body), line)

    def var_declaration(self) -> VarDecl:
        line = self.previous().line
        name = self.consume(TokenKind.IDENTIFIER, "variable name")
        initializer = self.expression() if self.match(TokenKind.EQUAL) else None
        self.consume(TokenKind.SEMICOLON, "';' after variable declaration")
        return VarDecl(name.lexeme, initializer, line)

    def statement(self) -> Stmt:
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.PRINT):
            return self.print_statement()
        if self.match(TokenKind.RETURN):
            return self.return_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.LBRACE):
            line = self.previous().line
            return Block(tuple(self.block()), line)
        return self.expression_statement()

    def for_statement(self) -> Stmt:
        """Desugar `for (init; cond; incr) body` into a block holding a while loop."""
        line = self.previous().line
        self.consume(TokenKind.LPAREN, "'(' after 'for'")

        initializer: Optional[Stmt]
        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition: Expr
        if self.check(TokenKind.SEMICOLON):
            condition = Literal(True, self.peek().line)
        else:
            condition = self.expression()
        self.consume(TokenKind.SEMICOLON, "';' after loop condition")

        increment = None if self.check(TokenKind.RPAREN) else self.expression()
        self.consume(TokenKind.RPAREN, "')' after for clauses")

        body = self.statement()
        if increment is not None:
            body = Block((body, ExpressionStmt(increment, increment.line)), body.line)
        else:
            body = Block((body,), body.line)
        loop: Stmt = While(condition, body, line)
        if initializer is not None:
            return Block((initializer, loop), line)
        return Block((loop,), line)

    def if_statement(self) -> If:
        line = self.previous().line
        self.consume(TokenKind.LPAREN, "'(' after 'if'")
        condition = self.expression()
        self.consume(TokenKind.RPAREN, "')' after if condition")
        then_branch = self.statement()
        else_branch = self.statement() if self.match(TokenKind.ELSE) else None
        return If(condition, then_branch, else_branch, line)

    def print_statement(self) -> Print:
        line = self.previous().line
        value = self.expression()
        self.consume(TokenKind.SEMICOLON, "';' after value")
        return Print(value, line)

    def return_statement(self) -> Return:
        line = self.previous().line
        value = None if self.check(TokenKind.SEMICOLON) else self.expression()
        self.consume(TokenKind.SEMICOLON, "';' after return value")
        return Return(value, line)

    def while_statement(self) -> While:
        line = self.previous().line
        self.consume(TokenKind.LPAREN, "'(' after 'while'")
        condition = self.expression()
        self.consume(TokenKind.RPAREN, "')' after while condition")
        return While(condition, self.statement(), line)

    def block(self) -> list[Stmt]:
        statements: list[Stmt] = []
        self.depth += 1
        try:
            while not self.check(TokenKind.RBRACE) and not self.at_end():
                stmt = self.declaration()
                if stmt is not None:
                    statements.append(stmt)
        finally:
            self.depth -= 1
        self.consume(TokenKind.RBRACE, "'}' after block")
        return statements

    def expression_statement(self) -> ExpressionStmt:
        expr = self.expression()
        self.consume(TokenKind.SEMICOLON, "';' after expression")
        return ExpressionStmt(expr, expr.line)

    # ------------------------
    # Expressions
    # ------------------------
    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.or_()

        if self.match(TokenKind.EQUAL):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value, expr.line)
            # Report without synchronizing; the parser is not confused
            self.errors.append(self.error("assignment target before '='", equals))
            return expr

        if self.match(TokenKind.PLUS_PLUS, TokenKind.MINUS_MINUS):
            op = self.previous()
            if isinstance(expr, Variable):
                delta = 1.0 if op.kind is TokenKind.PLUS_PLUS else -1.0
                return Increment(expr.name, delta, expr.line)
            self.errors.append(self.error(f"variable before '{op.lexeme}'", op))
            return expr

        return expr

    def or_(self) -> Expr:
        expr = self.and_()
        while self.match(TokenKind.OR):
            right = self.and_()
            expr = Logical(expr, "or", right, expr.line)
        return expr

    def and_(self) -> Expr:
        expr = self.equality()
        while self.match(TokenKind.AND):
            right = self.equality()
            expr = Logical(expr, "and", right, expr.line)
        return expr

    def _binary_level(self, operators: tuple[TokenKind, ...], operand) -> Expr:
        expr = operand()
        while self.match(*operators):
            op = self.previous()
            right = operand()
            expr = Binary(expr, op.lexeme, right, op.line)
        return expr

    def equality(self) -> Expr:
        return self._binary_level(EQUALITY_OPS, self.comparison)

    def comparison(self) -> Expr:
        return self._binary_level(COMPARISON_OPS, self.term)

    def term(self) -> Expr:
        return self._binary_level(TERM_OPS, self.factor)

    def factor(self) -> Expr:
        return self._binary_level(FACTOR_OPS, self.unary)

    def unary(self) -> Expr:
        if self.match(*UNARY_OPS):
            op = self.previous()
            return Unary(op.lexeme, self.unary(), op.line)
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while True:
            if self.match(TokenKind.LPAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenKind.DOT):
                name = self.consume(TokenKind.IDENTIFIER, "method name after '.'")
                expr = Member(expr, name.lexeme, name.line)
            elif self.match(TokenKind.LBRACK):
                expr = self.finish_accessor(expr)
            else:
                return expr

    def finish_call(self, callee: Expr) -> Call:
        line = self.previous().line
        arguments: list[Expr] = []
        if not self.check(TokenKind.RPAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.errors.append(self.error(f"at most {MAX_ARGUMENTS} arguments"))
                arguments.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break
        self.consume(TokenKind.RPAREN, "')' after arguments")
        return Call(callee, tuple(arguments), line)

    def finish_accessor(self, target: Expr) -> Expr:
        """Parse the inside of `[...]`: an index, or a slice when a `:` appears."""
        line = self.previous().line
        start = None if self.check(TokenKind.COLON) else self.expression()
        if self.match(TokenKind.COLON):
            end = None if self.check(TokenKind.RBRACK) else self.expression()
            self.consume(TokenKind.RBRACK, "']' after slice")
            return Slice(target, start, end, line)
        self.consume(TokenKind.RBRACK, "']' after index")
        return Index(target, start, line)

    def primary(self) -> Expr:
        tok = self.peek()
        if self.match(TokenKind.TRUE):
            return Literal(True, tok.line)
        if self.match(TokenKind.FALSE):
            return Literal(False, tok.line)
        if self.match(TokenKind.NULL):
            return Literal(Null, tok.line)
        if self.match(TokenKind.NUMBER, TokenKind.STRING):
            return Literal(tok.literal, tok.line)
        if self.match(TokenKind.IDENTIFIER):
            return Variable(tok.lexeme, tok.line)
        if self.match(TokenKind.LPAREN):
            expr = self.expression()
            self.consume(TokenKind.RPAREN, "')' after expression")
            return Grouping(expr, tok.line)
        if self.match(TokenKind.LBRACK):
            elements: list[Expr] = []
            while not self.check(TokenKind.RBRACK):
                elements.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break
            self.consume(TokenKind.RBRACK, "']' after list elements")
            return ListLiteral(tuple(elements), tok.line)
        raise self.error("expression")


def parse(tokens: Iterable[Token]) -> tuple[list[Stmt], list[ParseError]]:
    """Parse a token stream; returns the statements and every syntax error found."""
    parser = Parser(tokens)
    statements = parser.parse()
    return statements, parser.errors


def parse_source(source: str) -> tuple[list[Stmt], list[ParseError]]:
    """Convenience: lex then parse. LexError propagates to the caller."""
    return parse(list(lex(source)))
