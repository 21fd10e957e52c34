"""
Jack Lexer

Tokenizes Jack source code and exposes the tokens as a pull-based
cursor: the compilation engine holds one current token and advances.
"""

import string
from typing import List, Optional
from .tokens import (Token, TokenType, Keyword, KEYWORDS, SYMBOLS,
                     BINARY_OPERATORS, UNARY_OPERATORS, MAX_INT)
from .errors import LexError, EndOfInput, WrongTokenKind


class Lexer:
    """Lexical analyzer for Jack source code."""

    def __init__(self, source: str):
        """
        Initialize the lexer.

        Args:
            source: Jack source code to tokenize
        """
        self.source = source
        self.tokens: Optional[List[Token]] = None
        self.start = 0      # Start of current token
        self.current = 0    # Current position
        self.line = 1       # Current line number
        self.line_start = 0 # Position of current line start

        self.position = -1  # Index of the cursor's current token
        self._scanned: List[Token] = []

    # =========================================================================
    # Scanning
    # =========================================================================

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens in source order
        """
        if self.tokens is None:
            while not self.is_at_end():
                self.start = self.current
                self.scan_token()
            self.tokens = self._scanned
        return self.tokens

    def scan_token(self) -> None:
        """Scan the next token."""
        c = self.advance_char()

        # Skip whitespace
        if c in ' \t\r\f\v':
            return

        # Newline
        if c == '\n':
            self.newline()
            return

        # Comments
        if c == '/':
            if self.match('/'):
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance_char()
                return
            if self.match('*'):
                # Covers both /* */ and /** */
                self.block_comment()
                return
            self.add_token(TokenType.SYMBOL, c)
            return

        if c in SYMBOLS:
            self.add_token(TokenType.SYMBOL, c)
        elif c == '"':
            self.string()
        elif c in string.digits:
            self.number()
        elif c.isascii() and (c.isalpha() or c == '_'):
            self.identifier()
        else:
            raise LexError(f"Unexpected character: {c!r}", self.line, self.column_of(self.start))

    def advance_char(self) -> str:
        """Consume and return the current character."""
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self) -> str:
        """Return the current character without consuming it."""
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        """Return the next character without consuming it."""
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def match(self, expected: str) -> bool:
        """Consume the current character if it matches expected."""
        if self.is_at_end():
            return False
        if self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def is_at_end(self) -> bool:
        """Check if we've reached the end of the source."""
        return self.current >= len(self.source)

    def newline(self) -> None:
        self.line += 1
        self.line_start = self.current

    def column_of(self, offset: int) -> int:
        return offset - self.line_start + 1

    def add_token(self, type: TokenType, value) -> None:
        """Add a token to the scanned list."""
        lexeme = self.source[self.start:self.current]
        self._scanned.append(Token(type, lexeme, value, self.line, self.column_of(self.start)))

    def string(self) -> None:
        """Scan a string literal. No escapes; must close on the same line."""
        while self.peek() != '"':
            if self.is_at_end() or self.peek() == '\n':
                raise LexError("Unterminated string", self.line, self.column_of(self.start))
            # Each character becomes a VM constant
            if not self.peek().isascii():
                raise LexError(f"Non-ASCII character in string: {self.peek()!r}",
                               self.line, self.column_of(self.current))
            self.advance_char()

        # Consume closing quote
        self.advance_char()

        self.add_token(TokenType.STRING_CONST, self.source[self.start + 1:self.current - 1])

    def number(self) -> None:
        """Scan a decimal integer literal."""
        while self.peek() in string.digits:
            self.advance_char()

        value = int(self.source[self.start:self.current])
        if value > MAX_INT:
            raise LexError(f"Integer constant out of range: {value}",
                           self.line, self.column_of(self.start))
        self.add_token(TokenType.INT_CONST, value)

    def identifier(self) -> None:
        """Scan an identifier or keyword."""
        while self.peek().isascii() and (self.peek().isalnum() or self.peek() == '_'):
            self.advance_char()

        text = self.source[self.start:self.current]

        keyword = KEYWORDS.get(text)
        if keyword is not None:
            self.add_token(TokenType.KEYWORD, keyword)
        else:
            self.add_token(TokenType.IDENTIFIER, text)

    def block_comment(self) -> None:
        """Skip a block comment /* ... */."""
        line, column = self.line, self.column_of(self.start)

        while not self.is_at_end():
            if self.peek() == '*' and self.peek_next() == '/':
                self.advance_char()
                self.advance_char()
                return
            if self.advance_char() == '\n':
                self.newline()

        raise LexError("Unterminated block comment", line, column)

    # =========================================================================
    # Cursor
    # =========================================================================

    def has_more(self) -> bool:
        """Check if advance() can produce another token."""
        return self.position + 1 < len(self.tokenize())

    def advance(self) -> Token:
        """Move to the next token and return it."""
        tokens = self.tokenize()
        if self.position + 1 >= len(tokens):
            last = tokens[-1] if tokens else None
            raise EndOfInput("Unexpected end of input",
                             last.line if last else self.line,
                             last.column if last else None)
        self.position += 1
        return tokens[self.position]

    @property
    def token(self) -> Token:
        """The current token."""
        if self.position < 0:
            raise EndOfInput("No current token; advance() has not been called")
        return self.tokenize()[self.position]

    @property
    def token_type(self) -> TokenType:
        return self.token.type

    def _expect_kind(self, kind: TokenType) -> Token:
        token = self.token
        if token.type != kind:
            raise WrongTokenKind(
                f"Current token is {token.describe()}, not {kind.name.lower().replace('_', ' ')}",
                token.line, token.column)
        return token

    def as_keyword(self) -> Keyword:
        return self._expect_kind(TokenType.KEYWORD).value

    def as_symbol(self) -> str:
        return self._expect_kind(TokenType.SYMBOL).value

    def as_identifier(self) -> str:
        return self._expect_kind(TokenType.IDENTIFIER).value

    def as_int(self) -> int:
        return self._expect_kind(TokenType.INT_CONST).value

    def as_string(self) -> str:
        return self._expect_kind(TokenType.STRING_CONST).value

    def is_binary_operator(self) -> bool:
        """Check if the current symbol is one of + - * / & | < > =."""
        return self.as_symbol() in BINARY_OPERATORS

    def is_unary_operator(self) -> bool:
        """Check if the current symbol is - or ~."""
        return self.as_symbol() in UNARY_OPERATORS
