"""
Jack Token Definitions

Defines token types, keywords and the Token class for lexical analysis.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """Lexical classifications of Jack tokens."""

    KEYWORD = auto()
    SYMBOL = auto()
    IDENTIFIER = auto()
    INT_CONST = auto()
    STRING_CONST = auto()


class Keyword(Enum):
    """The 21 reserved words of Jack."""

    CLASS = 'class'
    CONSTRUCTOR = 'constructor'
    FUNCTION = 'function'
    METHOD = 'method'
    FIELD = 'field'
    STATIC = 'static'
    VAR = 'var'
    INT = 'int'
    CHAR = 'char'
    BOOLEAN = 'boolean'
    VOID = 'void'
    TRUE = 'true'
    FALSE = 'false'
    NULL = 'null'
    THIS = 'this'
    LET = 'let'
    DO = 'do'
    IF = 'if'
    ELSE = 'else'
    WHILE = 'while'
    RETURN = 'return'


# Keyword mapping
KEYWORDS = {keyword.value: keyword for keyword in Keyword}

SYMBOLS = frozenset('{}()[].,;+-*/&|<>=~')

BINARY_OPERATORS = frozenset('+-*/&|<>=')
UNARY_OPERATORS = frozenset('-~')

KEYWORD_CONSTANTS = frozenset((Keyword.TRUE, Keyword.FALSE, Keyword.NULL, Keyword.THIS))
PRIMITIVE_TYPES = frozenset((Keyword.INT, Keyword.CHAR, Keyword.BOOLEAN))
SUBROUTINE_KINDS = frozenset((Keyword.CONSTRUCTOR, Keyword.FUNCTION, Keyword.METHOD))

MAX_INT = 32767


@dataclass(frozen=True)
class Token:
    """Represents a single classified token from the source code."""

    type: TokenType
    lexeme: str
    value: Any
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, line={self.line})"

    def describe(self) -> str:
        """Short human-readable form used in diagnostics."""
        if self.type == TokenType.STRING_CONST:
            return f'string "{self.value}"'
        if self.type == TokenType.INT_CONST:
            return f"integer {self.value}"
        return f"{self.type.name.lower().replace('_', ' ')} {self.lexeme!r}"

    def is_keyword(self, *keywords: Keyword) -> bool:
        """Check if this token is one of the given keywords (any if none given)."""
        if self.type != TokenType.KEYWORD:
            return False
        return not keywords or self.value in keywords

    def is_symbol(self, symbols: str = '') -> bool:
        """Check if this token is one of the given symbol characters (any if empty)."""
        if self.type != TokenType.SYMBOL:
            return False
        return not symbols or self.value in symbols
