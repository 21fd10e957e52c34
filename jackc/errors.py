"""
Jack Compiler Errors

Defines exception classes for compilation errors.
"""

from typing import Optional


class JackError(Exception):
    """Base exception for all Jack compiler errors."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, filename: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location information."""
        parts = []

        if self.filename:
            parts.append(self.filename)

        if self.line is not None:
            if parts:
                parts.append(f"{self.line}")
            else:
                parts.append(f"line {self.line}")

            if self.column is not None:
                parts.append(f"{self.column}")

        if parts:
            return f"{':'.join(parts)}: {self.message}"
        return self.message

    def with_filename(self, filename: str) -> 'JackError':
        """Attach a file name and refresh the formatted message."""
        self.filename = filename
        self.args = (self._format_message(),)
        return self


class LexError(JackError):
    """Raised for characters or literals the lexer cannot classify."""
    pass


class SyntaxError(JackError):
    """Raised when the current token does not fit the grammar."""

    def __init__(self, expected: str, found: str, line: Optional[int] = None,
                 column: Optional[int] = None, filename: Optional[str] = None):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected {expected} but found {found}",
                         line, column, filename)


class UndefinedSymbol(JackError):
    """Raised when an identifier is in neither scope table."""

    def __init__(self, name: str, line: Optional[int] = None,
                 column: Optional[int] = None, filename: Optional[str] = None):
        self.name = name
        super().__init__(f"Undefined symbol: {name!r}", line, column, filename)


class EndOfInput(JackError):
    """Raised when the token stream is advanced past its last token."""
    pass


class WrongTokenKind(JackError):
    """Raised when a token accessor does not match the token's type."""
    pass
