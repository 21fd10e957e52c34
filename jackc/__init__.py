"""
Jack Compiler Package

A single-pass compiler from Jack classes to stack VM code.
"""

import io
from typing import Optional

from .tokens import Token, TokenType, Keyword
from .lexer import Lexer
from .symbols import Kind, Symbol, SymbolTable, Variable, ClassName, Unresolved
from .vmwriter import VMWriter, LabelCounter, Segment, Command
from .engine import CompilationEngine
from .errors import (JackError, LexError, SyntaxError, UndefinedSymbol,
                     EndOfInput, WrongTokenKind)

__version__ = "0.1.0"
__all__ = [
    "Token",
    "TokenType",
    "Keyword",
    "Lexer",
    "Kind",
    "Symbol",
    "SymbolTable",
    "Variable",
    "ClassName",
    "Unresolved",
    "VMWriter",
    "LabelCounter",
    "Segment",
    "Command",
    "CompilationEngine",
    "JackError",
    "LexError",
    "SyntaxError",
    "UndefinedSymbol",
    "EndOfInput",
    "WrongTokenKind",
    "compile_source",
    "compile_file",
]


def compile_source(source: str, labels: Optional[LabelCounter] = None) -> str:
    """
    Compile one Jack class to VM code.

    Args:
        source: Jack source code string
        labels: Label counter shared across a run; a fresh one if omitted

    Returns:
        VM instructions, one per line

    Raises:
        JackError: If compilation fails
    """
    out = io.StringIO()
    engine = CompilationEngine(Lexer(source), VMWriter(out, labels))
    engine.compile_class()
    return out.getvalue()


def compile_file(filepath: str, labels: Optional[LabelCounter] = None) -> str:
    """
    Compile a Jack source file to VM code.

    Args:
        filepath: Path to .jack source file
        labels: Label counter shared across a run

    Returns:
        VM instructions, one per line
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            source = f.read()
    except UnicodeDecodeError as e:
        raise LexError(f"Source is not valid UTF-8: {e.reason} at byte {e.start}",
                       filename=str(filepath)) from e
    try:
        return compile_source(source, labels)
    except JackError as e:
        raise e.with_filename(str(filepath))
