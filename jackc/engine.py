"""
Jack Compilation Engine

Single-pass recursive descent compiler: each grammar production is a
method that consumes tokens from the lexer, resolves identifiers against
the class and subroutine scopes and emits VM code as it goes. No syntax
tree is built.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .tokens import (Token, TokenType, Keyword, KEYWORD_CONSTANTS,
                     PRIMITIVE_TYPES, SUBROUTINE_KINDS)
from .lexer import Lexer
from .symbols import Kind, Symbol, SymbolTable, Variable, ClassName, resolve
from .vmwriter import VMWriter, Segment, Command, segment_for
from .errors import SyntaxError, UndefinedSymbol

logger = logging.getLogger(__name__)


# Binary operators realized as native VM commands
BINARY_COMMANDS = {
    '+': Command.ADD,
    '-': Command.SUB,
    '&': Command.AND,
    '|': Command.OR,
    '<': Command.LT,
    '>': Command.GT,
    '=': Command.EQ,
}

# Binary operators realized as calls into the OS library
BINARY_CALLS = {
    '*': 'Math.multiply',
    '/': 'Math.divide',
}

UNARY_COMMANDS = {
    '-': Command.NEG,
    '~': Command.NOT,
}

CLASS_VAR_KINDS = {
    Keyword.STATIC: Kind.STATIC,
    Keyword.FIELD: Kind.FIELD,
}


@dataclass
class Subroutine:
    """The subroutine whose body is being compiled."""
    name: str
    category: Keyword
    return_type: str


class CompilationEngine:
    """Compiles one Jack class into VM code."""

    def __init__(self, lexer: Lexer, writer: VMWriter):
        self.lexer = lexer
        self.writer = writer
        self.class_scope = SymbolTable()
        self.subroutine_scope = SymbolTable()
        self.class_name: Optional[str] = None
        self.subroutine: Optional[Subroutine] = None

    # =========================================================================
    # Token helpers
    # =========================================================================

    @property
    def token(self) -> Token:
        return self.lexer.token

    def advance(self) -> Token:
        return self.lexer.advance()

    def error(self, expected: str) -> SyntaxError:
        """Build a SyntaxError against the current token."""
        token = self.token
        return SyntaxError(expected, token.describe(), token.line, token.column)

    def eat_keyword(self, *keywords: Keyword) -> Keyword:
        """Consume one of the given keywords and return it."""
        if not self.token.is_keyword(*keywords):
            raise self.error(" or ".join(f"'{k.value}'" for k in keywords))
        keyword = self.token.value
        self.advance()
        return keyword

    def eat_symbol(self, symbol: str) -> None:
        """Consume the given symbol."""
        if not self.token.is_symbol(symbol):
            raise self.error(f"'{symbol}'")
        self.advance()

    def eat_identifier(self) -> str:
        """Consume an identifier and return its text."""
        if self.token.type != TokenType.IDENTIFIER:
            raise self.error("an identifier")
        name = self.token.value
        self.advance()
        return name

    def eat_type(self, allow_void: bool = False) -> str:
        """Consume a type: int, char, boolean, a class name, or void if allowed."""
        token = self.token
        if token.type == TokenType.IDENTIFIER:
            self.advance()
            return token.value
        if token.is_keyword(*PRIMITIVE_TYPES) or (allow_void and token.is_keyword(Keyword.VOID)):
            self.advance()
            return token.value.value
        raise self.error("a type")

    def lookup_variable(self, name: str, token: Token) -> Symbol:
        """Resolve a name that must be a variable."""
        resolution = resolve(name, self.subroutine_scope, self.class_scope)
        if not isinstance(resolution, Variable):
            raise UndefinedSymbol(name, token.line, token.column)
        return resolution.symbol

    def push_variable(self, symbol: Symbol) -> None:
        self.writer.write_push(segment_for(symbol.kind), symbol.index)

    # =========================================================================
    # Program structure
    # =========================================================================

    def compile_class(self) -> None:
        """'class' className '{' classVarDec* subroutineDec* '}'"""
        self.advance()
        self.eat_keyword(Keyword.CLASS)
        self.class_name = self.eat_identifier()
        self.eat_symbol('{')
        logger.debug("Compiling class %s", self.class_name)

        while not self.token.is_symbol('}'):
            if self.token.is_keyword(*CLASS_VAR_KINDS):
                self.compile_class_var_dec()
            elif self.token.is_keyword(*SUBROUTINE_KINDS):
                self.compile_subroutine()
            else:
                raise self.error("a class variable or subroutine declaration")

        # The closing brace must be the last token of the unit
        if self.lexer.has_more():
            self.advance()
            raise self.error("end of input")

    def compile_class_var_dec(self) -> None:
        """('static' | 'field') type varName (',' varName)* ';'"""
        kind = CLASS_VAR_KINDS[self.eat_keyword(*CLASS_VAR_KINDS)]
        var_type = self.eat_type()
        self.class_scope.define(self.eat_identifier(), var_type, kind)

        while self.token.is_symbol(','):
            self.advance()
            self.class_scope.define(self.eat_identifier(), var_type, kind)

        self.eat_symbol(';')

    def compile_subroutine(self) -> None:
        """('constructor' | 'function' | 'method') ('void' | type) name '(' parameterList ')' body"""
        category = self.eat_keyword(*SUBROUTINE_KINDS)
        return_type = self.eat_type(allow_void=True)
        name = self.eat_identifier()

        self.subroutine = Subroutine(name, category, return_type)
        self.subroutine_scope.reset()

        # The receiver: argument 0 for methods, a local for constructors
        if category is Keyword.METHOD:
            self.subroutine_scope.define('this', self.class_name, Kind.ARG)
        elif category is Keyword.CONSTRUCTOR:
            self.subroutine_scope.define('this', self.class_name, Kind.VAR)

        self.eat_symbol('(')
        self.compile_parameter_list()
        self.eat_symbol(')')

        self.compile_subroutine_body()

    def compile_parameter_list(self) -> None:
        """((type varName) (',' type varName)*)?"""
        if self.token.is_symbol(')'):
            return

        param_type = self.eat_type()
        self.subroutine_scope.define(self.eat_identifier(), param_type, Kind.ARG)

        while self.token.is_symbol(','):
            self.advance()
            param_type = self.eat_type()
            self.subroutine_scope.define(self.eat_identifier(), param_type, Kind.ARG)

    def compile_subroutine_body(self) -> None:
        """'{' varDec* statements '}'"""
        self.eat_symbol('{')

        # Declarations first: the header needs the final local count
        while self.token.is_keyword(Keyword.VAR):
            self.compile_var_dec()

        subroutine = self.subroutine
        n_locals = self.subroutine_scope.count(Kind.VAR)
        self.writer.write_function(f"{self.class_name}.{subroutine.name}", n_locals)
        logger.debug("Emitted %s %s.%s with %d locals", subroutine.category.value,
                     self.class_name, subroutine.name, n_locals)

        if subroutine.category is Keyword.CONSTRUCTOR:
            self.writer.write_push(Segment.CONST, self.class_scope.count(Kind.FIELD))
            self.writer.write_call('Memory.alloc', 1)
            self.writer.write_pop(Segment.POINTER, 0)
        elif subroutine.category is Keyword.METHOD:
            self.writer.write_push(Segment.ARG, 0)
            self.writer.write_pop(Segment.POINTER, 0)

        self.compile_statements()
        self.eat_symbol('}')

    def compile_var_dec(self) -> None:
        """'var' type varName (',' varName)* ';'"""
        self.eat_keyword(Keyword.VAR)
        var_type = self.eat_type()
        self.subroutine_scope.define(self.eat_identifier(), var_type, Kind.VAR)

        while self.token.is_symbol(','):
            self.advance()
            self.subroutine_scope.define(self.eat_identifier(), var_type, Kind.VAR)

        self.eat_symbol(';')

    # =========================================================================
    # Statements
    # =========================================================================

    def compile_statements(self) -> None:
        """statement* up to, not including, the closing '}'."""
        while not self.token.is_symbol('}'):
            token = self.token
            if token.is_keyword(Keyword.LET):
                self.compile_let()
            elif token.is_keyword(Keyword.IF):
                self.compile_if()
            elif token.is_keyword(Keyword.WHILE):
                self.compile_while()
            elif token.is_keyword(Keyword.DO):
                self.compile_do()
            elif token.is_keyword(Keyword.RETURN):
                self.compile_return()
            else:
                raise self.error("a statement")

    def compile_let(self) -> None:
        """'let' varName ('[' expression ']')? '=' expression ';'"""
        self.eat_keyword(Keyword.LET)
        name_token = self.token
        symbol = self.lookup_variable(self.eat_identifier(), name_token)

        if self.token.is_symbol('['):
            self.advance()
            # Target address before the value
            self.push_variable(symbol)
            self.compile_expression()
            self.eat_symbol(']')
            self.writer.write_arithmetic(Command.ADD)

            self.eat_symbol('=')
            self.compile_expression()
            self.eat_symbol(';')

            # The value may have moved pointer 1; park it and restore the address
            self.writer.write_pop(Segment.TEMP, 0)
            self.writer.write_pop(Segment.POINTER, 1)
            self.writer.write_push(Segment.TEMP, 0)
            self.writer.write_pop(Segment.THAT, 0)
        else:
            self.eat_symbol('=')
            self.compile_expression()
            self.eat_symbol(';')
            self.writer.write_pop(segment_for(symbol.kind), symbol.index)

    def compile_if(self) -> None:
        """'if' '(' expression ')' '{' statements '}' ('else' '{' statements '}')?"""
        self.eat_keyword(Keyword.IF)
        else_label = self.writer.new_label('IF')
        end_label = self.writer.new_label('IF')

        self.eat_symbol('(')
        self.compile_expression()
        self.eat_symbol(')')
        self.writer.write_arithmetic(Command.NOT)
        self.writer.write_if(else_label)

        self.eat_symbol('{')
        self.compile_statements()
        self.eat_symbol('}')
        self.writer.write_goto(end_label)
        self.writer.write_label(else_label)

        if self.token.is_keyword(Keyword.ELSE):
            self.advance()
            self.eat_symbol('{')
            self.compile_statements()
            self.eat_symbol('}')

        self.writer.write_label(end_label)

    def compile_while(self) -> None:
        """'while' '(' expression ')' '{' statements '}'"""
        self.eat_keyword(Keyword.WHILE)
        top_label = self.writer.new_label('WHILE')
        bottom_label = self.writer.new_label('WHILE')
        self.writer.write_label(top_label)

        self.eat_symbol('(')
        self.compile_expression()
        self.eat_symbol(')')
        self.writer.write_arithmetic(Command.NOT)
        self.writer.write_if(bottom_label)

        self.eat_symbol('{')
        self.compile_statements()
        self.eat_symbol('}')

        self.writer.write_goto(top_label)
        self.writer.write_label(bottom_label)

    def compile_do(self) -> None:
        """'do' subroutineCall ';'"""
        self.eat_keyword(Keyword.DO)
        self.compile_term()
        self.eat_symbol(';')
        self.writer.write_pop(Segment.TEMP, 0)

    def compile_return(self) -> None:
        """'return' expression? ';'"""
        self.eat_keyword(Keyword.RETURN)

        if self.token.is_symbol(';'):
            self.writer.write_push(Segment.CONST, 0)
        else:
            self.compile_expression()

        self.eat_symbol(';')
        self.writer.write_return()

    # =========================================================================
    # Expressions
    # =========================================================================

    def compile_expression(self) -> None:
        """term (op term)*, evaluated strictly left to right."""
        self.compile_term()

        while self.token.type == TokenType.SYMBOL and self.lexer.is_binary_operator():
            op = self.lexer.as_symbol()
            self.advance()
            self.compile_term()

            if op in BINARY_CALLS:
                self.writer.write_call(BINARY_CALLS[op], 2)
            else:
                self.writer.write_arithmetic(BINARY_COMMANDS[op])

    def compile_term(self) -> None:
        """Compile a single term, leaving exactly one value on the stack."""
        token = self.token

        if token.type == TokenType.INT_CONST:
            self.writer.write_push(Segment.CONST, token.value)
            self.advance()

        elif token.type == TokenType.STRING_CONST:
            self.compile_string(token.value)
            self.advance()

        elif token.type == TokenType.KEYWORD:
            self.compile_keyword_constant(token)
            self.advance()

        elif token.type == TokenType.IDENTIFIER:
            self.advance()
            if self.token.is_symbol('.'):
                self.compile_qualified_call(token)
            elif self.token.is_symbol('['):
                self.compile_array_read(token)
            elif self.token.is_symbol('('):
                self.compile_method_call(token)
            else:
                self.push_variable(self.lookup_variable(token.value, token))

        elif token.is_symbol('('):
            self.advance()
            self.compile_expression()
            self.eat_symbol(')')

        elif token.type == TokenType.SYMBOL and self.lexer.is_unary_operator():
            self.advance()
            self.compile_term()
            self.writer.write_arithmetic(UNARY_COMMANDS[token.value])

        else:
            raise self.error("an expression term")

    def compile_string(self, text: str) -> None:
        """Build a String object one character at a time."""
        self.writer.write_push(Segment.CONST, len(text))
        self.writer.write_call('String.new', 1)
        for char in text:
            self.writer.write_push(Segment.CONST, ord(char))
            self.writer.write_call('String.appendChar', 2)

    def compile_keyword_constant(self, token: Token) -> None:
        keyword = token.value
        if keyword not in KEYWORD_CONSTANTS:
            raise self.error("an expression term")

        if keyword is Keyword.TRUE:
            self.writer.write_push(Segment.CONST, 1)
            self.writer.write_arithmetic(Command.NEG)
        elif keyword is Keyword.THIS:
            self.writer.write_push(Segment.POINTER, 0)
        else:
            self.writer.write_push(Segment.CONST, 0)

    def compile_qualified_call(self, name_token: Token) -> None:
        """name '.' subroutineName '(' expressionList ')'"""
        resolution = resolve(name_token.value, self.subroutine_scope, self.class_scope,
                             class_name_allowed=True)
        self.eat_symbol('.')
        subroutine_name = self.eat_identifier()

        if isinstance(resolution, Variable):
            # Method call on an object: the object is the hidden first argument
            self.push_variable(resolution.symbol)
            target = f"{resolution.symbol.type}.{subroutine_name}"
            n_args = 1
        elif isinstance(resolution, ClassName):
            target = f"{resolution.name}.{subroutine_name}"
            n_args = 0
        else:
            raise UndefinedSymbol(name_token.value, name_token.line, name_token.column)

        self.eat_symbol('(')
        n_args += self.compile_expression_list()
        self.eat_symbol(')')
        self.writer.write_call(target, n_args)

    def compile_method_call(self, name_token: Token) -> None:
        """subroutineName '(' expressionList ')' on the current object."""
        self.writer.write_push(Segment.POINTER, 0)
        self.eat_symbol('(')
        n_args = self.compile_expression_list()
        self.eat_symbol(')')
        self.writer.write_call(f"{self.class_name}.{name_token.value}", n_args + 1)

    def compile_array_read(self, name_token: Token) -> None:
        """varName '[' expression ']'"""
        symbol = self.lookup_variable(name_token.value, name_token)
        self.eat_symbol('[')
        self.push_variable(symbol)
        self.compile_expression()
        self.eat_symbol(']')
        self.writer.write_arithmetic(Command.ADD)
        self.writer.write_pop(Segment.POINTER, 1)
        self.writer.write_push(Segment.THAT, 0)

    def compile_expression_list(self) -> int:
        """(expression (',' expression)*)? -- returns the number compiled."""
        if self.token.is_symbol(')'):
            return 0

        self.compile_expression()
        count = 1
        while self.token.is_symbol(','):
            self.advance()
            self.compile_expression()
            count += 1
        return count
