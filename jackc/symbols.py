"""
Jack Symbol Tables

Two instances are used per compilation unit: a class scope holding
static and field variables, and a subroutine scope holding arguments
and locals that is reset at the start of every subroutine.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Optional, Union


class Kind(Enum):
    """Storage kind of a named variable."""

    STATIC = 'static'
    FIELD = 'field'
    ARG = 'argument'
    VAR = 'local'
    NONE = None


@dataclass(frozen=True)
class Symbol:
    """A single binding in a symbol table."""

    name: str
    type: str
    kind: Kind
    index: int


class SymbolTable:
    """Maps identifiers to (type, kind, index) with per-kind counters."""

    def __init__(self):
        self.symbols: Dict[str, Symbol] = {}
        self.counts: Dict[Kind, int] = {}
        self.reset()

    def reset(self) -> None:
        """Drop every binding and zero every counter."""
        self.symbols.clear()
        self.counts = {kind: 0 for kind in Kind if kind is not Kind.NONE}

    def define(self, name: str, type: str, kind: Kind) -> Symbol:
        """
        Register a new binding, taking the next index of its kind.

        Redefining a name replaces the earlier binding; the earlier index
        stays consumed.
        """
        if kind is Kind.NONE:
            raise ValueError(f"Cannot define {name!r} with kind NONE")

        symbol = Symbol(name, type, kind, self.counts[kind])
        self.counts[kind] += 1
        self.symbols[name] = symbol
        return symbol

    def count(self, kind: Kind) -> int:
        """Number of bindings of the given kind defined since the last reset."""
        return self.counts.get(kind, 0)

    def lookup(self, name: str) -> Optional[Symbol]:
        return self.symbols.get(name)

    def kind_of(self, name: str) -> Kind:
        symbol = self.symbols.get(name)
        return symbol.kind if symbol else Kind.NONE

    def type_of(self, name: str) -> Optional[str]:
        symbol = self.symbols.get(name)
        return symbol.type if symbol else None

    def index_of(self, name: str) -> Optional[int]:
        symbol = self.symbols.get(name)
        return symbol.index if symbol else None

    def __contains__(self, name: str) -> bool:
        return name in self.symbols

    def __len__(self) -> int:
        return len(self.symbols)


# =============================================================================
# Resolution results
# =============================================================================

@dataclass(frozen=True)
class Variable:
    """The identifier names a variable in one of the two scopes."""
    symbol: Symbol


@dataclass(frozen=True)
class ClassName:
    """The identifier is not a variable and is taken as a class name."""
    name: str


@dataclass(frozen=True)
class Unresolved:
    """The identifier is in neither scope."""
    name: str


Resolution = Union[Variable, ClassName, Unresolved]


def resolve(name: str, subroutine_scope: SymbolTable, class_scope: SymbolTable,
            class_name_allowed: bool = False) -> Resolution:
    """
    Resolve an identifier, subroutine scope first, then class scope.

    When ``class_name_allowed`` is set (the receiver position of a qualified
    call) an unknown identifier resolves to ``ClassName`` instead of
    ``Unresolved``.
    """
    symbol = subroutine_scope.lookup(name) or class_scope.lookup(name)
    if symbol is not None:
        return Variable(symbol)
    if class_name_allowed:
        return ClassName(name)
    return Unresolved(name)
