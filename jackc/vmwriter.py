"""
Jack VM Code Writer

Renders VM instructions, one per line, to a text stream.
"""

import itertools
import threading
from enum import Enum
from typing import Optional, TextIO

from .symbols import Kind


class Segment(Enum):
    """VM memory segments."""

    CONST = 'constant'
    ARG = 'argument'
    LOCAL = 'local'
    STATIC = 'static'
    THIS = 'this'
    THAT = 'that'
    POINTER = 'pointer'
    TEMP = 'temp'


class Command(Enum):
    """Zero-operand VM arithmetic and logic commands."""

    ADD = 'add'
    SUB = 'sub'
    NEG = 'neg'
    EQ = 'eq'
    GT = 'gt'
    LT = 'lt'
    AND = 'and'
    OR = 'or'
    NOT = 'not'


KIND_SEGMENTS = {
    Kind.STATIC: Segment.STATIC,
    Kind.FIELD: Segment.THIS,
    Kind.ARG: Segment.ARG,
    Kind.VAR: Segment.LOCAL,
}


def segment_for(kind: Kind) -> Segment:
    """Map a storage kind to the segment holding it."""
    try:
        return KIND_SEGMENTS[kind]
    except KeyError:
        raise ValueError(f"No segment for kind {kind}") from None


class LabelCounter:
    """
    Source of label numbers for a whole compilation run.

    Shared by every unit compiled in the run so that label names never
    collide; safe to share between threads.
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


class VMWriter:
    """Append-only writer of VM instructions."""

    def __init__(self, out: TextIO, labels: Optional[LabelCounter] = None):
        """
        Args:
            out: Text stream receiving the instructions
            labels: Counter shared across the run; a fresh one if omitted
        """
        self.out = out
        self.labels = labels if labels is not None else LabelCounter()

    def _write(self, line: str) -> None:
        self.out.write(line + '\n')

    def write_push(self, segment: Segment, index: int) -> None:
        self._write(f"push {segment.value} {index}")

    def write_pop(self, segment: Segment, index: int) -> None:
        self._write(f"pop {segment.value} {index}")

    def write_arithmetic(self, command: Command) -> None:
        self._write(command.value)

    def write_label(self, label: str) -> None:
        self._write(f"label {label}")

    def write_goto(self, label: str) -> None:
        self._write(f"goto {label}")

    def write_if(self, label: str) -> None:
        self._write(f"if-goto {label}")

    def write_call(self, name: str, n_args: int) -> None:
        self._write(f"call {name} {n_args}")

    def write_function(self, name: str, n_locals: int) -> None:
        self._write(f"function {name} {n_locals}")

    def write_return(self) -> None:
        self._write("return")

    def new_label(self, prefix: str = '') -> str:
        """Mint a label name unique across the run, e.g. ``IFLABEL3``."""
        return f"{prefix}LABEL{self.labels.next()}"
