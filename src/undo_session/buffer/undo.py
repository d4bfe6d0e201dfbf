"""Undo history object model shared by buffers and the persistence codec.

A history is a chain of :class:`Cons` cells, newest entry first. A cell
whose ``car`` is :data:`BOUNDARY` closes one undo step, so a buffer with
two commands looks like::

    e2b -> e2a -> BOUNDARY -> e1a -> BOUNDARY -> None

Cells are compared by identity. The primary history and the pending redo
list may share suffixes, and the equivalence table keys on the cells
themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Sequence


@dataclass(frozen=True, slots=True)
class Symbol:
    """Interned-by-value atom; never equal to a plain string."""

    name: str

    def __repr__(self) -> str:
        return self.name


BOUNDARY = None
UNDO_DISABLED = Symbol("undo-disabled")
NO_REDO = Symbol("no-redo")


class Cons:
    """Mutable pair; the building block of undo lists."""

    __slots__ = ("car", "cdr", "__weakref__")

    def __init__(self, car: Any, cdr: Any = None) -> None:
        self.car = car
        self.cdr = cdr

    def __repr__(self) -> str:
        items = []
        cell: Any = self
        while isinstance(cell, Cons) and len(items) < 8:
            items.append(repr(cell.car))
            cell = cell.cdr
        if isinstance(cell, Cons):
            items.append("...")
        elif cell is not None:
            items.append(f". {cell!r}")
        return f"({' '.join(items)})"


@dataclass(slots=True, eq=False)
class Marker:
    """Tracked buffer position; ``None`` once the marker points nowhere."""

    position: Optional[int]
    insertion_type: bool = False


@dataclass(slots=True, eq=False)
class Overlay:
    start: Optional[int]
    end: Optional[int]

    @property
    def deleted(self) -> bool:
        return self.start is None

    def delete(self) -> None:
        self.start = None
        self.end = None


class PropertizedText(str):
    """Text with attached display properties (faces, fontification...)."""

    properties: dict

    def __new__(cls, text: str, properties: Optional[dict] = None) -> "PropertizedText":
        value = super().__new__(cls, text)
        value.properties = dict(properties or {})
        return value


def iter_cells(history: Any) -> Iterator[Cons]:
    cell = history
    while isinstance(cell, Cons):
        yield cell
        cell = cell.cdr


def from_list(items: Sequence[Any], tail: Any = None) -> Any:
    """Build a chain holding ``items`` in order, ending in ``tail``."""

    chain = tail
    for item in reversed(items):
        chain = Cons(item, chain)
    return chain


def to_list(history: Any) -> List[Any]:
    return [cell.car for cell in iter_cells(history)]


def from_steps(steps: Iterable[Sequence[Any]]) -> Any:
    """Build a history from steps given newest first.

    Each step lists its entries newest first and gets a trailing boundary.
    """

    items: List[Any] = []
    for step in steps:
        items.extend(step)
        items.append(BOUNDARY)
    return from_list(items) if items else None


def iter_steps(history: Any) -> Iterator[tuple]:
    """Yield each step's entries, newest step first, boundaries removed."""

    step: List[Any] = []
    for cell in iter_cells(history):
        if cell.car is BOUNDARY:
            yield tuple(step)
            step = []
        else:
            step.append(cell.car)
    if step:
        yield tuple(step)


def is_empty_history(history: Any) -> bool:
    """True for no history at all and for a lone empty step."""

    if history is None:
        return True
    return isinstance(history, Cons) and history.car is BOUNDARY and history.cdr is None


def tree_equal(left: Any, right: Any) -> bool:
    """Structural equality over histories, without recursion.

    Markers compare by position and insertion type, overlays by range and
    strings by text (properties are ignored).
    """

    pending = [(left, right)]
    while pending:
        a, b = pending.pop()
        if isinstance(a, Cons):
            if not isinstance(b, Cons):
                return False
            pending.append((a.cdr, b.cdr))
            pending.append((a.car, b.car))
        elif isinstance(a, (tuple, list)):
            if type(a) is not type(b) or len(a) != len(b):
                return False
            pending.extend(zip(a, b))
        elif isinstance(a, Marker):
            if not isinstance(b, Marker):
                return False
            if (a.position, a.insertion_type) != (b.position, b.insertion_type):
                return False
        elif isinstance(a, Overlay):
            if not isinstance(b, Overlay) or (a.start, a.end) != (b.start, b.end):
                return False
        elif isinstance(a, str):
            if not isinstance(b, str) or str(a) != str(b):
                return False
        elif type(a) is not type(b) or a != b:
            return False
    return True


__all__ = [
    "BOUNDARY",
    "Cons",
    "Marker",
    "NO_REDO",
    "Overlay",
    "PropertizedText",
    "Symbol",
    "UNDO_DISABLED",
    "from_list",
    "from_steps",
    "is_empty_history",
    "iter_cells",
    "iter_steps",
    "to_list",
    "tree_equal",
]
