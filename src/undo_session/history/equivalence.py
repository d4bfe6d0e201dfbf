"""The undo/redo equivalence table and its positional encoding.

The table maps the list position reached by an undo to the position it
undid back to (or :data:`NO_REDO`). Keys and values are live cells, so
they cannot be written out directly. Instead every step start of the
primary history is numbered 0, 1, 2... and every step start of the
pending list -1, -2..., and the table is stored as index pairs.
"""

from __future__ import annotations

import weakref
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from undo_session.buffer.undo import BOUNDARY, NO_REDO, Cons, Symbol
from undo_session.runtime.telemetry import record_event

IndexValue = Union[int, Symbol]
IndexPair = Tuple[int, IndexValue]


class EquivalenceTable:
    """Process-wide, weakly keyed map shared by every open buffer.

    Loading a session only ever adds links; entries belonging to other
    buffers stay intact.
    """

    def __init__(self) -> None:
        self._links: "weakref.WeakKeyDictionary[Cons, Any]" = weakref.WeakKeyDictionary()

    def get(self, key: Any, default: Any = None) -> Any:
        if not isinstance(key, Cons):
            return default
        return self._links.get(key, default)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, Cons) and key in self._links

    def __len__(self) -> int:
        return len(self._links)

    def merge(self, links: Union[Mapping[Cons, Any], Iterable[Tuple[Cons, Any]]]) -> int:
        pairs = links.items() if isinstance(links, Mapping) else links
        merged = 0
        for key, value in pairs:
            self._links[key] = value
            merged += 1
        return merged


EQUIVALENCE = EquivalenceTable()


def step_starts(history: Any) -> Iterator[Cons]:
    """Yield the head cell and every cell right after a boundary.

    Encoding and decoding both number cells through this walker; any
    divergence would bind indices to the wrong steps.
    """

    cell = history
    at_start = True
    while isinstance(cell, Cons):
        if at_start:
            yield cell
        at_start = cell.car is BOUNDARY
        cell = cell.cdr


def _number_cells(primary: Any, pending: Any) -> Dict[Cons, int]:
    numbering: Dict[Cons, int] = {}
    for index, cell in enumerate(step_starts(primary)):
        numbering.setdefault(cell, index)
    for index, cell in enumerate(step_starts(pending), start=1):
        numbering.setdefault(cell, -index)
    return numbering


def _index_cells(primary: Any, pending: Any) -> Dict[int, Cons]:
    cells: Dict[int, Cons] = {}
    for index, cell in enumerate(step_starts(primary)):
        cells[index] = cell
    for index, cell in enumerate(step_starts(pending), start=1):
        cells[-index] = cell
    return cells


def encode_index(table: Any, primary: Any, pending: Any) -> List[IndexPair]:
    """Return ``(key, value)`` index pairs for links reachable from the lists.

    Links whose key is not a step start of either list belong to some
    other buffer and are left out, as are links pointing nowhere we can
    name.
    """

    numbering = _number_cells(primary, pending)
    pairs: List[IndexPair] = []
    for cell, index in numbering.items():
        target = table.get(cell)
        if target is None:
            continue
        if target is NO_REDO or target == NO_REDO:
            pairs.append((index, NO_REDO))
        elif isinstance(target, Cons) and target in numbering:
            pairs.append((index, numbering[target]))
    return pairs


def decode_index(pairs: Iterable[IndexPair], primary: Any, pending: Any) -> Dict[Cons, Any]:
    """Resolve stored index pairs against freshly decoded lists."""

    cells = _index_cells(primary, pending)
    links: Dict[Cons, Any] = {}
    for key_index, value_index in pairs:
        key = cells.get(key_index)
        if value_index == NO_REDO:
            value: Any = NO_REDO
        else:
            value = cells.get(value_index)
        if key is None or value is None:
            record_event(
                "equivalence.unresolved",
                level="debug",
                data={"key": key_index, "value": value_index},
            )
            continue
        links[key] = value
    return links


__all__ = [
    "EQUIVALENCE",
    "EquivalenceTable",
    "IndexPair",
    "decode_index",
    "encode_index",
    "step_starts",
]
