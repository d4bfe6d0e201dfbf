"""Session records and their JSON grammar.

A session file holds two JSON documents, one per line: the header, then
the payload. Encoded histories map onto JSON as follows:

- ``None``, booleans, numbers and strings map to themselves;
- ``Symbol`` becomes ``{"sym": name}``;
- tuples and lists become ``{"vec": [...]}`` (read back as tuples);
- a chain of cells becomes ``{"list": [...]}``, plus ``"tail"`` when it
  does not end in ``None``.

Chains are flattened into arrays, so nesting depth follows the entries'
own structure rather than history length.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, List, Tuple

from undo_session.buffer.undo import NO_REDO, Cons, Symbol
from undo_session.history.equivalence import IndexPair

from .errors import CorruptSessionError


def fingerprint(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def to_wire(tree: Any) -> Any:
    if tree is None or isinstance(tree, (bool, int, float)):
        return tree
    if isinstance(tree, str):
        return str(tree)
    if isinstance(tree, Symbol):
        return {"sym": tree.name}
    if isinstance(tree, (tuple, list)):
        return {"vec": [to_wire(item) for item in tree]}
    if isinstance(tree, Cons):
        items = []
        cell: Any = tree
        while isinstance(cell, Cons):
            items.append(to_wire(cell.car))
            cell = cell.cdr
        node: dict = {"list": items}
        if cell is not None:
            node["tail"] = to_wire(cell)
        return node
    raise CorruptSessionError(f"Cannot store value of type {type(tree).__name__}")


def from_wire(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        if "list" in value:
            items = value["list"]
            if not isinstance(items, list):
                raise CorruptSessionError("'list' node must hold an array")
            chain = from_wire(value.get("tail"))
            for item in reversed(items):
                chain = Cons(from_wire(item), chain)
            return chain
        if "sym" in value and isinstance(value["sym"], str):
            return Symbol(value["sym"])
        if "vec" in value and isinstance(value["vec"], list):
            return tuple(from_wire(item) for item in value["vec"])
    raise CorruptSessionError(f"Unrecognized stored node: {value!r:.80}")


@dataclass(frozen=True, slots=True)
class SessionHeader:
    buffer_size: int
    buffer_checksum: str

    @classmethod
    def for_text(cls, text: str) -> "SessionHeader":
        return cls(buffer_size=len(text), buffer_checksum=fingerprint(text))

    def to_json(self) -> dict:
        return {"buffer-size": self.buffer_size, "buffer-checksum": self.buffer_checksum}

    @classmethod
    def from_json(cls, data: Any) -> "SessionHeader":
        try:
            size = data["buffer-size"]
            checksum = data["buffer-checksum"]
        except (KeyError, TypeError) as exc:
            raise CorruptSessionError(f"Malformed session header: {exc}") from exc
        if isinstance(size, bool) or not isinstance(size, int) or not isinstance(checksum, str):
            raise CorruptSessionError("Malformed session header field types")
        return cls(buffer_size=size, buffer_checksum=checksum)


@dataclass(frozen=True, slots=True)
class SessionPayload:
    """Encoded histories plus the positional equivalence index."""

    primary: Any
    pending: Any
    equivalence_index: Tuple[IndexPair, ...] = ()

    def to_json(self) -> dict:
        return {
            "primary-history": to_wire(self.primary),
            "pending-history": to_wire(self.pending),
            "equivalence-index": [
                [key, True if value == NO_REDO else value]
                for key, value in self.equivalence_index
            ],
        }

    @classmethod
    def from_json(cls, data: Any) -> "SessionPayload":
        try:
            primary = from_wire(data["primary-history"])
            pending = from_wire(data["pending-history"])
            raw_index = data["equivalence-index"]
        except (KeyError, TypeError) as exc:
            raise CorruptSessionError(f"Malformed session payload: {exc}") from exc
        return cls(primary=primary, pending=pending, equivalence_index=_index_from_json(raw_index))


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _index_from_json(raw: Any) -> Tuple[IndexPair, ...]:
    if not isinstance(raw, list):
        raise CorruptSessionError("'equivalence-index' must be an array")
    pairs: List[IndexPair] = []
    for item in raw:
        if not isinstance(item, list) or len(item) != 2 or not _is_index(item[0]):
            raise CorruptSessionError(f"Malformed equivalence pair: {item!r}")
        key, value = item
        if value is True:
            pairs.append((key, NO_REDO))
        elif _is_index(value):
            pairs.append((key, value))
        else:
            raise CorruptSessionError(f"Malformed equivalence value: {value!r}")
    return tuple(pairs)


__all__ = [
    "SessionHeader",
    "SessionPayload",
    "fingerprint",
    "from_wire",
    "to_wire",
]
