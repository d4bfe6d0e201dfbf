"""Convert live undo histories to storable trees and back.

Markers, overlays and propertized text refer to live buffer state and
cannot be stored as-is; they are swapped for tagged pairs built from
:class:`Symbol` atoms::

    Marker(12)                 <-> (marker . 12)
    Marker(12, insertion=True) <-> (marker* . 12)
    Overlay(3, 9)              <-> (overlay 3 9)
    deleted Overlay            <-> (overlay)

Everything else is copied through unchanged. Both directions build new
cells and leave their input untouched, since the live history keeps
being used by the buffer while it is serialized.
"""

from __future__ import annotations

from typing import Any, Callable

from undo_session.buffer.undo import (
    UNDO_DISABLED,
    Cons,
    Marker,
    Overlay,
    Symbol,
    is_empty_history,
)

MARKER = Symbol("marker")
MARKER_AFTER = Symbol("marker*")
OVERLAY = Symbol("overlay")

Transform = Callable[[Any], Any]


def _is_position(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _encode_leaf(value: Any) -> Any:
    if isinstance(value, Marker):
        tag = MARKER_AFTER if value.insertion_type else MARKER
        return Cons(tag, value.position)
    if isinstance(value, Overlay):
        if value.deleted:
            return Cons(OVERLAY, None)
        return Cons(OVERLAY, Cons(value.start, Cons(value.end, None)))
    if isinstance(value, str) and type(value) is not str:
        return str(value)
    return value


def _decode_leaf(value: Any) -> Any:
    if not isinstance(value, Cons):
        return value
    tag = value.car
    if tag == MARKER or tag == MARKER_AFTER:
        if value.cdr is None or _is_position(value.cdr):
            return Marker(value.cdr, insertion_type=tag == MARKER_AFTER)
    elif tag == OVERLAY:
        if value.cdr is None:
            overlay = Overlay(1, 1)
            overlay.delete()
            return overlay
        bounds = value.cdr
        if (
            isinstance(bounds, Cons)
            and isinstance(bounds.cdr, Cons)
            and bounds.cdr.cdr is None
            and _is_position(bounds.car)
            and _is_position(bounds.cdr.car)
        ):
            return Overlay(bounds.car, bounds.cdr.car)
    return value


def walk(tree: Any, transform: Transform) -> Any:
    """Rebuild ``tree`` with ``transform`` applied to every node.

    Recursion only descends into ``car`` and sequence items; the ``cdr``
    spine is followed in a loop so long histories cannot exhaust the
    stack.
    """

    value = transform(tree)
    if isinstance(value, (tuple, list)):
        return type(value)(walk(item, transform) for item in value)
    if not isinstance(value, Cons):
        return value

    head = Cons(walk(value.car, transform))
    last = head
    rest = transform(value.cdr)
    while isinstance(rest, Cons):
        cell = Cons(walk(rest.car, transform))
        last.cdr = cell
        last = cell
        rest = transform(rest.cdr)
    last.cdr = walk(rest, transform) if isinstance(rest, (tuple, list)) else rest
    return head


def encode(tree: Any) -> Any:
    return walk(tree, _encode_leaf)


def decode(tree: Any) -> Any:
    return walk(tree, _decode_leaf)


def encode_history(history: Any) -> Any:
    """Encode a full undo list; empty shapes collapse to ``None``."""

    if history is UNDO_DISABLED:
        return history
    if is_empty_history(history):
        return None
    return encode(history)


def decode_history(tree: Any) -> Any:
    if tree is UNDO_DISABLED or tree == UNDO_DISABLED:
        return UNDO_DISABLED
    history = decode(tree)
    return None if is_empty_history(history) else history


__all__ = [
    "MARKER",
    "MARKER_AFTER",
    "OVERLAY",
    "decode",
    "decode_history",
    "encode",
    "encode_history",
    "walk",
]
