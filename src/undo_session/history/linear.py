"""Collapse a branching undo history into its undo-only path."""

from __future__ import annotations

from typing import Any, List, Mapping

from undo_session.buffer.undo import BOUNDARY, NO_REDO, Cons, from_list, is_empty_history


def _chase(position: Any, equivalence: Mapping[Any, Any]) -> Any:
    seen = set()
    while isinstance(position, Cons) and id(position) not in seen:
        seen.add(id(position))
        target = equivalence.get(position)
        if target is None:
            return position
        if target is NO_REDO or target == NO_REDO:
            return None
        position = target
    return position if isinstance(position, Cons) else None


def linearize(history: Any, equivalence: Mapping[Any, Any]) -> Any:
    """Return the single straight-line history reached by undoing only.

    Whenever a step start is a key of ``equivalence`` the walk jumps to
    the step it maps to, which drops redo branches that are not part of
    the realized history. Steps are copied (boundary included) in the
    order they are visited, so the result stays newest-first.
    """

    if not isinstance(history, Cons):
        return None

    entries: List[Any] = []
    visited = set()
    position = history
    while True:
        position = _chase(position, equivalence)
        if position is None or id(position) in visited:
            break
        visited.add(id(position))
        while isinstance(position, Cons):
            entries.append(position.car)
            position = position.cdr
            if entries[-1] is BOUNDARY:
                break
        if not isinstance(position, Cons):
            break

    linear = from_list(entries)
    return None if is_empty_history(linear) else linear


__all__ = ["linearize"]
