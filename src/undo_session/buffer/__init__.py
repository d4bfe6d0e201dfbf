"""Editing buffers and the undo history object model."""

from .buffer import Buffer, Transaction
from .document import BufferDocument
from .undo import (
    BOUNDARY,
    NO_REDO,
    UNDO_DISABLED,
    Cons,
    Marker,
    Overlay,
    PropertizedText,
    Symbol,
    from_list,
    from_steps,
    is_empty_history,
    iter_cells,
    iter_steps,
    to_list,
    tree_equal,
)
from .validation import BufferValidationError, ensure_position, ensure_range

__all__ = [
    "BOUNDARY",
    "Buffer",
    "BufferDocument",
    "BufferValidationError",
    "Cons",
    "Marker",
    "NO_REDO",
    "Overlay",
    "PropertizedText",
    "Symbol",
    "Transaction",
    "UNDO_DISABLED",
    "ensure_position",
    "ensure_range",
    "from_list",
    "from_steps",
    "is_empty_history",
    "iter_cells",
    "iter_steps",
    "to_list",
    "tree_equal",
]
