"""Undo history transforms: tree codec, linearizer and equivalence indices."""

from .codec import decode, decode_history, encode, encode_history, walk
from .equivalence import (
    EQUIVALENCE,
    EquivalenceTable,
    decode_index,
    encode_index,
    step_starts,
)
from .linear import linearize

__all__ = [
    "EQUIVALENCE",
    "EquivalenceTable",
    "decode",
    "decode_history",
    "decode_index",
    "encode",
    "encode_history",
    "encode_index",
    "linearize",
    "step_starts",
    "walk",
]
