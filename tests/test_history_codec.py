from __future__ import annotations

from typing import Any

from undo_session.buffer import (
    BOUNDARY,
    UNDO_DISABLED,
    Cons,
    Marker,
    Overlay,
    PropertizedText,
    Symbol,
    from_list,
    from_steps,
    iter_cells,
    to_list,
    tree_equal,
)
from undo_session.history import decode, decode_history, encode, encode_history
from undo_session.history.codec import MARKER, MARKER_AFTER, OVERLAY


def make_history() -> Any:
    deleted = Overlay(2, 4)
    deleted.delete()
    return from_steps(
        [
            [
                Cons(5, 11),
                Cons(Marker(7), -2),
                Cons(Marker(3, insertion_type=True), 1),
            ],
            [
                Cons(PropertizedText("gone", {"face": "bold"}), 4),
                Overlay(1, 9),
                deleted,
            ],
            [
                from_list([None, Symbol("face"), "bold", 3], tail=7),
                Cons(True, 1700000000.5),
                12,
                ("apply", 3),
            ],
        ]
    )


def test_round_trip_preserves_every_entry_variant() -> None:
    history = make_history()

    decoded = decode(encode(history))

    assert tree_equal(decoded, history)
    original = to_list(history)
    restored = to_list(decoded)
    assert restored[1].car is not original[1].car
    assert restored[1].car.position == 7
    assert restored[1].car.insertion_type is False
    assert restored[2].car.insertion_type is True
    assert restored[5] is not original[5]
    assert (restored[5].start, restored[5].end) == (1, 9)
    assert isinstance(restored[6], Overlay) and restored[6].deleted


def test_encode_emits_tagged_forms() -> None:
    entries = to_list(encode(make_history()))

    assert entries[1].car.car == MARKER and entries[1].car.cdr == 7
    assert entries[2].car.car == MARKER_AFTER and entries[2].car.cdr == 3
    assert to_list(entries[5]) == [OVERLAY, 1, 9]
    assert to_list(entries[6]) == [OVERLAY]
    assert type(entries[4].car) is str
    assert entries[4].car == "gone"
    assert entries[10] == 12
    assert entries[12] is BOUNDARY


def test_encode_leaves_live_history_untouched() -> None:
    history = make_history()
    cells = list(iter_cells(history))
    values = [cell.car for cell in cells]
    marker = values[1].car

    encoded = encode(history)

    assert [cell.car for cell in iter_cells(history)] == values
    assert all(a is b for a, b in zip(cells, iter_cells(history)))
    assert values[1].car is marker and marker.position == 7
    assert all(
        a is not b for a, b in zip(iter_cells(encoded), iter_cells(history))
    )


def test_unrecognized_tags_pass_through() -> None:
    history = from_list(
        [
            Cons(Symbol("marker"), "not-a-position"),
            Cons(Symbol("window"), 3),
            Cons("marker", 3),
            from_list([Symbol("overlay"), 1]),
        ]
    )

    decoded = decode(encode(history))

    assert tree_equal(decoded, history)
    assert all(isinstance(entry, Cons) for entry in to_list(decoded))


def test_marker_in_tail_position_round_trips() -> None:
    history = Cons(1, Marker(4, insertion_type=True))

    decoded = decode(encode(history))

    assert isinstance(decoded.cdr, Marker)
    assert decoded.cdr.position == 4 and decoded.cdr.insertion_type is True


def test_marker_pointing_nowhere_round_trips() -> None:
    history = from_list([Cons(Marker(None), 2), Cons(Marker(None, insertion_type=True), 1)])

    encoded = encode(history)
    decoded = decode(encoded)

    assert encoded.car.car.car == MARKER and encoded.car.car.cdr is None
    nowhere, nowhere_after = (entry.car for entry in to_list(decoded))
    assert isinstance(nowhere, Marker) and nowhere.position is None
    assert isinstance(nowhere_after, Marker) and nowhere_after.insertion_type is True
    assert tree_equal(decoded, history)


def test_empty_history_normalizes_to_none() -> None:
    assert encode_history(None) is None
    assert encode_history(Cons(BOUNDARY)) is None
    assert decode_history(None) is None
    assert decode_history(Cons(BOUNDARY)) is None


def test_undo_disabled_is_kept_distinct() -> None:
    assert encode_history(UNDO_DISABLED) is UNDO_DISABLED
    assert decode_history(Symbol("undo-disabled")) is UNDO_DISABLED


def test_long_history_is_walked_iteratively() -> None:
    steps = [[Cons(index, index + 1)] for index in range(50_000)]
    history = from_steps(steps)

    decoded = decode_history(encode_history(history))

    assert len(to_list(decoded)) == 100_000
    assert tree_equal(decoded, history)
