from __future__ import annotations

import pytest

from undo_session.buffer import (
    BOUNDARY,
    UNDO_DISABLED,
    Buffer,
    BufferValidationError,
    Cons,
    Marker,
    iter_steps,
    to_list,
)


def test_transactions_close_steps_with_boundaries() -> None:
    buffer = Buffer(text="")

    with buffer.transaction("first") as tx:
        tx.insert(0, "hello")
    with buffer.transaction("second") as tx:
        tx.insert(5, " world")

    entries = to_list(buffer.undo_list)
    assert buffer.text == "hello world"
    assert entries[1] is BOUNDARY
    assert (entries[0].car, entries[0].cdr) == (5, 11)
    assert (entries[2].car, entries[2].cdr) == (0, 5)
    assert entries[3].car is True
    assert len(list(iter_steps(buffer.undo_list))) == 2


def test_delete_records_text_and_marker_adjustments() -> None:
    buffer = Buffer(text="hello world")
    inside = buffer.make_marker(8)
    after = buffer.make_marker(11)

    with buffer.transaction("cut") as tx:
        removed = tx.delete(5, 11)

    deletion, adjustment_after, adjustment_inside, first_change = to_list(buffer.undo_list)
    assert removed == " world"
    assert (deletion.car, deletion.cdr) == (" world", 5)
    assert adjustment_inside.car is inside and adjustment_inside.cdr == 3
    assert adjustment_after.car is after and adjustment_after.cdr == 6
    assert first_change.car is True
    assert inside.position == 5 and after.position == 5


def test_marker_insertion_type_decides_advance() -> None:
    buffer = Buffer(text="ab")
    stays = buffer.make_marker(1)
    advances = buffer.make_marker(1, insertion_type=True)

    buffer.insert(1, "xyz")

    assert isinstance(stays, Marker)
    assert stays.position == 1
    assert advances.position == 4


def test_markers_pointing_nowhere_are_left_alone() -> None:
    buffer = Buffer(text="abcdef")
    detached = buffer.make_marker(2)
    detached.position = None

    buffer.insert(0, "xy")
    buffer.delete(0, 4)

    assert detached.position is None
    recorded = [entry.car for entry in to_list(buffer.undo_list)]
    assert detached not in recorded


def test_overlays_follow_edits() -> None:
    buffer = Buffer(text="0123456789")
    overlay = buffer.make_overlay(2, 6)

    buffer.insert(0, "ab")
    buffer.delete(0, 5)

    assert (overlay.start, overlay.end) == (0, 3)


def test_disabled_undo_records_nothing() -> None:
    buffer = Buffer(text="abc", undo_list=UNDO_DISABLED)

    buffer.insert(0, "x")

    assert buffer.undo_list is UNDO_DISABLED
    assert buffer.text == "xabc"


def test_out_of_range_edit_is_rejected() -> None:
    buffer = Buffer(text="abc")

    with pytest.raises(BufferValidationError):
        buffer.insert(10, "x")
    assert buffer.undo_list is None


def test_boundary_is_not_doubled() -> None:
    buffer = Buffer(text="", undo_list=Cons(Cons(0, 1)))

    buffer.undo_boundary()
    buffer.undo_boundary()

    entries = to_list(buffer.undo_list)
    assert len(entries) == 2
    assert entries[0] is BOUNDARY and entries[1] is not BOUNDARY
