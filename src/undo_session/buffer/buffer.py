"""Editing buffer that records its changes into an undo list."""

from __future__ import annotations

import os
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, ContextManager, List, Optional

from undo_session.runtime import telemetry

from .document import BufferDocument
from .undo import BOUNDARY, UNDO_DISABLED, Cons, Marker, Overlay
from .validation import ensure_position, ensure_range


class Buffer:
    """Text plus the live undo state the persistence layer observes.

    ``undo_list`` is the primary history (newest first), ``None`` when
    empty or :data:`UNDO_DISABLED` when recording is off.
    ``pending_undo_list`` is where the next undo would continue from.
    """

    def __init__(
        self,
        *,
        name: str = "scratch",
        text: str = "",
        file_name: Optional[str] = None,
        major_mode: str = "fundamental-mode",
        undo_list: Any = None,
        pending_undo_list: Any = None,
    ) -> None:
        self.name = name
        self.document = BufferDocument.from_text(text)
        self.file_name = file_name
        self.major_mode = major_mode
        self.undo_list = undo_list
        self.pending_undo_list = pending_undo_list
        self.visited_mtime = 0.0
        self.markers: List[Marker] = []
        self.overlays: List[Overlay] = []

    @classmethod
    def from_file(
        cls, path: str | os.PathLike[str], *, major_mode: str = "fundamental-mode"
    ) -> "Buffer":
        resolved = Path(path).resolve()
        buffer = cls(
            name=resolved.name,
            text=resolved.read_text(encoding="utf-8"),
            file_name=str(resolved),
            major_mode=major_mode,
        )
        buffer.visited_mtime = resolved.stat().st_mtime
        return buffer

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def size(self) -> int:
        return self.document.size

    def write_file(self) -> None:
        if self.file_name is None:
            raise ValueError(f"Buffer '{self.name}' is not visiting a file")
        path = Path(self.file_name)
        path.write_text(self.text, encoding="utf-8")
        self.visited_mtime = path.stat().st_mtime
        self.document = self.document.mark_clean()

    def make_marker(self, position: int, *, insertion_type: bool = False) -> Marker:
        marker = Marker(ensure_position(self.document, position), insertion_type)
        self.markers.append(marker)
        return marker

    def make_overlay(self, start: int, end: int) -> Overlay:
        start, end = ensure_range(self.document, start, end)
        overlay = Overlay(start, end)
        self.overlays.append(overlay)
        return overlay

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def undo_boundary(self) -> None:
        """Close the current step, unless it is already closed."""

        if isinstance(self.undo_list, Cons) and self.undo_list.car is not BOUNDARY:
            self.undo_list = Cons(BOUNDARY, self.undo_list)

    def insert(self, position: int, text: str) -> None:
        position = ensure_position(self.document, position)
        if not text:
            return
        self._record_first_change()
        self._record(Cons(position, position + len(text)))
        self.document = self.document.replace(position, position, text)
        for marker in self.markers:
            if marker.position is None:
                continue
            if marker.position > position or (
                marker.position == position and marker.insertion_type
            ):
                marker.position += len(text)
        for overlay in self.overlays:
            if overlay.deleted:
                continue
            if overlay.start > position:
                overlay.start += len(text)
            if overlay.end >= position:
                overlay.end += len(text)

    def delete(self, start: int, end: int) -> str:
        start, end = ensure_range(self.document, start, end)
        if start == end:
            return ""
        removed = self.document.slice(start, end)
        self._record_first_change()
        live = [marker for marker in self.markers if marker.position is not None]
        for marker in live:
            if start < marker.position <= end:
                self._record(Cons(marker, marker.position - start))
        self._record(Cons(removed, start))
        self.document = self.document.replace(start, end, "")
        for marker in live:
            if marker.position > end:
                marker.position -= end - start
            elif marker.position > start:
                marker.position = start
        for overlay in self.overlays:
            if not overlay.deleted:
                overlay.start = _shrink(overlay.start, start, end)
                overlay.end = _shrink(overlay.end, start, end)
        return removed

    def _record_first_change(self) -> None:
        if not self.document.dirty:
            self._record(Cons(True, self.visited_mtime))

    def _record(self, entry: Any) -> None:
        if self.undo_list is UNDO_DISABLED:
            return
        self.undo_list = Cons(entry, self.undo_list)


class Transaction(AbstractContextManager["Transaction"]):
    """Groups edits into one undo step, traced as a telemetry span."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self.buffer.undo_boundary()
        self._span_cm = telemetry.span(
            f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def insert(self, position: int, text: str) -> None:
        self.buffer.insert(position, text)

    def delete(self, start: int, end: int) -> str:
        return self.buffer.delete(start, end)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _shrink(position: int, start: int, end: int) -> int:
    if position > end:
        return position - (end - start)
    if position > start:
        return start
    return position
