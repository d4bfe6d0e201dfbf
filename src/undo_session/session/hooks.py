"""Connect a store to buffer lifecycle events."""

from __future__ import annotations

from typing import Any

from undo_session.runtime.events import BUFFER_BEFORE_SAVE, BUFFER_OPENED, EventBus

from .store import UndoSessionStore


class SessionHooks:
    """Saves on ``buffer.before_save`` and restores on ``buffer.opened``."""

    def __init__(self, store: UndoSessionStore) -> None:
        self.store = store

    def on_before_save(self, buffer: Any) -> None:
        self.store.save(buffer)

    def on_opened(self, buffer: Any) -> None:
        self.store.load(buffer)

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(BUFFER_BEFORE_SAVE, self.on_before_save)
        bus.subscribe(BUFFER_OPENED, self.on_opened)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(BUFFER_BEFORE_SAVE, self.on_before_save)
        bus.unsubscribe(BUFFER_OPENED, self.on_opened)
