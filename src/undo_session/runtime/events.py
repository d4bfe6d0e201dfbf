"""Minimal synchronous event bus for editor lifecycle signals."""

from __future__ import annotations

from typing import Callable, Dict

BUFFER_OPENED = "buffer.opened"
BUFFER_BEFORE_SAVE = "buffer.before_save"

Callback = Callable[[object], None]


class EventBus:
    """Fan-out of named events to subscribers, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callback]] = {}

    def subscribe(self, event: str, callback: Callback) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callback) -> bool:
        callbacks = self._subscribers.get(event, [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True

    def subscribers(self, event: str) -> tuple[Callback, ...]:
        return tuple(self._subscribers.get(event, ()))

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in tuple(self._subscribers.get(event, ())):
            callback(payload)
