"""Text storage for undo-tracked buffers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BufferDocument:
    """Immutable text snapshot; every edit returns a new version."""

    text: str = ""
    version: int = 0
    dirty: bool = False

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(text=text, version=0, dirty=False)

    def replace(self, start: int, end: int, text: str) -> "BufferDocument":
        """Return a document with ``[start:end]`` replaced by ``text``."""

        updated = self.text[:start] + text + self.text[end:]
        return BufferDocument(text=updated, version=self.version + 1, dirty=True)

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]

    def mark_clean(self) -> "BufferDocument":
        return BufferDocument(text=self.text, version=self.version, dirty=False)

    @property
    def size(self) -> int:
        return len(self.text)
