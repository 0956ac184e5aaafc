"""
multisig.state.journal — undo journal with nested checkpoints.

Every store mutation records an *undo* closure here. The wallet facade opens a
checkpoint at the start of each call (top-level or reentrant) and either keeps
the entries (commit) or replays undo closures back to the checkpoint (revert).

Key properties
--------------
- Pure Python, no I/O.
- Nested checkpoints are plain integer markers (journal depth), so a reentrant
  call that fails only undoes its own writes.
- Committing the outermost checkpoint clears the journal; nothing is retained
  between independent top-level calls.
"""

from __future__ import annotations

from typing import Callable, List

Undo = Callable[[], None]


class Journal:
    __slots__ = ("_entries", "_open")

    def __init__(self) -> None:
        self._entries: List[Undo] = []
        self._open = 0

    def depth(self) -> int:
        return len(self._entries)

    @property
    def active(self) -> bool:
        return self._open > 0

    def record(self, undo: Undo) -> None:
        """Record an undo step. Ignored when no checkpoint is open."""
        if self._open:
            self._entries.append(undo)

    def checkpoint(self) -> int:
        self._open += 1
        return len(self._entries)

    def commit(self, marker: int) -> None:
        """Close the checkpoint, keeping its writes (visible to the enclosing scope)."""
        self._close()
        if not self._open:
            self._entries.clear()

    def revert(self, marker: int) -> None:
        """Undo every write made since `marker`, newest first, and close the checkpoint."""
        if marker < 0 or marker > len(self._entries):
            raise ValueError(f"invalid journal marker: {marker}")
        while len(self._entries) > marker:
            self._entries.pop()()
        self._close()
        if not self._open:
            self._entries.clear()

    def _close(self) -> None:
        if self._open <= 0:
            raise RuntimeError("journal checkpoint underflow")
        self._open -= 1


__all__ = ["Journal", "Undo"]
