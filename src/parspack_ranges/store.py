"""Shared holder for the current prefix snapshot."""

from __future__ import annotations

import time
from threading import Lock
from typing import Iterable, Optional, Tuple

from .prefixes import Prefix


class SnapshotStore:
    """Copy-on-write container for the authoritative prefix list.

    Each snapshot is an immutable tuple and publishing one is a single
    reference assignment, so :meth:`read` needs no lock and never observes a
    partially built list.  Writers are serialised by ``_write_lock``.
    """

    def __init__(self, initial: Iterable[Prefix] = ()) -> None:
        self._write_lock = Lock()
        self._snapshot: Tuple[Prefix, ...] = tuple(initial)
        self._generation = 0
        self._updated_at: Optional[float] = None

    def read(self) -> Tuple[Prefix, ...]:
        return self._snapshot

    def replace(self, prefixes: Iterable[Prefix]) -> Tuple[Prefix, ...]:
        """Publish ``prefixes`` as the new snapshot and return it."""

        snapshot = tuple(prefixes)
        with self._write_lock:
            self._snapshot = snapshot
            self._generation += 1
            self._updated_at = time.monotonic()
        return snapshot

    @property
    def generation(self) -> int:
        """Number of successful replacements so far."""

        return self._generation

    @property
    def updated_at(self) -> Optional[float]:
        return self._updated_at

    def __len__(self) -> int:
        return len(self._snapshot)
