"""Bidirectional mapping between download ids and their sorted positions."""

from __future__ import annotations

from bisect import bisect_left, insort


class IdIndexMap:
    """Maps each id to its position in ascending id order, and back.

    Lookups of absent ids or indices return -1.
    """

    def __init__(self) -> None:
        self._ids: list[int] = []

    def _position(self, download_id: int) -> int:
        pos = bisect_left(self._ids, download_id)
        if pos < len(self._ids) and self._ids[pos] == download_id:
            return pos
        return -1

    def insert(self, download_id: int) -> None:
        """Add an id; adding one already present does nothing."""
        if self._position(download_id) < 0:
            insort(self._ids, download_id)

    def erase(self, download_id: int) -> None:
        """Remove an id if present; the remaining indices close up."""
        pos = self._position(download_id)
        if pos >= 0:
            del self._ids[pos]

    def clear(self) -> None:
        self._ids.clear()

    def index_of(self, download_id: int) -> int:
        return self._position(download_id)

    def id_at(self, index: int) -> int:
        if 0 <= index < len(self._ids):
            return self._ids[index]
        return -1

    def __len__(self) -> int:
        return len(self._ids)