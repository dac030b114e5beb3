"""Process-wide store of the tool paths and the download queue."""

from __future__ import annotations

import threading
from bisect import insort
from operator import attrgetter
from typing import ClassVar, Iterable

from mediadownloader.download import Download
from mediadownloader.toolspath import ToolsPath

_BY_ID = attrgetter("id")


class SharedStorage:
    """Holds the tool paths and the downloads, kept in ascending id order.

    Downloads are stored by reference, so changes made to a stored
    download are visible to every holder of it.
    """

    _instance: ClassVar["SharedStorage | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tools = ToolsPath()
        self._list: list[Download] = []
        self._index: dict[int, Download] = {}

    @classmethod
    def instance(cls) -> "SharedStorage":
        """Return the process-wide storage, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @property
    def tools_path(self) -> ToolsPath:
        """The shared tool paths object."""
        with self._lock:
            return self._tools

    def set_tools_path(self, tools: ToolsPath) -> None:
        with self._lock:
            self._tools.set_all(tools)

    def add_download(self, download: Download) -> bool:
        """Add a download; False if its id is already stored."""
        with self._lock:
            if download is None or download.id in self._index:
                return False
            insort(self._list, download, key=_BY_ID)
            self._index[download.id] = download
            return True

    def add_downloads(self, downloads: Iterable[Download]) -> bool:
        """Add several downloads, or none if any id is already stored."""
        items = list(downloads)
        with self._lock:
            if any(d.id in self._index for d in items):
                return False
            for d in items:
                self.add_download(d)
            return True

    def remove_download(self, item: "Download | int") -> bool:
        """Remove the download with the given id, or with the id of the given download."""
        download_id = item.id if isinstance(item, Download) else int(item)
        with self._lock:
            if download_id not in self._index:
                return False
            self._list = [d for d in self._list if d.id != download_id]
            del self._index[download_id]
            return True

    def clear(self) -> None:
        with self._lock:
            self._list.clear()
            self._index.clear()

    def get_download(self, download_id: int) -> "Download | None":
        with self._lock:
            return self._index.get(download_id)

    def downloads(self) -> list[Download]:
        """The stored downloads in ascending id order, as a new list."""
        with self._lock:
            return list(self._list)

    def __len__(self) -> int:
        with self._lock:
            return len(self._list)