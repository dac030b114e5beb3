"""Runs queued downloads with a limit on how many go at once."""

from __future__ import annotations

import threading
from typing import Callable

from mediadownloader.constants import MAX_CONCURRENT_PROCESS, SUPPORTED_AUDIO_FORMATS
from mediadownloader.download import Download
from mediadownloader.storage import SharedStorage


class DownloadManager:
    """Starts unfinished downloads from the shared storage, a few at a time.

    ``launcher`` is called with each download to start; its completion is
    reported back through :meth:`finished`. ``canceller`` is called with the
    id of every running download when all are stopped. ``on_finished`` is
    told the id and whether the download counts as successful, and
    ``on_all_finished`` is called when nothing is left running.
    """

    def __init__(
        self,
        launcher: Callable[[Download], object],
        storage: "SharedStorage | None" = None,
        max_concurrent: int = MAX_CONCURRENT_PROCESS,
        canceller: "Callable[[int], object] | None" = None,
        on_finished: "Callable[[int, bool], object] | None" = None,
        on_all_finished: "Callable[[], object] | None" = None,
    ) -> None:
        self.storage = storage if storage is not None else SharedStorage.instance()
        self.max_concurrent = max_concurrent
        self._launcher = launcher
        self._canceller = canceller
        self._on_finished = on_finished
        self._on_all_finished = on_all_finished
        self._lock = threading.RLock()
        self._running: set[int] = set()
        self._stopping = False

    @property
    def running_ids(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._running)

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._running)

    def start(self) -> None:
        """Start as many pending downloads as the limit allows."""
        with self._lock:
            self._stopping = False
        self._try_start_next()

    def stop_all(self) -> None:
        """Cancel every running download; later completions are ignored."""
        with self._lock:
            self._stopping = True
            running, self._running = self._running, set()
        if self._canceller is not None:
            for download_id in sorted(running):
                self._canceller(download_id)

    def finished(self, download_id: int, success: bool) -> None:
        """Record that a started download ended, successfully or not."""
        with self._lock:
            if download_id not in self._running:
                return
            self._running.discard(download_id)

        if not success:
            # Audio conversions may exit with an error after the file is written.
            download = self.storage.get_download(download_id)
            success = download is not None and download.suffix in SUPPORTED_AUDIO_FORMATS
        if self._on_finished is not None:
            self._on_finished(download_id, success)

        self._check_all_finished()
        self._try_start_next()

    def _try_start_next(self) -> None:
        with self._lock:
            if self._stopping:
                return
            to_start: list[Download] = []
            for download in self.storage.downloads():
                if len(self._running) >= self.max_concurrent:
                    break
                if download.download_state or download.id in self._running:
                    continue
                self._running.add(download.id)
                to_start.append(download)
        for download in to_start:
            self._launcher(download)

    def _check_all_finished(self) -> None:
        with self._lock:
            if self._running or len(self.storage) == 0:
                return
        if self._on_all_finished is not None:
            self._on_all_finished()