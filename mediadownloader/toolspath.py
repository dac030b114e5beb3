"""Locations of the external tools used for downloading."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field


@dataclass
class ToolsPath:
    """Paths to yt-dlp, ffmpeg and node.js, safe to share between threads."""

    yt_dlp_path: str = ""
    ffmpeg_path: str = ""
    node_js_path: str = ""
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def snapshot(self) -> "ToolsPath":
        """Return an independent copy of the three paths, read consistently."""
        with self._lock:
            return dataclasses.replace(self)

    def set_all(self, other: "ToolsPath") -> None:
        """Replace all three paths with those of other."""
        source = other.snapshot()
        with self._lock:
            self.yt_dlp_path = source.yt_dlp_path
            self.ffmpeg_path = source.ffmpeg_path
            self.node_js_path = source.node_js_path