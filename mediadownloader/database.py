"""SQLite storage of the download queue."""

from __future__ import annotations

import os
import sqlite3
import threading
from pathlib import Path
from typing import Any

from mediadownloader.constants import (
    CREATE_TABLE,
    DATABASE_NAME,
    KEY_AUDIO_CODE,
    KEY_AUTO_GENERATED_SUBTITLES,
    KEY_DOWNLOAD_STATE,
    KEY_FILE_PATH,
    KEY_METADATA,
    KEY_PROGRESS,
    KEY_SAVE_NAME,
    KEY_SUBTITLES,
    KEY_SUFFIX,
    KEY_VIDEO_CODE,
    KEY_VIDEO_FORMAT,
    UPDATE_FIELDS,
    Specification,
)
from mediadownloader.crypto import default_data_dir
from mediadownloader.download import Download

_COLUMNS = (
    "id",
    "url",
    "audio_code",
    "video_code",
    "video_format",
    "title",
    "save_name",
    "file_path",
    "suffix",
    "progress",
    "download_state",
    "metadata",
    "subtitles",
    "auto_generated_subtitles",
)

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM downloads"

_INSERT = (
    f"INSERT INTO downloads ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)

# Columns that may be changed after a download has been added.
UPDATABLE_COLUMNS = frozenset(
    {
        KEY_AUDIO_CODE,
        KEY_VIDEO_CODE,
        KEY_VIDEO_FORMAT,
        KEY_SAVE_NAME,
        KEY_FILE_PATH,
        KEY_SUFFIX,
        KEY_PROGRESS,
        KEY_DOWNLOAD_STATE,
        KEY_METADATA,
        KEY_SUBTITLES,
        KEY_AUTO_GENERATED_SUBTITLES,
    }
)

_BOOLEAN_COLUMNS = frozenset(
    {KEY_DOWNLOAD_STATE, KEY_METADATA, KEY_SUBTITLES, KEY_AUTO_GENERATED_SUBTITLES}
)


def _row_to_download(row: tuple[Any, ...]) -> Download:
    values = dict(zip(_COLUMNS, row))
    return Download(
        id=int(values["id"] or 0),
        url=values["url"] or "",
        audio_code=int(values["audio_code"] or 0),
        video_code=int(values["video_code"] or 0),
        video_format=values["video_format"] or "",
        title=values["title"] or "",
        save_name=values["save_name"] or "",
        file_path=values["file_path"] or "",
        suffix=values["suffix"] or "",
        progress=int(values["progress"] or 0),
        download_state=bool(values["download_state"]),
        metadata=bool(values["metadata"]),
        subtitles=bool(values["subtitles"]),
        auto_generated_subtitles=bool(values["auto_generated_subtitles"]),
    )


class DataBase:
    """The downloads table in a SQLite file inside the data directory.

    If the file cannot be created or opened, the database stays closed:
    queries then find nothing and changes are rejected.
    """

    def __init__(self, directory: "str | os.PathLike[str] | None" = None) -> None:
        self.directory = Path(directory) if directory is not None else default_data_dir()
        self.path = self.directory / DATABASE_NAME
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        try:
            self._conn = self._open()
        except (OSError, sqlite3.Error):
            self._conn = None

    def _open(self) -> sqlite3.Connection:
        self.directory.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.touch()
            self.path.chmod(0o600)
        conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
        try:
            conn.execute(CREATE_TABLE)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "DataBase":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def is_open(self) -> bool:
        return self._conn is not None

    def _run(self, sql: str, params: tuple[Any, ...] = ()) -> "sqlite3.Cursor | None":
        """Execute a statement; None when the database is closed or rejects it."""
        with self._lock:
            if self._conn is None:
                return None
            try:
                return self._conn.execute(sql, params)
            except sqlite3.Error:
                return None

    def _changed(self, sql: str, params: tuple[Any, ...] = ()) -> bool:
        cursor = self._run(sql, params)
        return cursor is not None and cursor.rowcount > 0

    def is_empty(self) -> bool:
        cursor = self._run("SELECT 1 FROM downloads LIMIT 1")
        return cursor is None or cursor.fetchone() is None

    def exists(self, download_id: int) -> bool:
        cursor = self._run("SELECT COUNT(*) FROM downloads WHERE id = ?", (download_id,))
        if cursor is None:
            return False
        row = cursor.fetchone()
        return row is not None and row[0] > 0

    def add(self, download: Download) -> bool:
        """Insert a download with zero progress, not yet finished."""
        params = (
            download.id,
            download.url,
            download.audio_code,
            download.video_code,
            download.video_format,
            download.title,
            download.save_name,
            download.file_path,
            download.suffix,
            0,
            0,
            int(bool(download.metadata)),
            int(bool(download.subtitles)),
            int(bool(download.auto_generated_subtitles)),
        )
        return self._changed(_INSERT, params)

    def remove(self, download_id: int) -> bool:
        return self._changed("DELETE FROM downloads WHERE id = ?", (download_id,))

    def remove_all(self) -> bool:
        """Delete every row; False when there was nothing to delete."""
        return self._changed("DELETE FROM downloads")

    def update(self, download_id: int, column: "str | Specification", value: Any) -> bool:
        """Set one column of one row; ValueError for a column that cannot be updated."""
        name = UPDATE_FIELDS.get(column) if isinstance(column, Specification) else column
        if name not in UPDATABLE_COLUMNS:
            raise ValueError(f"column cannot be updated: {column!r}")
        if name in _BOOLEAN_COLUMNS:
            value = int(bool(value))
        return self._changed(
            f"UPDATE downloads SET {name} = ? WHERE id = ?", (value, download_id)
        )

    def read(self, download_id: int) -> "Download | None":
        cursor = self._run(f"{_SELECT} WHERE id = ?", (download_id,))
        if cursor is None:
            return None
        row = cursor.fetchone()
        return _row_to_download(row) if row is not None else None

    def read_all(self) -> list[Download]:
        cursor = self._run(_SELECT)
        if cursor is None:
            return []
        return [_row_to_download(row) for row in cursor.fetchall()]