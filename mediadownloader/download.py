"""A single download entry and its JSON representation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from mediadownloader.constants import (
    KEY_AUDIO_CODE,
    KEY_AUTO_GENERATED_SUBTITLES,
    KEY_DOWNLOAD_STATE,
    KEY_FILE_PATH,
    KEY_METADATA,
    KEY_PARAMETERS,
    KEY_PROGRESS,
    KEY_SAVE_NAME,
    KEY_SUBTITLES,
    KEY_SUFFIX,
    KEY_TITLE,
    KEY_URL,
    KEY_USER_ID,
    KEY_VIDEO_CODE,
    KEY_VIDEO_FORMAT,
)


def _as_int(value: Any) -> int:
    """Integer held by a JSON value; 0 for anything that is not an integral number."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


@dataclass(eq=False)
class Download:
    """One queued download. Two downloads are equal when their ids are."""

    id: int = -1
    url: str = ""
    audio_code: int = 0
    video_code: int = 0
    video_format: str = ""
    title: str = ""
    save_name: str = ""
    file_path: str = ""
    suffix: str = ""
    progress: int = 0
    download_state: bool = False
    metadata: bool = False
    subtitles: bool = False
    auto_generated_subtitles: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Download):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_json(self) -> dict[str, Any]:
        """Return the JSON object describing this download."""
        return {
            KEY_USER_ID: self.id,
            KEY_URL: self.url,
            KEY_AUDIO_CODE: self.audio_code,
            KEY_VIDEO_CODE: self.video_code,
            KEY_VIDEO_FORMAT: self.video_format,
            KEY_TITLE: self.title,
            KEY_SAVE_NAME: self.save_name,
            KEY_FILE_PATH: self.file_path,
            KEY_SUFFIX: self.suffix,
            KEY_PROGRESS: self.progress,
            KEY_DOWNLOAD_STATE: self.download_state,
            KEY_METADATA: self.metadata,
            KEY_SUBTITLES: self.subtitles,
            KEY_AUTO_GENERATED_SUBTITLES: self.auto_generated_subtitles,
        }

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> "Download":
        """Build a download from a JSON object; missing or mistyped fields get zero values."""
        return cls(
            id=_as_int(obj.get(KEY_USER_ID)),
            url=_as_str(obj.get(KEY_URL)),
            audio_code=_as_int(obj.get(KEY_AUDIO_CODE)),
            video_code=_as_int(obj.get(KEY_VIDEO_CODE)),
            video_format=_as_str(obj.get(KEY_VIDEO_FORMAT)),
            title=_as_str(obj.get(KEY_TITLE)),
            save_name=_as_str(obj.get(KEY_SAVE_NAME)),
            file_path=_as_str(obj.get(KEY_FILE_PATH)),
            suffix=_as_str(obj.get(KEY_SUFFIX)),
            progress=_as_int(obj.get(KEY_PROGRESS)),
            download_state=_as_bool(obj.get(KEY_DOWNLOAD_STATE)),
            metadata=_as_bool(obj.get(KEY_METADATA)),
            subtitles=_as_bool(obj.get(KEY_SUBTITLES)),
            auto_generated_subtitles=_as_bool(obj.get(KEY_AUTO_GENERATED_SUBTITLES)),
        )


def to_json_list(downloads: Iterable[Download]) -> dict[str, Any]:
    """Wrap the JSON form of several downloads under the parameters key."""
    return {KEY_PARAMETERS: [download.to_json() for download in downloads]}


def from_json_list(obj: dict[str, Any]) -> list[Download]:
    """Read the downloads stored under the parameters key."""
    items = obj.get(KEY_PARAMETERS)
    if not isinstance(items, list):
        return []
    return [Download.from_json(item if isinstance(item, dict) else {}) for item in items]