"""Validating request handlers on top of the downloads table."""

from __future__ import annotations

import os
from typing import Any, Callable

from mediadownloader.constants import (
    AUDIO_ITAGS,
    KEY_AUDIO_CODE,
    KEY_FILE_PATH,
    KEY_MESSAGE,
    KEY_PARAMETERS,
    KEY_SAVE_NAME,
    KEY_STATUS,
    KEY_SUFFIX,
    KEY_TITLE,
    KEY_USER_ID,
    KEY_VIDEO_CODE,
    KEY_VIDEO_FORMAT,
    MSG_DATABASE_EMPTY,
    MSG_ERROR_FILE_PATH,
    MSG_ERROR_ID,
    MSG_ERROR_PROGRESS,
    MSG_ERROR_SAVE_NAME,
    MSG_ERROR_SUFFIX,
    MSG_ERROR_TITLE,
    MSG_ERROR_VIDEO_FORMAT,
    MSG_ID_EXISTS,
    MSG_ID_NOT_EXISTS,
    MSG_INVALID_AUDIO_ITAG,
    MSG_INVALID_VIDEO_FORMAT,
    MSG_INVALID_VIDEO_ITAG,
    INVALID_CHARACTERS,
    PATTERN_CUT_URL_YOUTUBE,
    PATTERN_VIDEO_FORMAT,
    RESERVED_STRINGS,
    STATUS_OK,
    STATUS_REFUSED,
    SUPPORTED_AUDIO_FORMATS,
    SUPPORTED_VIDEO_FORMATS,
    UPDATE_FAILED_MESSAGES,
    UPDATE_FIELDS,
    VIDEO_ITAGS,
    YOUTUBE_CUT_SEPARATOR,
    Specification,
)
from mediadownloader.database import DataBase
from mediadownloader.download import Download, to_json_list

PROGRESS_RANGE = (0, 1000)


class Validator:
    """Checks applied to the fields of a download before they are stored."""

    def valid_id(self, download_id: int) -> bool:
        return download_id >= 0

    def valid_audio_code(self, code: int) -> bool:
        return code in AUDIO_ITAGS

    def valid_video_code(self, code: int) -> bool:
        return code in VIDEO_ITAGS

    def valid_video_format(self, video_format: str) -> bool:
        return video_format == "" or PATTERN_VIDEO_FORMAT.match(video_format) is not None

    def valid_title(self, title: str) -> bool:
        return bool(title.strip())

    def valid_save_name(self, save_name: str) -> bool:
        name = save_name.strip()
        if not name or INVALID_CHARACTERS.search(name):
            return False
        return name.upper() not in RESERVED_STRINGS

    def valid_path(self, path: str) -> bool:
        return bool(path) and os.path.isdir(path) and os.access(path, os.R_OK | os.W_OK)

    def valid_suffix(self, suffix: str) -> bool:
        return suffix in SUPPORTED_AUDIO_FORMATS or suffix in SUPPORTED_VIDEO_FORMATS

    def valid_progress(self, progress: int) -> bool:
        low, high = PROGRESS_RANGE
        return low <= progress <= high

    def cut_url(self, url: str) -> str:
        """Drop the extra query parameters of a YouTube watch URL."""
        if PATTERN_CUT_URL_YOUTUBE.search(url):
            return url.split(YOUTUBE_CUT_SEPARATOR, 1)[0]
        return url


def _refused(message: Any) -> dict[str, Any]:
    return {KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: message}


class DbManager:
    """Turns request parameters into database changes and JSON responses."""

    def __init__(
        self, database: "DataBase | None" = None, validator: "Validator | None" = None
    ) -> None:
        self.database = database if database is not None else DataBase()
        self.validator = validator if validator is not None else Validator()
        v = self.validator
        self._checks: dict[Specification, tuple[Callable[[Any], bool], str]] = {
            Specification.AUDIO_CODE: (v.valid_audio_code, MSG_INVALID_AUDIO_ITAG),
            Specification.VIDEO_CODE: (v.valid_video_code, MSG_INVALID_VIDEO_ITAG),
            Specification.VIDEO_FORMAT: (v.valid_video_format, MSG_ERROR_VIDEO_FORMAT),
            Specification.SAVE_NAME: (v.valid_save_name, MSG_ERROR_SAVE_NAME),
            Specification.FILE_PATH: (v.valid_path, MSG_ERROR_FILE_PATH),
            Specification.SUFFIX: (v.valid_suffix, MSG_ERROR_SUFFIX),
            Specification.PROGRESS: (v.valid_progress, MSG_ERROR_PROGRESS),
        }

    def is_open_db(self) -> dict[str, Any]:
        return {KEY_STATUS: STATUS_OK if self.database.is_open() else STATUS_REFUSED}

    def add_download(self, params: dict[str, Any]) -> dict[str, Any]:
        """Validate and insert a download; errors are reported per field."""
        download = Download.from_json(params)
        errors: dict[str, str] = {}

        if self.database.exists(download.id):
            errors[KEY_USER_ID] = MSG_ID_EXISTS
            return {KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: errors}

        v = self.validator
        accepted = True

        if not v.valid_id(download.id):
            accepted = False
            errors[KEY_USER_ID] = MSG_ERROR_ID

        if download.audio_code != 0 and not v.valid_audio_code(download.audio_code):
            accepted = False
            errors[KEY_AUDIO_CODE] = MSG_INVALID_AUDIO_ITAG

        if (
            download.video_code != 0
            and download.video_format
            and PATTERN_VIDEO_FORMAT.match(download.video_format)
            and not v.valid_video_code(download.video_code)
        ):
            accepted = False
            errors[KEY_VIDEO_CODE] = MSG_INVALID_VIDEO_ITAG

        # An odd video format is reported but does not block the insertion.
        if not v.valid_video_format(download.video_format):
            errors[KEY_VIDEO_FORMAT] = MSG_INVALID_VIDEO_FORMAT

        for key, valid, message in (
            (KEY_TITLE, v.valid_title(download.title), MSG_ERROR_TITLE),
            (KEY_SAVE_NAME, v.valid_save_name(download.save_name), MSG_ERROR_SAVE_NAME),
            (KEY_FILE_PATH, v.valid_path(download.file_path), MSG_ERROR_FILE_PATH),
            (KEY_SUFFIX, v.valid_suffix(download.suffix), MSG_ERROR_SUFFIX),
        ):
            if not valid:
                accepted = False
                errors[key] = message

        status = STATUS_REFUSED
        if accepted:
            download.url = v.cut_url(download.url)
            download.progress = 0
            download.download_state = False
            if self.database.add(download):
                status = STATUS_OK

        return {KEY_STATUS: status, KEY_MESSAGE: errors}

    def remove_download(self, params: dict[str, Any]) -> dict[str, Any]:
        download_id = Download.from_json(params).id
        if not self.database.exists(download_id):
            return _refused(MSG_ID_NOT_EXISTS)
        if self.database.remove(download_id):
            return {KEY_STATUS: STATUS_OK}
        return _refused(MSG_DATABASE_EMPTY)

    def remove_all_downloads(self) -> dict[str, Any]:
        if self.database.remove_all():
            return {KEY_STATUS: STATUS_OK}
        return _refused(MSG_DATABASE_EMPTY)

    def update(self, spec: Specification, params: dict[str, Any]) -> dict[str, Any]:
        """Change one field of a stored download.

        Specifications that cannot be updated yield an empty response.
        """
        spec = Specification(spec)
        if spec not in UPDATE_FAILED_MESSAGES:
            return {}

        values = Download.from_json(params)
        if not self.database.exists(values.id):
            return _refused(MSG_ID_NOT_EXISTS)

        field = UPDATE_FIELDS[spec]
        value = getattr(values, field)

        check = self._checks.get(spec)
        if check is not None:
            valid, message = check
            if not valid(value):
                return _refused(message)

        if not self.database.update(values.id, field, value):
            return _refused(UPDATE_FAILED_MESSAGES[spec])
        return {KEY_STATUS: STATUS_OK}

    def read_download(self, params: dict[str, Any]) -> dict[str, Any]:
        download_id = Download.from_json(params).id
        if not self.database.exists(download_id):
            return _refused(MSG_ID_NOT_EXISTS)
        download = self.database.read(download_id) or Download()
        return {KEY_STATUS: STATUS_OK, KEY_PARAMETERS: download.to_json()}

    def read_all_downloads(self) -> dict[str, Any]:
        if self.database.is_empty():
            return _refused(MSG_DATABASE_EMPTY)
        return {
            KEY_STATUS: STATUS_OK,
            KEY_PARAMETERS: to_json_list(self.database.read_all()),
        }