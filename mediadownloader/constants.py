"""Shared constants: patterns, media formats, protocol keys and messages."""

from __future__ import annotations

import re
import sys
from enum import Enum
from pathlib import Path

CURRENT_VERSION = "v1.0.0"

# --- Basic tools -----------------------------------------------------------

YOUTUBE_CUT_SEPARATOR = "&"

WAIT_TIME_FOR_GETTING_TITLE_MS = 30000
WAIT_INTERVAL_CHECK_EXECUTABLE_MS = 3000

PATTERN_VALID_URL = re.compile(
    r"^(https?|ftp)://[^\s/$.?#].[^\s]*$", re.IGNORECASE | re.ASCII
)
PATTERN_CUT_URL_YOUTUBE = re.compile(
    r"https?://(www\.)?(youtube\.com/watch\?v=|youtu\.be/)", re.IGNORECASE
)
PATTERN_VIDEO_FORMAT = re.compile(r"^\d+-sr$", re.IGNORECASE | re.ASCII)
INVALID_CHARACTERS = re.compile(r'[\\/:*?"<>|]')

RESERVED_STRINGS = frozenset(
    {
        "CON", "PRN", "AUX", "NUL",
        "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
        "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
    }
)


def search_paths() -> list[str]:
    """Directories where the external tools are commonly installed."""
    if sys.platform == "darwin":
        return ["/opt/homebrew/bin", "/usr/local/bin", "/usr/bin", "/bin", "/opt/local/bin"]
    if sys.platform.startswith("linux"):
        return [
            "/usr/bin",
            "/usr/local/bin",
            "/snap/bin",
            "snap/local/bin",
            "/bin",
            "/home/linuxbrew/.linuxbrew",
        ]
    if sys.platform.startswith("win"):
        return [
            "C:/Program Files",
            "C:/Program Files (x86)",
            "C:/ProgramData",
            Path.home().as_posix() + "/scoop/apps",
        ]
    return []


CRYPTO_KEY_NAME = "crypto.key"

# --- Media filters ---------------------------------------------------------

FILTER_AUDIO = (
    "WAV (*.wav);;"
    "MP3 (*.mp3);;"
    "FLAC (*.flac);;"
    "M4A (*.m4a);;"
    "AAC (*.aac);;"
    "Opus (*.opus);;"
)

FILTER_VIDEO = "MKV (*.mkv);;MP4 (*.mp4);;Webm (*.webm);;"

_AUDIO_FILTERS = {
    "WAV (*.wav)": "wav",
    "MP3 (*.mp3)": "mp3",
    "FLAC (*.flac)": "flac",
    "M4A (*.m4a)": "m4a",
    "AAC (*.aac)": "aac",
    "Opus (*.opus)": "opus",
}

_VIDEO_FILTERS = {
    "MKV (*.mkv)": "mkv",
    "MP4 (*.mp4)": "mp4",
    "Webm (*.webm)": "webm",
}

SUPPORTED_AUDIO_FORMATS = frozenset({"wav", "mp3", "flac", "m4a", "aac", "opus"})
SUPPORTED_VIDEO_FORMATS = frozenset({"mkv", "mp4", "webm"})


def _extract_filter(text: str, table: dict[str, str], default: str) -> str:
    folded = text.casefold()
    return next(
        (suffix for label, suffix in table.items() if label.casefold() == folded),
        default,
    )


def extract_audio_filter(text: str) -> str:
    """Return the audio suffix selected by a file-dialog filter label; 'wav' by default."""
    return _extract_filter(text, _AUDIO_FILTERS, "wav")


def extract_video_filter(text: str) -> str:
    """Return the video suffix selected by a file-dialog filter label; 'mkv' by default."""
    return _extract_filter(text, _VIDEO_FILTERS, "mkv")


# --- Media itags -----------------------------------------------------------

AUDIO_ITAGS = frozenset({139, 140, 141, 249, 250, 251})
VIDEO_ITAGS = frozenset(
    {
        133, 134, 135, 136, 137, 160, 242, 243, 244, 245, 246, 247, 248, 264,
        266, 271, 272, 298, 299, 302, 303, 308, 313, 315, 330, 331, 332, 333,
        334, 335, 336, 337, 394, 395, 396, 397, 398, 399, 400, 401, 402,
    }
)

MSG_INVALID_AUDIO_ITAG = "Invalid Audio Itag"
MSG_INVALID_VIDEO_ITAG = "Invalid Video Itag"
MSG_INVALID_VIDEO_FORMAT = "Invalid Video Format"

# --- Settings --------------------------------------------------------------

DEFAULT_ORGANIZATION = "rafael"
DEFAULT_APPLICATION = "MediaDownloader"
DEFAULT_LOCAL_SERVER = "MediaDownloaderAppServer"
DEFAULT_TRANSLATION_PLIST = "Translation"
DEFAULT_LANGUAGE = "en_US.qm"
DEFAULT_TRANSLATION_DOC_SUFFIX = ".qm"
YT_DLP_KEY = "tools/yt_dlp_path"
FFMPEG_KEY = "tools/ffmpeg_path"
NODE_JS_KEY = "tools/node_js_path"
TRANSLATOR_KEY = "translator/default_language"

# --- yt-dlp command-line options -------------------------------------------

OPT_AUDIO_FORMAT = "--audio-format"
OPT_AUDIO_QUALITY = "--audio-quality"
OPT_BEST_AUDIO = "bestaudio"
OPT_BEST_AUDIO_AND_BEST_VIDEO = "bv+ba"
OPT_CONCURRENT_FRAGMENTS = "--concurrent-fragments"
OPT_EMBED_METADATA = "--embed-metadata"
OPT_FORMAT = "-f"
OPT_FFMPEG_LOCATION = "--ffmpeg-location"
OPT_FRAGMENT_RETRIES = "--fragment-retries"
OPT_GET_TITLE = "--get-title"
OPT_INFO = "-F"
OPT_LIMIT_RATE = "--limit-rate"
OPT_MERGE_OUTPUT_FORMAT = "--merge-output-format"
OPT_NO_PLAYLIST = "--no-playlist"
OPT_OUTPUT = "--output"
OPT_RETRIES = "--retries"
OPT_USER_AGENT = "--user-agent"
OPT_EXTRACT_AUDIO = "-x"

# --- Database --------------------------------------------------------------

DB_CLIENT_RECONNECT_INTERVAL_MS = 1000
DB_CLIENT_CALLBACK_TIMEOUT_MS = 5000

DATABASE_NAME = "MediaDownloader.sqlite"

CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS downloads (
        id                        INTEGER PRIMARY KEY,
        url                       TEXT NOT NULL,
        audio_code                INTEGER DEFAULT 0,
        video_code                INTEGER DEFAULT 0,
        video_format              TEXT,
        title                     TEXT NOT NULL,
        save_name                 TEXT NOT NULL,
        file_path                 TEXT NOT NULL,
        suffix                    TEXT NOT NULL,
        progress                  INTEGER DEFAULT 0,
        download_state            INTEGER DEFAULT 0,
        metadata                  INTEGER DEFAULT 0,
        subtitles                 INTEGER DEFAULT 0,
        auto_generated_subtitles  INTEGER DEFAULT 0
    )
"""

KEY_ID = "id"
KEY_USER_ID = "userId"
KEY_URL = "url"
KEY_AUDIO_CODE = "audio_code"
KEY_VIDEO_CODE = "video_code"
KEY_VIDEO_FORMAT = "video_format"
KEY_TITLE = "title"
KEY_SAVE_NAME = "save_name"
KEY_FILE_PATH = "file_path"
KEY_SUFFIX = "suffix"
KEY_PROGRESS = "progress"
KEY_DOWNLOAD_STATE = "download_state"
KEY_METADATA = "metadata"
KEY_SUBTITLES = "subtitles"
KEY_AUTO_GENERATED_SUBTITLES = "auto_generated_subtitles"

KEY_OPERATION = "operation"
KEY_SPECIFICATION = "specification"
KEY_PARAMETERS = "params"
KEY_STATUS = "status"
KEY_ERROR = "error"
KEY_MESSAGE = "message"

STATUS_OK = "ok"
STATUS_REFUSED = "no"

MSG_FAILED = "Failed"
MSG_ADD_DOWNLOAD_FAILED = "Failed to add download: Operation rejected by database"
MSG_UPDATE_AUDIO_CODE_FAILED = "Failed to update audio code: Operation rejected by database"
MSG_UPDATE_VIDEO_CODE_FAILED = "Failed to update video code: Operation rejected by database"
MSG_UPDATE_VIDEO_FORMAT_FAILED = "Failed to update video format: Operation rejected by database"
MSG_UPDATE_SAVE_NAME_FAILED = "Failed to update save name: Operation rejected by database"
MSG_UPDATE_FILE_PATH_FAILED = "Failed to update file path: Operation rejected by database"
MSG_UPDATE_SUFFIX_FAILED = "Failed to update suffix: Operation rejected by database"
MSG_UPDATE_PROGRESS_FAILED = "Failed to update progress: Operation rejected by database"
MSG_UPDATE_DOWNLOAD_STATE_FAILED = "Failed to update download state: Operation rejected by database"
MSG_UPDATE_METADATA_FAILED = "Failed to update metadata: Operation rejected by database"
MSG_UPDATE_SUBTITLES_FAILED = "Failed to update subtitles: Operation rejected by database"
MSG_UPDATE_AUTO_GENERATED_SUBTITLES_FAILED = (
    "Failed to update auto-generated subtitles: Operation rejected by database"
)

MSG_DATABASE_EMPTY = "Database is empty"
MSG_INVALID_OPERATION = "Invalid operation: unknown operation"
MSG_INVALID_SPECIFICATION = "Invalid specification: unknown specification"
MSG_INVALID_JSON = "Invalid Json"

MSG_ID_EXISTS = "Id already exists"
MSG_ID_NOT_EXISTS = "Id not found"
MSG_ERROR_ID = "Invalid UserId: negative value"
MSG_ERROR_TITLE = "Invalid Title: unsupported format"
MSG_ERROR_VIDEO_FORMAT = "Invalid Video Format: unsupported format"
MSG_ERROR_SAVE_NAME = "Invalid Save Name: contains invalid characters"
MSG_ERROR_FILE_PATH = (
    "Invalid file path: path does not exist or lacks read/write permissions."
)
MSG_ERROR_SUFFIX = "Invalid Suffix: unsupported format"
MSG_ERROR_PROGRESS = "Invalid Progress: value is out of range"


class Operation(str, Enum):
    """Operations understood by the database server."""

    VERIFY_STATE = "VerifyState"
    ADD_INFORMATION = "AddInformation"
    GET_INFORMATION = "GetInformation"
    GET_ALL_INFORMATION = "GetAllInformation"
    UPDATE_INFORMATION = "UpdateInformation"
    DELETE_INFORMATION = "DeleteInformation"
    DELETE_ALL_INFORMATION = "DeleteAllInformation"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, text: str) -> "Operation":
        """Return the operation named by text, or UNKNOWN."""
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN


class Specification(str, Enum):
    """Fields an update operation may target."""

    AUDIO_CODE = "AudioCode"
    VIDEO_CODE = "VideoCode"
    VIDEO_FORMAT = "VideoFormat"
    TITLE = "Title"
    SAVE_NAME = "SaveName"
    FILE_PATH = "FilePath"
    SUFFIX = "Suffix"
    PROGRESS = "Progress"
    DOWNLOAD_STATE = "DownloadState"
    METADATA = "Metadata"
    SUBTITLES = "Subtitles"
    AUTO_GENERATED_SUBTITLES = "AutoGeneratedSubtitles"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, text: str) -> "Specification":
        """Return the specification named by text, or UNKNOWN."""
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN


# JSON key (and table column) that each update specification writes.
UPDATE_FIELDS = {
    Specification.AUDIO_CODE: KEY_AUDIO_CODE,
    Specification.VIDEO_CODE: KEY_VIDEO_CODE,
    Specification.VIDEO_FORMAT: KEY_VIDEO_FORMAT,
    Specification.TITLE: KEY_TITLE,
    Specification.SAVE_NAME: KEY_SAVE_NAME,
    Specification.FILE_PATH: KEY_FILE_PATH,
    Specification.SUFFIX: KEY_SUFFIX,
    Specification.PROGRESS: KEY_PROGRESS,
    Specification.DOWNLOAD_STATE: KEY_DOWNLOAD_STATE,
    Specification.METADATA: KEY_METADATA,
    Specification.SUBTITLES: KEY_SUBTITLES,
    Specification.AUTO_GENERATED_SUBTITLES: KEY_AUTO_GENERATED_SUBTITLES,
}

UPDATE_FAILED_MESSAGES = {
    Specification.AUDIO_CODE: MSG_UPDATE_AUDIO_CODE_FAILED,
    Specification.VIDEO_CODE: MSG_UPDATE_VIDEO_CODE_FAILED,
    Specification.VIDEO_FORMAT: MSG_UPDATE_VIDEO_FORMAT_FAILED,
    Specification.SAVE_NAME: MSG_UPDATE_SAVE_NAME_FAILED,
    Specification.FILE_PATH: MSG_UPDATE_FILE_PATH_FAILED,
    Specification.SUFFIX: MSG_UPDATE_SUFFIX_FAILED,
    Specification.PROGRESS: MSG_UPDATE_PROGRESS_FAILED,
    Specification.DOWNLOAD_STATE: MSG_UPDATE_DOWNLOAD_STATE_FAILED,
    Specification.METADATA: MSG_UPDATE_METADATA_FAILED,
    Specification.SUBTITLES: MSG_UPDATE_SUBTITLES_FAILED,
    Specification.AUTO_GENERATED_SUBTITLES: MSG_UPDATE_AUTO_GENERATED_SUBTITLES_FAILED,
}

# --- Download worker -------------------------------------------------------

MIN_WAIT_TIME_MS = 3000
MAX_WAIT_TIME_MS = 7000
MIN_RATE = 225
MAX_RATE = 650
MAX_CONCURRENT_PROCESS = 3
RETRIES = 5
FRAGMENT_RETRIES = 15
CONCURRENT_FRAGMENTS = 2

PATTERN_EXTRACT_PROGRESS = re.compile(
    r"\[download\]\s+(\d+(\.\d+)?)%", re.IGNORECASE | re.ASCII
)

PATH_VARIABLE = "PATH"

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Edg/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:122.0) Gecko/20100101 Firefox/122.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Linux; Android 12; Pixel 6) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Mobile Safari/537.36",
)

TOO_MANY_REQUESTS_MARKERS = (
    b"429",
    b"Too Many Requests",
    b"403",
    b"Forbidden",
    b"Rate limit",
    b"Limit exceeded",
)