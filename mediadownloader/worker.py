"""Command line, progress parsing and error classification for one download."""

from __future__ import annotations

import math
import os
import random
from dataclasses import dataclass

from mediadownloader.constants import (
    CONCURRENT_FRAGMENTS,
    FRAGMENT_RETRIES,
    MAX_RATE,
    MAX_WAIT_TIME_MS,
    MIN_RATE,
    MIN_WAIT_TIME_MS,
    OPT_AUDIO_FORMAT,
    OPT_AUDIO_QUALITY,
    OPT_BEST_AUDIO,
    OPT_BEST_AUDIO_AND_BEST_VIDEO,
    OPT_CONCURRENT_FRAGMENTS,
    OPT_EMBED_METADATA,
    OPT_EXTRACT_AUDIO,
    OPT_FFMPEG_LOCATION,
    OPT_FORMAT,
    OPT_FRAGMENT_RETRIES,
    OPT_LIMIT_RATE,
    OPT_MERGE_OUTPUT_FORMAT,
    OPT_NO_PLAYLIST,
    OPT_OUTPUT,
    OPT_RETRIES,
    OPT_USER_AGENT,
    PATTERN_EXTRACT_PROGRESS,
    RETRIES,
    SUPPORTED_AUDIO_FORMATS,
    SUPPORTED_VIDEO_FORMATS,
    TOO_MANY_REQUESTS_MARKERS,
    USER_AGENTS,
)
from mediadownloader.download import Download
from mediadownloader.toolspath import ToolsPath


@dataclass(frozen=True)
class LaunchParameters:
    """Randomised settings that make consecutive downloads look less uniform."""

    delay_ms: int
    rate_kib: int
    user_agent: str


def random_launch_parameters(rng: "random.Random | None" = None) -> LaunchParameters:
    """Pick a start delay, a rate limit and a user agent at random."""
    rng = rng if rng is not None else random.Random()
    return LaunchParameters(
        delay_ms=rng.randint(MIN_WAIT_TIME_MS, MAX_WAIT_TIME_MS),
        rate_kib=rng.randrange(MIN_RATE, MAX_RATE),
        user_agent=rng.choice(USER_AGENTS),
    )


def _format_selection(download: Download) -> list[str]:
    audio = download.audio_code
    video = download.video_code
    suffix = download.suffix

    if audio != 0 and video != 0:
        return [OPT_FORMAT, f"{video}+{audio}", OPT_MERGE_OUTPUT_FORMAT, suffix]

    if video == 0 and audio != 0:
        video_format = download.video_format
        if not video_format.strip():
            return [
                OPT_EXTRACT_AUDIO,
                OPT_AUDIO_FORMAT,
                suffix,
                OPT_FORMAT,
                str(audio),
                OPT_AUDIO_QUALITY,
                "0",
            ]
        return [OPT_FORMAT, f"{video_format}+{audio}", OPT_MERGE_OUTPUT_FORMAT, suffix]

    if suffix in SUPPORTED_AUDIO_FORMATS:
        return [OPT_FORMAT, OPT_BEST_AUDIO, OPT_AUDIO_FORMAT, suffix, OPT_AUDIO_QUALITY, "0"]
    if suffix in SUPPORTED_VIDEO_FORMATS:
        return [OPT_FORMAT, OPT_BEST_AUDIO_AND_BEST_VIDEO, OPT_MERGE_OUTPUT_FORMAT, suffix]
    return []


def build_arguments(
    download: Download, tools: ToolsPath, rate_kib: int, user_agent: str
) -> list[str]:
    """Return the yt-dlp arguments that fetch the given download."""
    output = download.file_path + os.sep + download.save_name + "." + download.suffix
    arguments = [
        OPT_FFMPEG_LOCATION, tools.ffmpeg_path,
        OPT_NO_PLAYLIST,
        OPT_LIMIT_RATE, f"{rate_kib}K",
        OPT_USER_AGENT, user_agent,
        OPT_OUTPUT, output,
        OPT_RETRIES, str(RETRIES),
        OPT_FRAGMENT_RETRIES, str(FRAGMENT_RETRIES),
        OPT_CONCURRENT_FRAGMENTS, str(CONCURRENT_FRAGMENTS),
    ]
    if download.metadata:
        arguments.append(OPT_EMBED_METADATA)
    arguments.extend(_format_selection(download))
    arguments.append(download.url)
    return arguments


def parse_progress(text: "str | bytes") -> "int | None":
    """Progress in tenths of a percent from a line of yt-dlp output, or None."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    match = PATTERN_EXTRACT_PROGRESS.search(text)
    if match is None:
        return None
    return int(math.floor(float(match.group(1)) * 10 + 0.5))


def is_too_many_requests(error_output: "str | bytes") -> bool:
    """True when error output shows the server is throttling or refusing requests."""
    if isinstance(error_output, str):
        error_output = error_output.encode("utf-8")
    return any(marker in error_output for marker in TOO_MANY_REQUESTS_MARKERS)