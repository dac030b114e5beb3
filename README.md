# mediadownloader

The core of a media downloader built around yt-dlp, as a library. It keeps a
queue of downloads in memory and in SQLite, validates download requests, and
answers them over a small newline-delimited JSON protocol on localhost. It can
also encrypt exported data and build the yt-dlp argument list for each
download.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `mediadownloader.constants` holds the supported audio suffixes
  (`SUPPORTED_AUDIO_FORMATS`) and video suffixes (`SUPPORTED_VIDEO_FORMATS`).
  It also holds the accepted itags (`AUDIO_ITAGS`, `VIDEO_ITAGS`), the yt-dlp
  option names, the JSON keys and the response messages. It defines the
  `Operation` and `Specification` enums, whose `parse` class methods return
  `UNKNOWN` for unrecognised names. `extract_audio_filter` and
  `extract_video_filter` map a file-dialog filter label such as
  `"MP3 (*.mp3)"` to its suffix. They fall back to `"wav"` and `"mkv"`.
- `mediadownloader.download` provides `Download`, a dataclass for one queued
  download. Two downloads compare equal when their ids match. `to_json` and
  `Download.from_json` convert one download; missing or mistyped fields become
  zero values. `to_json_list` and `from_json_list` convert a list stored under
  the `"params"` key.
- `mediadownloader.toolspath` provides `ToolsPath`, a thread-safe holder for the
  paths to yt-dlp, ffmpeg and node. It has `snapshot` and `set_all`.
- `mediadownloader.idindex` provides `IdIndexMap`, which maps each id to its
  position in ascending id order and back. `index_of` and `id_at` return `-1`
  for anything absent.
- `mediadownloader.storage` provides `SharedStorage`, a thread-safe store of the
  tool paths and the downloads, kept sorted by id. `SharedStorage.instance()`
  returns the process-wide store. `add_downloads` adds all of the given
  downloads, or none if any of their ids is already present.
- `mediadownloader.crypto` provides `CryptoManager`, which does AES-256-GCM
  encryption with a key and nonce kept in a `crypto.key` file. `init()` loads
  the file, or creates the key if it is missing. `encrypt` and `decrypt` raise
  `CryptoError` when the manager is not initialised or authentication fails.
  `default_data_dir()` gives the per-user data directory that `CryptoManager`
  and `DataBase` use by default.
- `mediadownloader.database` provides `DataBase`, the `downloads` table in a
  `MediaDownloader.sqlite` file. It can be used as a context manager. It offers
  `exists`, `add`, `remove`, `remove_all`, `read` and `read_all`. `update`
  changes one column and raises `ValueError` for a column that cannot be
  updated. If the file cannot be opened, the database stays closed: queries
  find nothing and changes are rejected.
- `mediadownloader.manager` provides `DbManager`, which turns request
  parameters into database changes. It returns dictionaries with a `"status"`
  of `"ok"` or `"no"` and a `"message"`. The field checks live in `Validator`.
- `mediadownloader.server` provides `DbServer`, an asyncio TCP server for these
  requests on `127.0.0.1`. `handle_line` processes one request line without
  any network involved.
- `mediadownloader.client` provides `DbClient`, the matching asyncio client. It
  matches replies to requests by id and raises `TimeoutError` when no reply
  arrives. It raises `ConnectionError` when the connection is lost or cannot
  be made.
- `mediadownloader.worker` provides `build_arguments`, which returns the yt-dlp
  arguments for a download. `random_launch_parameters` picks a start delay, a
  rate limit and a user agent. `parse_progress` reads progress, in tenths of a
  percent, from yt-dlp output. `is_too_many_requests` recognises throttling and
  refusal errors.
- `mediadownloader.scheduler` provides `DownloadManager`, which hands
  unfinished downloads from the storage to a launcher callable, never more than
  `max_concurrent` at once. You report each end with `finished(download_id,
  success)`. A failed download whose suffix is an audio format is counted as a
  success.

## Example

```python
import asyncio
import tempfile

from mediadownloader.client import DbClient
from mediadownloader.database import DataBase
from mediadownloader.download import Download
from mediadownloader.manager import DbManager
from mediadownloader.server import DbServer


async def main():
    with tempfile.TemporaryDirectory() as data_dir, DataBase(data_dir) as db:
        async with DbServer(DbManager(db)) as server:
            async with DbClient(server.port) as client:
                download = Download(
                    id=1,
                    url="https://www.youtube.com/watch?v=abc&list=xyz",
                    title="Example",
                    save_name="example",
                    file_path=data_dir,
                    suffix="mp3",
                )
                print(await client.add_download(download))
                print(await client.read_download(1))


asyncio.run(main())
```

## What this package does not do

It has no graphical interface and no command-line program. It does not
install any command.

It never starts yt-dlp or any other process. `build_arguments` only produces
the argument list. `DownloadManager` calls the launcher you give it, and
you must report each completion back through `finished`.

It does not look up video titles or available formats. It does not check for
application updates and keeps no user settings or translations.