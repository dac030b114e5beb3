"""Download queue, SQLite storage, local JSON database server and client, encryption and yt-dlp argument building for a media downloader."""

__version__ = "1.0.0"