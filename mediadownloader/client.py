"""Asynchronous client for the download database server."""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
from typing import Any

from mediadownloader.constants import (
    DB_CLIENT_CALLBACK_TIMEOUT_MS,
    DB_CLIENT_RECONNECT_INTERVAL_MS,
    KEY_ID,
    KEY_OPERATION,
    KEY_PARAMETERS,
    KEY_SPECIFICATION,
    KEY_USER_ID,
    UPDATE_FIELDS,
    Operation,
    Specification,
)
from mediadownloader.download import Download
from mediadownloader.server import STREAM_LIMIT, encode_message, message_id


class DbClient:
    """Sends requests to a DbServer and matches the replies to them by id.

    A request made while disconnected first connects, retrying at the
    reconnect interval. A reply that does not arrive within the timeout
    raises TimeoutError; a dropped connection raises ConnectionError.
    """

    def __init__(
        self,
        port: int,
        host: str = "127.0.0.1",
        timeout: float = DB_CLIENT_CALLBACK_TIMEOUT_MS / 1000,
        reconnect_interval: float = DB_CLIENT_RECONNECT_INTERVAL_MS / 1000,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.reconnect_interval = reconnect_interval
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._waiting: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._ids = itertools.count()
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def _open_with_retry(self) -> None:
        while True:
            try:
                self._reader, self._writer = await asyncio.open_connection(
                    self.host, self.port, limit=STREAM_LIMIT
                )
                return
            except OSError:
                await asyncio.sleep(self.reconnect_interval)

    async def connect(self) -> None:
        """Connect to the server, retrying until the timeout runs out."""
        async with self._connect_lock:
            if self.connected:
                return
            try:
                await asyncio.wait_for(self._open_with_retry(), self.timeout)
            except asyncio.TimeoutError as exc:
                raise ConnectionError(
                    f"cannot connect to {self.host}:{self.port}"
                ) from exc
            self._reader_task = asyncio.create_task(
                self._read_loop(self._reader, self._writer)
            )

    async def _read_loop(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            while True:
                line = await reader.readline()
                if not line.endswith(b"\n"):
                    break
                self._dispatch(line)
        except (ConnectionError, ValueError):
            pass
        finally:
            self._drop_connection(writer)

    def _dispatch(self, line: bytes) -> None:
        try:
            obj = json.loads(line)
        except ValueError:
            return
        if not isinstance(obj, dict):
            return
        future = self._waiting.pop(message_id(obj.get(KEY_ID)), None)
        if future is not None and not future.done():
            future.set_result(obj)

    def _fail_waiting(self) -> None:
        waiting, self._waiting = self._waiting, {}
        for future in waiting.values():
            if not future.done():
                future.set_exception(ConnectionError("connection to the server was lost"))

    def _drop_connection(self, writer: asyncio.StreamWriter) -> None:
        if self._writer is writer:
            self._writer = None
            self._reader = None
        writer.close()
        self._fail_waiting()

    async def close(self) -> None:
        """Close the connection; requests still waiting fail with ConnectionError."""
        task, self._reader_task = self._reader_task, None
        writer = self._writer
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if writer is not None:
            self._drop_connection(writer)
            with contextlib.suppress(OSError):
                await writer.wait_closed()
        self._fail_waiting()

    async def __aenter__(self) -> "DbClient":
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def request(
        self,
        operation: "Operation | str",
        spec: "Specification | str" = Specification.UNKNOWN,
        params: "dict[str, Any] | None" = None,
    ) -> dict[str, Any]:
        """Send one request and return the server's reply to it."""
        operation = Operation(operation)
        spec = Specification(spec)
        if not self.connected:
            await self.connect()
        writer = self._writer
        if writer is None:
            raise ConnectionError("not connected to the server")

        request_id = next(self._ids)
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._waiting[request_id] = future
        message = {
            KEY_ID: request_id,
            KEY_OPERATION: operation.value,
            KEY_SPECIFICATION: spec.value,
            KEY_PARAMETERS: params or {},
        }
        try:
            writer.write(encode_message(message))
            await writer.drain()
            return await asyncio.wait_for(future, self.timeout)
        except asyncio.TimeoutError as exc:
            raise TimeoutError(f"no reply to request {request_id}") from exc
        finally:
            self._waiting.pop(request_id, None)

    async def verify_state(self) -> dict[str, Any]:
        return await self.request(Operation.VERIFY_STATE)

    async def add_download(self, download: Download) -> dict[str, Any]:
        return await self.request(Operation.ADD_INFORMATION, params=download.to_json())

    async def remove_download(self, user_id: int) -> dict[str, Any]:
        return await self.request(Operation.DELETE_INFORMATION, params={KEY_USER_ID: user_id})

    async def remove_all_downloads(self) -> dict[str, Any]:
        return await self.request(Operation.DELETE_ALL_INFORMATION)

    async def update(
        self, spec: "Specification | str", user_id: int, value: Any
    ) -> dict[str, Any]:
        """Ask the server to change one field; ValueError for a spec with no field."""
        spec = Specification(spec)
        field = UPDATE_FIELDS.get(spec)
        if field is None:
            raise ValueError(f"no field to update for {spec.value!r}")
        return await self.request(
            Operation.UPDATE_INFORMATION, spec, {KEY_USER_ID: user_id, field: value}
        )

    async def read_download(self, user_id: int) -> dict[str, Any]:
        return await self.request(Operation.GET_INFORMATION, params={KEY_USER_ID: user_id})

    async def read_all_downloads(self) -> dict[str, Any]:
        return await self.request(Operation.GET_ALL_INFORMATION)