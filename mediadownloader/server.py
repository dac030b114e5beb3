"""Line-delimited JSON server in front of the download database."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

from mediadownloader.constants import (
    KEY_ID,
    KEY_MESSAGE,
    KEY_OPERATION,
    KEY_PARAMETERS,
    KEY_SPECIFICATION,
    KEY_STATUS,
    MSG_INVALID_JSON,
    MSG_INVALID_OPERATION,
    MSG_INVALID_SPECIFICATION,
    STATUS_REFUSED,
    Operation,
    Specification,
)
from mediadownloader.manager import DbManager

STREAM_LIMIT = 1 << 24

Handler = Callable[[Specification, "dict[str, Any]"], "dict[str, Any]"]


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialise a message as one compact JSON line with sorted keys."""
    text = json.dumps(message, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8") + b"\n"


def message_id(value: Any) -> int:
    """Integer request id carried by a JSON value; 0 when there is none."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _error(request_id: int, message: str) -> dict[str, Any]:
    return {KEY_ID: request_id, KEY_STATUS: STATUS_REFUSED, KEY_MESSAGE: message}


class DbServer:
    """Answers database requests sent as JSON lines over TCP on the local host."""

    def __init__(
        self, manager: "DbManager | None" = None, host: str = "127.0.0.1", port: int = 0
    ) -> None:
        self.manager = manager if manager is not None else DbManager()
        self.host = host
        self._requested_port = port
        self._server: asyncio.AbstractServer | None = None
        self._writers: set[asyncio.StreamWriter] = set()
        m = self.manager
        self._handlers: dict[Operation, Handler] = {
            Operation.VERIFY_STATE: lambda spec, params: m.is_open_db(),
            Operation.ADD_INFORMATION: lambda spec, params: m.add_download(params),
            Operation.DELETE_INFORMATION: lambda spec, params: m.remove_download(params),
            Operation.DELETE_ALL_INFORMATION: lambda spec, params: m.remove_all_downloads(),
            Operation.UPDATE_INFORMATION: lambda spec, params: m.update(spec, params),
            Operation.GET_INFORMATION: lambda spec, params: m.read_download(params),
            Operation.GET_ALL_INFORMATION: lambda spec, params: m.read_all_downloads(),
        }

    @property
    def port(self) -> int:
        """Port the server listens on; 0 when it is not listening."""
        if self._server is None or not self._server.sockets:
            return 0
        return self._server.sockets[0].getsockname()[1]

    def handle_line(self, line: "bytes | str") -> list[dict[str, Any]]:
        """Process one request line and return the responses to send back, in order."""
        try:
            obj = json.loads(line)
        except ValueError:
            return [_error(-1, MSG_INVALID_JSON)]
        if not isinstance(obj, dict):
            return [_error(-1, MSG_INVALID_JSON)]

        request_id = message_id(obj.get(KEY_ID))
        op_text = obj.get(KEY_OPERATION)
        spec_text = obj.get(KEY_SPECIFICATION)
        operation = Operation.parse(op_text if isinstance(op_text, str) else "")
        spec = Specification.parse(spec_text if isinstance(spec_text, str) else "")
        params = obj.get(KEY_PARAMETERS)
        if not isinstance(params, dict):
            params = {}

        responses: list[dict[str, Any]] = []
        if operation is Operation.UNKNOWN:
            responses.append(_error(request_id, MSG_INVALID_OPERATION))
        if operation is Operation.UPDATE_INFORMATION and spec is Specification.UNKNOWN:
            responses.append(_error(request_id, MSG_INVALID_SPECIFICATION))

        handler = self._handlers.get(operation)
        if handler is not None:
            response = dict(handler(spec, params))
            response[KEY_ID] = request_id
            responses.append(response)
        return responses

    async def _serve(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        try:
            while True:
                line = await reader.readline()
                if not line.endswith(b"\n"):
                    break
                for response in self.handle_line(line):
                    writer.write(encode_message(response))
                await writer.drain()
        except (ConnectionError, ValueError):
            pass
        finally:
            self._writers.discard(writer)
            writer.close()

    async def start(self) -> int:
        """Start listening and return the port in use."""
        self._server = await asyncio.start_server(
            self._serve, self.host, self._requested_port, limit=STREAM_LIMIT
        )
        return self.port

    async def close(self) -> None:
        """Stop listening and drop every open connection."""
        server, self._server = self._server, None
        if server is None:
            return
        server.close()
        for writer in list(self._writers):
            writer.close()
        await server.wait_closed()

    async def __aenter__(self) -> "DbServer":
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()