"""Local IPC with a spark instance over a Unix socket, one JSON document per line."""

from __future__ import annotations

import asyncio
import contextlib
import getpass
import itertools
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

from sparkctl.protocol import (
    Command,
    ErrorKind,
    ErrorResponse,
    Response,
    command_from_json,
    command_to_json,
    response_from_json,
    response_to_json,
)

_log = logging.getLogger(__name__)

_LINE_LIMIT = 16 * 1024 * 1024

_T = TypeVar("_T")

Handler = Callable[[Command], Awaitable[Response]]


class RecvError(Exception):
    """A message arrived that could not be decoded."""


def default_socket_path() -> Path:
    """Return the per-user socket path, creating its directory if needed."""
    directory = Path(tempfile.gettempdir()) / getpass.getuser() / "spark"
    directory.mkdir(parents=True, exist_ok=True)
    return directory / "socket"


async def _read_message(
    reader: asyncio.StreamReader, decode: Callable[[Any], _T]
) -> _T | None:
    """Read one line and decode it; None means the peer closed the stream."""
    line = await reader.readline()
    if not line:
        return None
    try:
        return decode(json.loads(line.decode("utf-8")))
    except (ValueError, TypeError) as error:
        raise RecvError(str(error)) from error


async def _write_message(writer: asyncio.StreamWriter, document: Any) -> None:
    payload = json.dumps(document, ensure_ascii=False, separators=(",", ":")) + "\n"
    writer.write(payload.encode("utf-8"))
    await writer.drain()


class Client:
    """A connection to a spark instance's IPC socket."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer

    async def send(self, command: Command) -> Response | None:
        """Send a command and wait for its response; None if the server hung up."""
        await _write_message(self._writer, command_to_json(command))
        return await _read_message(self._reader, response_from_json)

    async def close(self) -> None:
        """Close the connection."""
        self._writer.close()
        with contextlib.suppress(OSError):
            await self._writer.wait_closed()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


async def connect(path: str | os.PathLike[str] | None = None) -> Client:
    """Open a client on the given socket, or on the default one."""
    target = Path(path) if path is not None else default_socket_path()
    reader, writer = await asyncio.open_unix_connection(str(target), limit=_LINE_LIMIT)
    return Client(reader, writer)


async def send(
    command: Command, path: str | os.PathLike[str] | None = None
) -> Response | None:
    """Send one command on a fresh connection and return the response."""
    async with await connect(path) as client:
        return await client.send(command)


async def _serve_client(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    handler: Handler,
    client_id: int,
) -> None:
    try:
        while True:
            try:
                command = await _read_message(reader, command_from_json)
            except RecvError as error:
                _log.info("received local request %d: invalid (%s)", client_id, error)
                response = Response(ErrorResponse(ErrorKind.DESERIALIZING_COMMAND, str(error)))
            else:
                _log.info("received local request %d: %r", client_id, command)
                if command is None:
                    break
                response = await handler(command)
            await _write_message(writer, response_to_json(response))
    except OSError as error:
        _log.error("connection %d failed: %s", client_id, error)
    finally:
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()


async def serve(
    handler: Handler, path: str | os.PathLike[str] | None = None
) -> asyncio.Server:
    """Bind the IPC socket and answer every command with ``handler``.

    A stale socket file is removed first and the new socket is made
    world-accessible. The returned server is already accepting connections.
    """
    target = Path(path) if path is not None else default_socket_path()
    try:
        target.unlink()
    except FileNotFoundError:
        pass
    except OSError as error:
        _log.error("failed to remove old socket %s: %s", target, error)
        raise
    _log.info("binding ipc socket at %s", target)
    ids = itertools.count()

    async def on_connection(
        reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        await _serve_client(reader, writer, handler, next(ids))

    server = await asyncio.start_unix_server(
        on_connection, path=str(target), limit=_LINE_LIMIT
    )
    os.chmod(target, 0o777)
    return server