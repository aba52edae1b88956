"""How a spark daemon answers the commands it receives."""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from typing import Callable

from sparkctl.protocol import (
    Command,
    CommandKind,
    ErrorKind,
    ErrorResponse,
    Response,
    Unit,
    Version,
)

_log = logging.getLogger(__name__)

_VERSION = "0.5.6"

_RELOADING = threading.Lock()


def reload() -> Callable[[], None]:
    """Prepare a restart of the daemon.

    Returns a function that, after a short pause, replaces the running process
    with a fresh ``daemon``. Raises RuntimeError if the running program cannot
    be located or a reload is already under way.
    """
    executable = sys.executable
    program = sys.argv[0] if sys.argv else ""
    if not executable:
        raise RuntimeError("cannot locate the running executable")
    if not _RELOADING.acquire(blocking=False):
        raise RuntimeError("already reloading")
    _RELOADING.release()

    def restart() -> None:
        time.sleep(1)
        with _RELOADING:
            _log.info("reloading spark daemon: %s", executable)
            try:
                os.execv(executable, [executable, program, "daemon"])
            except OSError as error:
                _log.error("exec self failed: %s", error)
            if program:
                try:
                    os.execvp(program, [program, "daemon"])
                except OSError as error:
                    _log.error("exec arg0 failed: %s", error)

    return restart


async def handle(command: Command) -> Response:
    """Answer one command."""
    match command.kind:
        case CommandKind.HEARTBEAT:
            return Response(Unit())
        case CommandKind.RELOAD:
            try:
                restart = reload()
            except RuntimeError as error:
                return Response(ErrorResponse(ErrorKind.REQUEST_FAILED, str(error)))
            threading.Thread(target=restart, daemon=True).start()
            return Response(Unit())
        case CommandKind.MUSIC:
            return Response(
                ErrorResponse(
                    ErrorKind.REQUEST_FAILED,
                    "music control is not enabled on this machine",
                )
            )
        case CommandKind.VERSION:
            return Response(Version(_VERSION))
    raise ValueError(f"unknown command: {command!r}")