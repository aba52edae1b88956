"""Print a sample of every protocol message as pretty JSON."""

from __future__ import annotations

import argparse
import json
from datetime import timedelta

from sparkctl.protocol import (
    Command,
    CommandKind,
    Current,
    CurrentResponse,
    ErrorKind,
    ErrorResponse,
    MusicAction,
    MusicCmd,
    MusicCmdKind,
    Now,
    PlayState,
    QueueSummary,
    Response,
    Title,
    Unit,
    Version,
    Volume,
    command_to_json,
    response_to_json,
)


def sample_commands() -> list[Command]:
    """One sample of every command, each music command in three targeting forms."""
    kinds = [
        MusicCmdKind(MusicAction.FRWD),
        MusicCmdKind(MusicAction.BACK),
        MusicCmdKind(MusicAction.CYCLE_PAUSE),
        MusicCmdKind(MusicAction.CURRENT),
        MusicCmdKind(MusicAction.CHANGE_VOLUME, amount=4),
        MusicCmdKind(MusicAction.QUEUE, query="http://link", search=False),
        MusicCmdKind(MusicAction.NOW, amount=10),
        MusicCmdKind(MusicAction.NOW),
    ]
    targets = [(None, "username"), (1, None), (None, None)]
    commands = [
        Command(CommandKind.RELOAD),
        Command(CommandKind.VERSION),
        Command(CommandKind.HEARTBEAT),
    ]
    commands.extend(
        Command(CommandKind.MUSIC, MusicCmd(kind, index=index, username=username))
        for kind in kinds
        for index, username in targets
    )
    return commands


def sample_responses() -> list[Response]:
    """One sample of every successful response, then of every error."""
    current = Current(
        title="title",
        chapter=(2, "chapter"),
        playing=True,
        volume=54.0,
        progress=50.0,
        playback_time=timedelta(seconds=2),
        duration=timedelta(seconds=60),
        categories=["category"],
        index=1,
        next="next song",
    )
    successes = [
        Unit(),
        Version("1.1.1"),
        Title("title"),
        Volume(54.0),
        PlayState(True),
        CurrentResponse(current),
        QueueSummary(from_=7, moved_to=4, current=3),
        Now(before=["before"], current="current", after=["after"]),
    ]
    errors = [
        ErrorKind.IO_ERROR,
        ErrorKind.DESERIALIZING_COMMAND,
        ErrorKind.FORWARDED_ERROR,
        ErrorKind.RELAY_ERROR,
        ErrorKind.REQUEST_FAILED,
    ]
    return [Response(value) for value in successes] + [
        Response(ErrorResponse(kind, "error")) for kind in errors
    ]


def main(argv: list[str] | None = None) -> int:
    """Print every sample command and response, one JSON document after another."""
    parser = argparse.ArgumentParser(
        prog="schema", description="Print sample JSON messages of the spark protocol."
    )
    parser.parse_args(argv)
    for command in sample_commands():
        print(json.dumps(command_to_json(command), indent=2, ensure_ascii=False))
    for response in sample_responses():
        print(json.dumps(response_to_json(response), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())