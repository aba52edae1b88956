"""Commands sent to a spark instance, its responses, and their JSON form.

The JSON form uses externally tagged enums: a variant without data is a
bare string such as ``"Reload"``, and a variant with data is an object with a
single key naming the variant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Union

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class _UnitBody:
    """Marks a variant that was given as a bare string."""


_UNIT = _UnitBody()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_usize(value: Any, name: str) -> int:
    if not _is_int(value) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _check_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value


def _check_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean, got {value!r}")
    return value


def _check_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _check_str_list(value: Any, name: str) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{name} must be a list of strings, got {value!r}")
    return [_check_str(item, name) for item in value]


def _variant(data: Any, what: str) -> tuple[str, Any]:
    """Split an externally tagged value into its variant name and body."""
    if isinstance(data, str):
        return data, _UNIT
    if isinstance(data, dict) and len(data) == 1:
        ((name, body),) = data.items()
        if isinstance(name, str):
            return name, body
    raise ValueError(f"invalid {what}: expected a variant name or a single-key object")


def _struct(body: Any, what: str) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ValueError(f"invalid {what}: expected an object")
    return body


def _required(fields: dict[str, Any], key: str, what: str) -> Any:
    try:
        return fields[key]
    except KeyError:
        raise ValueError(f"invalid {what}: missing field `{key}`") from None


def _expect_unit(body: Any, name: str) -> None:
    if body is not _UNIT:
        raise ValueError(f"invalid type: expected unit variant `{name}`")


class MusicAction(Enum):
    """What a music command asks a player to do."""

    FRWD = "Frwd"
    BACK = "Back"
    CYCLE_PAUSE = "CyclePause"
    CHANGE_VOLUME = "ChangeVolume"
    CURRENT = "Current"
    QUEUE = "Queue"
    NOW = "Now"


_FIELDLESS_ACTIONS = frozenset(
    {MusicAction.FRWD, MusicAction.BACK, MusicAction.CYCLE_PAUSE, MusicAction.CURRENT}
)


@dataclass(frozen=True)
class MusicCmdKind:
    """A music action together with the arguments that action takes.

    ``ChangeVolume`` needs ``amount`` (a 32-bit signed integer), ``Queue``
    needs ``query`` and may set ``search``, and ``Now`` may set ``amount``
    (a non-negative integer). The other actions take no arguments.
    """

    action: MusicAction
    amount: int | None = None
    query: str | None = None
    search: bool = False

    def __post_init__(self) -> None:
        action = self.action
        if not isinstance(action, MusicAction):
            raise TypeError(f"action must be a MusicAction, got {action!r}")
        if action in _FIELDLESS_ACTIONS:
            if self.amount is not None or self.query is not None or self.search:
                raise ValueError(f"{action.value} takes no arguments")
        elif action is MusicAction.CHANGE_VOLUME:
            if not _is_int(self.amount) or not _I32_MIN <= self.amount <= _I32_MAX:
                raise ValueError(f"amount must be a 32-bit integer, got {self.amount!r}")
            if self.query is not None or self.search:
                raise ValueError("ChangeVolume only takes an amount")
        elif action is MusicAction.QUEUE:
            _check_str(self.query, "query")
            _check_bool(self.search, "search")
            if self.amount is not None:
                raise ValueError("Queue does not take an amount")
        else:
            if self.amount is not None:
                _check_usize(self.amount, "amount")
            if self.query is not None or self.search:
                raise ValueError("Now only takes an amount")


@dataclass(frozen=True)
class MusicCmd:
    """A music command aimed at a player, optionally picked by index and user."""

    command: MusicCmdKind
    index: int | None = None
    username: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.command, MusicCmdKind):
            raise TypeError(f"command must be a MusicCmdKind, got {self.command!r}")
        if self.index is not None:
            _check_usize(self.index, "index")
        if self.username is not None:
            _check_str(self.username, "username")


class CommandKind(Enum):
    """The commands a spark instance understands."""

    RELOAD = "Reload"
    HEARTBEAT = "Heartbeat"
    MUSIC = "Music"
    VERSION = "Version"


@dataclass(frozen=True)
class Command:
    """A command to send to a spark instance; ``music`` is set only for MUSIC."""

    kind: CommandKind
    music: MusicCmd | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, CommandKind):
            raise TypeError(f"kind must be a CommandKind, got {self.kind!r}")
        if self.kind is CommandKind.MUSIC:
            if not isinstance(self.music, MusicCmd):
                raise ValueError("a music command needs a MusicCmd")
        elif self.music is not None:
            raise ValueError(f"{self.kind.value} takes no music command")


def _duration_to_json(value: timedelta) -> dict[str, int]:
    return {
        "secs": value.days * 86400 + value.seconds,
        "nanos": value.microseconds * 1000,
    }


def _duration_from_json(data: Any, name: str) -> timedelta:
    fields = _struct(data, name)
    secs = _check_usize(_required(fields, "secs", name), f"{name}.secs")
    nanos = _check_usize(_required(fields, "nanos", name), f"{name}.nanos")
    return timedelta(seconds=secs, microseconds=nanos // 1000)


def _check_duration(value: Any, name: str) -> timedelta:
    if not isinstance(value, timedelta):
        raise TypeError(f"{name} must be a timedelta, got {value!r}")
    if value < timedelta(0):
        raise ValueError(f"{name} must not be negative")
    return value


@dataclass
class Current:
    """The state of the song a player is on."""

    title: str
    playing: bool
    volume: float
    duration: timedelta
    index: int
    chapter: tuple[int, str] | None = None
    progress: float | None = None
    playback_time: timedelta | None = None
    categories: list[str] = field(default_factory=list)
    next: str | None = None

    def __post_init__(self) -> None:
        _check_str(self.title, "title")
        _check_bool(self.playing, "playing")
        self.volume = _check_float(self.volume, "volume")
        _check_duration(self.duration, "duration")
        _check_usize(self.index, "index")
        if self.chapter is not None:
            if not isinstance(self.chapter, (tuple, list)) or len(self.chapter) != 2:
                raise ValueError("chapter must be an (index, title) pair")
            number, title = self.chapter
            self.chapter = (_check_usize(number, "chapter index"), _check_str(title, "chapter title"))
        if self.progress is not None:
            self.progress = _check_float(self.progress, "progress")
        if self.playback_time is not None:
            _check_duration(self.playback_time, "playback_time")
        self.categories = _check_str_list(self.categories, "categories")
        if self.next is not None:
            _check_str(self.next, "next")


@dataclass
class Title:
    """The title now playing."""

    title: str


@dataclass
class PlayState:
    """Whether the player is paused."""

    paused: bool


@dataclass
class Volume:
    """The player's volume, in percent."""

    volume: float

    def __post_init__(self) -> None:
        self.volume = _check_float(self.volume, "volume")


@dataclass
class CurrentResponse:
    """The full state of the current song."""

    current: Current


@dataclass
class QueueSummary:
    """Where a queued song landed."""

    from_: int
    moved_to: int
    current: int


@dataclass
class Now:
    """The songs around the one that is playing."""

    before: list[str]
    current: str
    after: list[str]


@dataclass
class Unit:
    """A success that carries no data."""


@dataclass
class Version:
    """The version a spark instance runs."""

    version: str


class ErrorKind(Enum):
    """Why a command failed."""

    DESERIALIZING_COMMAND = "DeserializingCommand"
    FORWARDED_ERROR = "ForwardedError"
    REQUEST_FAILED = "RequestFailed"
    IO_ERROR = "IoError"
    RELAY_ERROR = "RelayError"


@dataclass
class ErrorResponse:
    """A failed command, with a message."""

    kind: ErrorKind
    message: str


MusicResponse = Union[Title, PlayState, Volume, CurrentResponse, QueueSummary, Now]
SuccessfulResponse = Union[Unit, Version, MusicResponse]

_MUSIC_TYPES = (Title, PlayState, Volume, CurrentResponse, QueueSummary, Now)
_SUCCESS_TYPES = (Unit, Version) + _MUSIC_TYPES


@dataclass
class Response:
    """The outcome of a command: a successful value or an ErrorResponse."""

    value: SuccessfulResponse | ErrorResponse

    def __post_init__(self) -> None:
        if not isinstance(self.value, _SUCCESS_TYPES + (ErrorResponse,)):
            raise TypeError(f"not a response value: {self.value!r}")

    def is_ok(self) -> bool:
        """Whether the command succeeded."""
        return not isinstance(self.value, ErrorResponse)


def _music_kind_to_json(kind: MusicCmdKind) -> Any:
    action = kind.action
    if action in _FIELDLESS_ACTIONS:
        return action.value
    if action is MusicAction.CHANGE_VOLUME:
        return {action.value: {"amount": kind.amount}}
    if action is MusicAction.QUEUE:
        return {action.value: {"query": kind.query, "search": kind.search}}
    return {action.value: {} if kind.amount is None else {"amount": kind.amount}}


def _music_kind_from_json(data: Any) -> MusicCmdKind:
    name, body = _variant(data, "music command")
    try:
        action = MusicAction(name)
    except ValueError:
        raise ValueError(f"unknown music command variant `{name}`") from None
    if action in _FIELDLESS_ACTIONS:
        _expect_unit(body, name)
        return MusicCmdKind(action)
    fields = _struct(body, name)
    if action is MusicAction.CHANGE_VOLUME:
        return MusicCmdKind(action, amount=_required(fields, "amount", name))
    if action is MusicAction.QUEUE:
        return MusicCmdKind(
            action,
            query=_required(fields, "query", name),
            search=_required(fields, "search", name),
        )
    return MusicCmdKind(action, amount=fields.get("amount"))


def command_to_json(command: Command) -> Any:
    """Return the JSON document (as Python data) for a command."""
    if command.kind is not CommandKind.MUSIC:
        return command.kind.value
    music = command.music
    body: dict[str, Any] = {"command": _music_kind_to_json(music.command)}
    if music.index is not None:
        body["index"] = music.index
    if music.username is not None:
        body["username"] = music.username
    return {CommandKind.MUSIC.value: body}


def command_from_json(data: Any) -> Command:
    """Build a command from its decoded JSON document; raise ValueError if invalid."""
    name, body = _variant(data, "command")
    try:
        kind = CommandKind(name)
    except ValueError:
        raise ValueError(f"unknown command variant `{name}`") from None
    if kind is not CommandKind.MUSIC:
        _expect_unit(body, name)
        return Command(kind)
    fields = _struct(body, name)
    music = MusicCmd(
        _music_kind_from_json(_required(fields, "command", name)),
        index=fields.get("index"),
        username=fields.get("username"),
    )
    return Command(kind, music)


def _current_to_json(current: Current) -> dict[str, Any]:
    return {
        "title": current.title,
        "chapter": None if current.chapter is None else list(current.chapter),
        "playing": current.playing,
        "volume": current.volume,
        "progress": current.progress,
        "playback_time": (
            None if current.playback_time is None else _duration_to_json(current.playback_time)
        ),
        "duration": _duration_to_json(current.duration),
        "categories": list(current.categories),
        "index": current.index,
        "next": current.next,
    }


def _current_from_json(fields: dict[str, Any]) -> Current:
    what = "Current"
    playback_time = fields.get("playback_time")
    return Current(
        title=_required(fields, "title", what),
        playing=_required(fields, "playing", what),
        volume=_required(fields, "volume", what),
        duration=_duration_from_json(_required(fields, "duration", what), "duration"),
        index=_required(fields, "index", what),
        chapter=fields.get("chapter"),
        progress=fields.get("progress"),
        playback_time=(
            None if playback_time is None else _duration_from_json(playback_time, "playback_time")
        ),
        categories=_required(fields, "categories", what),
        next=fields.get("next"),
    )


def _music_response_to_json(value: MusicResponse) -> Any:
    match value:
        case Title(title=title):
            return {"Title": {"title": title}}
        case PlayState(paused=paused):
            return {"PlayState": {"paused": paused}}
        case Volume(volume=volume):
            return {"Volume": {"volume": volume}}
        case CurrentResponse(current=current):
            return {"Current": _current_to_json(current)}
        case QueueSummary(from_=from_, moved_to=moved_to, current=current):
            return {"QueueSummary": {"from": from_, "moved_to": moved_to, "current": current}}
        case Now(before=before, current=current, after=after):
            return {"Now": {"before": list(before), "current": current, "after": list(after)}}
    raise TypeError(f"not a music response: {value!r}")


def _music_response_from_json(data: Any) -> MusicResponse:
    name, body = _variant(data, "music response")
    fields = _struct(body, name)
    match name:
        case "Title":
            return Title(_check_str(_required(fields, "title", name), "title"))
        case "PlayState":
            return PlayState(_check_bool(_required(fields, "paused", name), "paused"))
        case "Volume":
            return Volume(_required(fields, "volume", name))
        case "Current":
            return CurrentResponse(_current_from_json(fields))
        case "QueueSummary":
            return QueueSummary(
                from_=_check_usize(_required(fields, "from", name), "from"),
                moved_to=_check_usize(_required(fields, "moved_to", name), "moved_to"),
                current=_check_usize(_required(fields, "current", name), "current"),
            )
        case "Now":
            return Now(
                before=_check_str_list(_required(fields, "before", name), "before"),
                current=_check_str(_required(fields, "current", name), "current"),
                after=_check_str_list(_required(fields, "after", name), "after"),
            )
    raise ValueError(f"unknown music response variant `{name}`")


def response_to_json(response: Response) -> Any:
    """Return the JSON document (as Python data) for a response."""
    value = response.value
    if isinstance(value, ErrorResponse):
        return {"Err": {value.kind.value: value.message}}
    match value:
        case Unit():
            body: Any = "Unit"
        case Version(version=version):
            body = {"Version": version}
        case _:
            body = {"MusicResponse": _music_response_to_json(value)}
    return {"Ok": body}


def response_from_json(data: Any) -> Response:
    """Build a response from its decoded JSON document; raise ValueError if invalid."""
    outcome, body = _variant(data, "response")
    if outcome == "Err":
        name, message = _variant(body, "error response")
        try:
            kind = ErrorKind(name)
        except ValueError:
            raise ValueError(f"unknown error variant `{name}`") from None
        return Response(ErrorResponse(kind, _check_str(message, "message")))
    if outcome != "Ok":
        raise ValueError(f"unknown response variant `{outcome}`")
    name, inner = _variant(body, "successful response")
    match name:
        case "Unit":
            _expect_unit(inner, name)
            return Response(Unit())
        case "Version":
            return Response(Version(_check_str(inner, "version")))
        case "MusicResponse":
            return Response(_music_response_from_json(inner))
    raise ValueError(f"unknown successful response variant `{name}`")


def _format_float(value: float) -> str:
    """Format a float as its shortest decimal text, without exponent or trailing '.0'."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = repr(float(value))
    if "e" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


_ERROR_HEADLINES = {
    ErrorKind.DESERIALIZING_COMMAND: "remote spark failed to deserialize your command",
    ErrorKind.FORWARDED_ERROR: "remote spark failed to execute your command",
    ErrorKind.REQUEST_FAILED: "remote spark refused to execute your command",
    ErrorKind.IO_ERROR: "remote spark failed to execute your command due to an io error:",
    ErrorKind.RELAY_ERROR: (
        "the blind-eternities encountered an error while communicating with the remote spark"
    ),
}


def _display_current(current: Current) -> str:
    if current.chapter is not None:
        number, chapter_title = current.chapter
        header = f"Now Playing:\nVideo: {chapter_title} Song: {number} - {chapter_title}\n"
    else:
        header = f"Now Playing: {current.title}\n"
    state = "playing" if current.playing else "paused"
    progress = current.progress if current.progress is not None else 0.0
    return (
        f"{header}{state} at {_format_float(current.volume)}% volume\n"
        f"Progress: {progress:.2f} %"
    )


def display_response(response: Response) -> str:
    """Render a response as text for a person to read."""
    value = response.value
    if isinstance(value, ErrorResponse):
        return f"Error: {_ERROR_HEADLINES[value.kind]}\n -> {value.message}"
    match value:
        case Unit():
            return "success"
        case Version(version=version):
            return version
        case Title(title=title):
            return f"Now playing: {title}"
        case PlayState(paused=paused):
            return "paused" if paused else "playing"
        case Volume(volume=volume):
            return f"volume: {_format_float(volume)}%"
        case CurrentResponse(current=current):
            return _display_current(current)
        case QueueSummary(from_=from_, moved_to=moved_to, current=current):
            return (
                f"Queued to position {from_}.\n"
                f"--> moved to {moved_to}.\n"
                f"Currently playing {current}\n"
            )
        case Now(before=before, current=current, after=after):
            lines = [f"   {song}\n" for song in before]
            lines.append(f"-> {current}\n")
            lines.extend(f"   {song}\n" for song in after)
            return "".join(lines)
    raise TypeError(f"not a response value: {value!r}")