"""Build ssh and rsync command lines that hop along a path of machines."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence, Union

from sparkctl.destination import Destination

_log = logging.getLogger(__name__)

IpAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class PseudoTty(Enum):
    """Whether ssh should allocate a pseudo terminal."""

    NONE = "none"
    ALLOCATE = "allocate"


@dataclass(frozen=True)
class SimpleNode:
    """One machine on a route."""

    ip: IpAddress
    port: int
    default_username: str | None = None


@dataclass(frozen=True)
class SshCommand:
    """The ssh invocation that reaches one hop."""

    port: int
    tty: PseudoTty
    username: str
    ip: IpAddress

    def args(self, extra_args: Iterable[str] = ()) -> list[str]:
        """Return the ssh arguments for this hop, followed by ``extra_args``."""
        result = ["ssh", "-p", str(self.port)]
        if self.tty is PseudoTty.ALLOCATE:
            result.append("-t")
        result.append(f"{self.username}@{self.ip}")
        result.extend(extra_args)
        return result

    def __iter__(self) -> Iterator[str]:
        return iter(self.args())


def path_to_args(
    path: Sequence[SimpleNode], username: str, pseudo_tty: PseudoTty
) -> list[SshCommand]:
    """Return one ssh command per hop, using each node's default user if it has one."""
    route = [f"{username}@{ipaddress.IPv4Address('127.0.0.1')}:22"]
    route.extend(f"{node.default_username or username}@{node.ip}:{node.port}" for node in path)
    _log.info("%s", " -> ".join(route))
    return [
        SshCommand(
            port=node.port,
            tty=pseudo_tty,
            username=node.default_username or username,
            ip=node.ip,
        )
        for node in path
    ]


def ssh_hops(path: Sequence[SimpleNode], username: str, pseudo_tty: PseudoTty) -> list[str]:
    """Return the chained ssh arguments that reach the end of ``path``."""
    return [arg for command in path_to_args(path, username, pseudo_tty) for arg in command]


def get_host(paths: Iterable[str]) -> Destination | None:
    """Return the destination of the first ``host:path`` argument, if any.

    Raises ValueError if that host is malformed.
    """
    for path in paths:
        host, sep, _ = path.partition(":")
        if sep:
            return Destination.parse(host)
    return None


def rsync_command(
    rsync_options: str, dry_run: bool, paths: Iterable[str], bridge: Sequence[str]
) -> list[str]:
    """Return the rsync command line that copies ``paths`` over the ssh ``bridge``."""
    command = ["rsync", f"-{rsync_options}{'n' if dry_run else ''}", "-e", " ".join(bridge)]
    for path in paths:
        _, sep, rest = path.partition(":")
        command.append(f":{rest}" if sep else path)
    _log.debug("running rsync with args: [%s]", ", ".join(command[1:]))
    return command


def ssh_command(
    hops: Sequence[str], sub_shell: str | None = None, args: Sequence[str] = ()
) -> list[str]:
    """Return the full ssh command line: the hops, then a shell script or the arguments."""
    if not hops:
        raise ValueError("there must be at least one hop")
    if sub_shell is not None and args:
        raise ValueError("a sub shell script conflicts with extra arguments")
    command = list(hops)
    if sub_shell is not None:
        command.extend(["bash", "-c", sub_shell])
    else:
        command.extend(args)
    _log.debug("running ssh with args [%s]", ", ".join(command[1:]))
    return command