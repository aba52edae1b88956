"""Where a remote command should go: an optional user at a host."""

from __future__ import annotations

import getpass
import logging
from dataclasses import dataclass
from typing import Mapping

_log = logging.getLogger(__name__)

_FORBIDDEN = frozenset("@")


def _parse_name(text: str, what: str) -> str:
    if not text:
        raise ValueError(f"{what} must not be empty")
    if any(ch.isspace() or ch in _FORBIDDEN for ch in text):
        raise ValueError(f"invalid {what}: {text!r}")
    return text


@dataclass(frozen=True)
class Destination:
    """A host to reach, with the user to log in as if one was given."""

    hostname: str
    username: str | None = None

    @classmethod
    def parse(cls, text: str) -> Destination:
        """Parse ``user@host`` or ``host``; raise ValueError if malformed."""
        username, sep, hostname = text.partition("@")
        if not sep:
            return cls(hostname=_parse_name(text, "hostname"))
        return cls(
            hostname=_parse_name(hostname, "hostname"),
            username=_parse_name(username, "username"),
        )

    def __str__(self) -> str:
        if self.username is None:
            return self.hostname
        return f"{self.username}@{self.hostname}"

    def resolve_alias(self, aliases: Mapping[str, Destination]) -> tuple[str, str]:
        """Return the (username, hostname) to use, following an alias if one matches.

        The username is taken from this destination, then from the alias, and
        finally falls back to the current user.
        """
        alias = aliases.get(self.hostname)
        if alias is None:
            return self.username or getpass.getuser(), self.hostname
        _log.debug("resolving alias %s as %s", self.hostname, alias)
        username = self.username
        if username is None:
            username = alias.username
        if username is None:
            username = getpass.getuser()
        return username, alias.hostname