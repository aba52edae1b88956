"""Spark wire protocol, Unix-socket IPC, command handling, and ssh/rsync hop routing."""

__version__ = "0.5.6"

__all__ = ["destination", "handler", "ipc", "protocol", "routing", "schema"]