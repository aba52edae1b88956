# sparkctl

`sparkctl` contains the parts a spark client or daemon uses to talk to
other machines. It needs only the standard library.

## Modules

- **`sparkctl.protocol`** defines the commands a spark accepts and the
  responses it returns:
  - `Command` with a `CommandKind` of `RELOAD`, `HEARTBEAT`, `VERSION` or
    `MUSIC`. A `MUSIC` command carries a `MusicCmd`, which holds a
    `MusicCmdKind` built from a `MusicAction`.
  - `Response`, which wraps either a success value (`Unit`, `Version`,
    `Title`, `PlayState`, `Volume`, `CurrentResponse`, `QueueSummary`,
    `Now`) or an `ErrorResponse` made of an `ErrorKind` and a message.
    `Response.is_ok()` tells whether the command succeeded.

  `command_to_json` / `command_from_json` and `response_to_json` /
  `response_from_json` convert to and from the decoded JSON form, in which
  enums are externally tagged. A malformed document raises `ValueError`.
  `display_response` renders a response as text for a person to read.
- **`sparkctl.ipc`** carries the protocol over a Unix domain socket, one
  JSON document per line.
  - `serve(handler, path=None)` removes any stale socket file, binds the
    socket, makes it world-accessible and returns a running
    `asyncio.Server`. The handler is an async function from `Command` to
    `Response`. A line that cannot be decoded is answered with a
    `DESERIALIZING_COMMAND` error.
  - `connect(path=None)` returns a `Client`. Its `send(command)` returns
    the `Response`, or `None` if the server closed the connection. It also
    works as an async context manager and has `close()`.
  - `send(command, path=None)` does a single round trip on a fresh
    connection.
  - `default_socket_path()` returns `<tmpdir>/<user>/spark/socket` and
    creates the directory if it is missing.
  - `RecvError` is raised when a received message cannot be decoded.
- **`sparkctl.handler`** answers commands the way a daemon does.
  `handle(command)` does the following for each kind of command:
  - heartbeats get `Unit`;
  - version queries get `Version("0.5.6")`;
  - music commands are refused with a `REQUEST_FAILED` error.

  A reload starts a background thread that waits one second and then
  re-executes the running program with the argument `daemon`.
  `reload()` prepares that restart function. It raises `RuntimeError` if a
  reload is already under way.
- **`sparkctl.destination`** provides `Destination`:
  - `Destination.parse("user@host")` or `Destination.parse("host")`
    builds one. An empty name or whitespace raises `ValueError`.
  - `resolve_alias(aliases)` returns `(username, hostname)`. It follows an
    alias when one matches and falls back to the current user when no
    username is given.
- **`sparkctl.routing`** builds command lines that hop along a path of
  machines:
  - `SimpleNode` describes one hop. `path_to_args` turns a path into one
    `SshCommand` per hop, and `ssh_hops` chains those hops into a single
    `ssh ... ssh ...` argument list. `PseudoTty` chooses whether `-t` is
    passed.
  - `ssh_command(hops, sub_shell=None, args=())` appends either a
    `bash -c` script or extra arguments to the hops. Giving both raises
    `ValueError`.
  - `rsync_command(rsync_options, dry_run, paths, bridge)` builds an rsync
    invocation that uses the hops as its remote shell.
  - `get_host(paths)` finds the destination of the first `host:path`
    argument.
- **`sparkctl.schema`** prints sample messages. `sample_commands()` and
  `sample_responses()` return one example of every message.

## Installation

```
pip install .
```

## Printing the wire format

To print an example of every command and every response as pretty JSON,
run:

```
sparkctl-schema
```

## What it does not do

- There is no daemon command. Nothing here starts the IPC server together
  with other background work.
- Nothing here posts machine status to a backend or keeps a persistent
  connection to one. Commands cannot be sent to remote hosts.
- Music control is not carried out. `handle` always refuses it.
- `sparkctl.routing` only builds command lines from a path you supply.
  It does not discover routes between machines, and it does not run ssh
  or rsync.

## Running the tests

```
pip install ".[test]"
pytest
```