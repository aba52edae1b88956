from ipaddress import IPv4Address

import pytest

from sparkctl.destination import Destination
from sparkctl.routing import (
    PseudoTty,
    SimpleNode,
    SshCommand,
    get_host,
    path_to_args,
    rsync_command,
    ssh_command,
    ssh_hops,
)

IP = IPv4Address("192.168.1.1")


def _nodes(port, count):
    return [SimpleNode(ip=IP, port=port) for _ in range(count)]


def test_one_hop():
    expect = [
        "ssh", "-p", "222", "-t", "user@192.168.1.1",
        "ssh", "-p", "222", "-t", "user@192.168.1.1",
    ]
    assert ssh_hops(_nodes(222, 2), "user", PseudoTty.ALLOCATE) == expect


def test_no_hop():
    expect = ["ssh", "-p", "22", "-t", "user@192.168.1.1"]
    assert ssh_hops(_nodes(22, 1), "user", PseudoTty.ALLOCATE) == expect


def test_three_hops():
    expect = ["ssh", "-p", "22", "-t", "user@192.168.1.1"] * 3
    assert ssh_hops(_nodes(22, 3), "user", PseudoTty.ALLOCATE) == expect


def test_three_hops_no_tty():
    expect = ["ssh", "-p", "22", "user@192.168.1.1"] * 3
    assert ssh_hops(_nodes(22, 3), "user", PseudoTty.NONE) == expect


def test_correct_usernames_are_picked():
    expect = [
        "ssh", "-p", "22", "mendess@192.168.1.1",
        "ssh", "-p", "22", "pedromendes@192.168.1.1",
    ]
    path = [
        SimpleNode(ip=IP, port=22, default_username="mendess"),
        SimpleNode(ip=IP, port=22),
    ]
    assert ssh_hops(path, "pedromendes", PseudoTty.NONE) == expect


def test_path_to_args_builds_commands():
    commands = path_to_args(_nodes(22, 2), "user", PseudoTty.NONE)
    assert commands == [SshCommand(port=22, tty=PseudoTty.NONE, username="user", ip=IP)] * 2


def test_ssh_command_extra_args():
    cmd = SshCommand(port=22, tty=PseudoTty.NONE, username="user", ip=IP)
    assert cmd.args(["-o", "BatchMode=yes", "true"]) == [
        "ssh", "-p", "22", "user@192.168.1.1", "-o", "BatchMode=yes", "true",
    ]
    assert list(cmd) == ["ssh", "-p", "22", "user@192.168.1.1"]


def test_get_host_finds_first_remote():
    assert get_host(["local", "alice@box:/tmp/x", "other:/y"]) == Destination.parse("alice@box")


def test_get_host_none_when_all_local():
    assert get_host(["a", "b"]) is None


def test_get_host_rejects_bad_host():
    with pytest.raises(ValueError):
        get_host(["@:/tmp"])


def test_rsync_command():
    bridge = ["ssh", "-p", "22", "user@192.168.1.1"]
    assert rsync_command("av", True, ["local", "box:/tmp/x"], bridge) == [
        "rsync", "-avn", "-e", "ssh -p 22 user@192.168.1.1", "local", ":/tmp/x",
    ]
    assert rsync_command("av", False, ["box:/tmp/x"], bridge)[1] == "-av"


def test_ssh_command_with_args():
    hops = ["ssh", "-p", "22", "user@192.168.1.1"]
    assert ssh_command(hops, None, ["ls", "-l"]) == hops + ["ls", "-l"]


def test_ssh_command_with_sub_shell():
    hops = ["ssh", "-p", "22", "user@192.168.1.1"]
    assert ssh_command(hops, "echo hi") == hops + ["bash", "-c", "echo hi"]


def test_ssh_command_errors():
    with pytest.raises(ValueError):
        ssh_command([], None, [])
    with pytest.raises(ValueError):
        ssh_command(["ssh"], "echo", ["ls"])