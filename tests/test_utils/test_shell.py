"""Tests for ssh command line helpers."""

from labcoat.utils.shell import SSH_OPTIONS, ssh_argv, ssh_destination, ssh_target


def test_ssh_target() -> None:
    assert ssh_target("web1", "root") == "root@web1"
    assert ssh_target("web1") == "web1"


def test_ssh_destination() -> None:
    assert ssh_destination("web1", "root") == "ssh://root@web1"
    assert ssh_destination("web1", "") == "ssh://web1"


def test_ssh_argv_is_non_interactive() -> None:
    argv = ssh_argv("web1", "root", "uname", "-a")

    assert argv == ["ssh", *SSH_OPTIONS, "root@web1", "uname", "-a"]
    assert "-oBatchMode=yes" in argv
