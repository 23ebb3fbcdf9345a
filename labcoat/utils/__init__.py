"""Utility modules for labcoat."""

from labcoat.utils.console import ColorfulFormatter
from labcoat.utils.shell import SSH_OPTIONS, ssh_argv, ssh_destination, ssh_target

__all__ = [
    "SSH_OPTIONS",
    "ColorfulFormatter",
    "ssh_argv",
    "ssh_destination",
    "ssh_target",
]
