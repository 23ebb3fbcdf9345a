"""SSH command line helpers."""

SSH_OPTIONS = ("-T", "-oBatchMode=yes")


def ssh_target(host: str, user: str = "") -> str:
    """Return the ``[user@]host`` form passed to ssh on the command line."""
    return f"{user}@{host}" if user else host


def ssh_destination(host: str, user: str = "") -> str:
    """Return the ``ssh://[user@]host`` form used for display."""
    return "ssh://" + ssh_target(host, user)


def ssh_argv(host: str, user: str, *command: str) -> list[str]:
    """Build a non-interactive ssh invocation that fails instead of prompting.

    Args:
        host: Remote host name or address
        user: Remote user, or empty for ssh's default
        *command: Remote command and arguments

    Returns:
        Argument vector starting with ``ssh``
    """
    return ["ssh", *SSH_OPTIONS, ssh_target(host, user), *command]
