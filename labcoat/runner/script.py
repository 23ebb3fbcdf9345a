"""Labelled multi-command shell scripts.

A script built by :func:`new_script` echoes a label before running each
command, so the combined output stream can be split back into segments by
:func:`format_output`::

    echo "[label{{{uptime}}}label]"
    uptime

"""

from collections.abc import Callable

LABEL_START = "[label{{{"
LABEL_END = "}}}label]"


def _escape(cmd: str) -> str:
    return cmd.replace('"', '\\"')


def new_script(cmds: list[str]) -> str:
    """Compile commands into a bash script that labels each command's output.

    Args:
        cmds: Shell command lines, run in order.

    Returns:
        Script text suitable for ``bash -s``.
    """
    parts = []
    for cmd in cmds:
        parts.append(f'echo "{LABEL_START}{_escape(cmd)}{LABEL_END}"\n')
        parts.append(f"{cmd}\n\n")
    return "".join(parts)


def format_output(s: str, label_fn: Callable[[str], str]) -> str:
    """Render label markers in a script's output stream.

    Text outside markers is passed through unchanged; each label is replaced
    by ``label_fn(label)``.

    Note:
        A start marker without a matching end marker turns the entire
        remainder of ``s`` into the label. Output is therefore swallowed by
        the label renderer if a stream is cut off mid-marker.
    """
    out = []

    while True:
        start = s.find(LABEL_START)
        if start == -1:
            break

        out.append(s[:start])
        s = s[start + len(LABEL_START):]

        end = s.find(LABEL_END)
        if end == -1:
            # No end marker; render the rest as label.
            label, s = s, ""
        else:
            label, s = s[:end], s[end + len(LABEL_END):]
        out.append(label_fn(label))

    out.append(s)
    return "".join(out)
