"""Text styles for rendered runner output.

The execution engine only accepts plain ``str -> str`` callables; everything
that knows about colours lives here.
"""

from collections.abc import Callable
from dataclasses import dataclass

RESET = "\033[0m"
SUBTLE = "\033[38;5;241m"
LABEL = "\033[38;5;230;48;5;62m"

StyleFn = Callable[[str], str]


@dataclass(frozen=True)
class Styles:
    """Renderers for the parts of a host view."""

    label: StyleFn  # Sub-command labels decoded from script output.
    subtle: StyleFn  # Intro lines and status suffixes.


def _plain_label(s: str) -> str:
    return f"\n── {s} ──"


def _ansi_label(s: str) -> str:
    return f"\n{LABEL} {s} {RESET}"


def _ansi_subtle(s: str) -> str:
    # Keep leading newlines outside the escape so line counting stays intact.
    body = s.lstrip("\n")
    return s[: len(s) - len(body)] + f"{SUBTLE}{body}{RESET}"


PLAIN_STYLES = Styles(label=_plain_label, subtle=lambda s: s)
ANSI_STYLES = Styles(label=_ansi_label, subtle=_ansi_subtle)


def get_styles(use_colors: bool) -> Styles:
    """Return ANSI styles when colors are wanted, plain text otherwise."""
    return ANSI_STYLES if use_colors else PLAIN_STYLES
