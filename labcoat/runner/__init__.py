"""Command execution engine: runners, output buffers and labelled scripts."""

from labcoat.runner.buffer import OutputBuffer
from labcoat.runner.run import (
    INTERRUPT_MARKER,
    Runner,
    RunnerCancelledError,
    new_local,
    new_remote,
    new_remote_script,
)
from labcoat.runner.script import LABEL_END, LABEL_START, format_output, new_script
from labcoat.runner.state import RunnerState, state_to_string

__all__ = [
    "INTERRUPT_MARKER",
    "LABEL_END",
    "LABEL_START",
    "OutputBuffer",
    "Runner",
    "RunnerCancelledError",
    "RunnerState",
    "format_output",
    "new_local",
    "new_remote",
    "new_remote_script",
    "new_script",
    "state_to_string",
]
