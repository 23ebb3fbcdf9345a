"""Runner lifecycle states."""

from enum import IntEnum


class RunnerState(IntEnum):
    """Lifecycle of a runner: NOT_STARTED -> RUNNING -> DONE | FAILED."""

    NOT_STARTED = 0
    RUNNING = 1
    DONE = 2
    FAILED = 3

    @property
    def is_terminal(self) -> bool:
        return self in (RunnerState.DONE, RunnerState.FAILED)


_STATE_NAMES = {
    RunnerState.NOT_STARTED: "Not Started",
    RunnerState.RUNNING: "Running",
    RunnerState.DONE: "Done",
    RunnerState.FAILED: "Failed",
}


def state_to_string(state: int) -> str:
    """Return the human readable name of a runner state."""
    try:
        return _STATE_NAMES[RunnerState(state)]
    except ValueError:
        return "Unknown"
