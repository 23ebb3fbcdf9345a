"""Services for labcoat."""

from labcoat.services.fleet import (
    Fleet,
    FleetError,
    TargetUnavailableError,
    UnknownHostError,
)
from labcoat.services.nix import NixError
from labcoat.services.pool import Worker, WorkerPool, WorkerTimeoutError
from labcoat.services.state import (
    get_config,
    get_fleet,
    reset_state,
    set_config,
    set_fleet,
)

__all__ = [
    "Fleet",
    "FleetError",
    "NixError",
    "TargetUnavailableError",
    "UnknownHostError",
    "Worker",
    "WorkerPool",
    "WorkerTimeoutError",
    "get_config",
    "get_fleet",
    "reset_state",
    "set_config",
    "set_fleet",
]
