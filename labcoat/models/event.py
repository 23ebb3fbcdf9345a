"""Runner update events delivered to the fleet."""

from dataclasses import dataclass

from labcoat.models.host import HostTab


@dataclass(frozen=True)
class RunnerEvent:
    """New output or status is available for a host view."""

    host: str
    tab: HostTab
    final: bool = False  # Runner was complete when the event was built.
