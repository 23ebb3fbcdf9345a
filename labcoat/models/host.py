"""Per-host state held by the fleet."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from labcoat.models.target import TargetInfo

if TYPE_CHECKING:
    from labcoat.runner import Runner


class HostTab(str, Enum):
    """Output views kept for every host."""

    STATUS = "status"
    DEPLOY = "deploy"
    RUN = "run"

    @property
    def title(self) -> str:
        return _TAB_TITLES[self]


_TAB_TITLES = {
    HostTab.STATUS: "Host Status",
    HostTab.DEPLOY: "Deploy",
    HostTab.RUN: "Run Command",
}


@dataclass
class HostView:
    """Output panel for one kind of action on a host."""

    intro: str = ""  # Rendered intro text: command, host, etc.
    content: str = ""  # Rendered runner output, refreshed on each update.
    runner: "Runner | None" = None
    follow_task: "asyncio.Task[Any] | None" = field(default=None, repr=False)

    @property
    def running(self) -> bool:
        return self.runner is not None and self.runner.running

    def render(self) -> str:
        """Return intro followed by the latest rendered output."""
        return self.intro + self.content


@dataclass
class HostModel:
    """A managed host and its output views."""

    name: str
    target: TargetInfo | None = None
    status_collected: bool = False  # Whether status has been collected for this host.
    views: dict[HostTab, HostView] = field(
        default_factory=lambda: {tab: HostView() for tab in HostTab}
    )

    def view(self, tab: HostTab) -> HostView:
        return self.views[tab]
