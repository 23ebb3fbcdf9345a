"""Data models for labcoat."""

from labcoat.models.event import RunnerEvent
from labcoat.models.host import HostModel, HostTab, HostView
from labcoat.models.target import TargetInfo

__all__ = [
    "HostModel",
    "HostTab",
    "HostView",
    "RunnerEvent",
    "TargetInfo",
]
