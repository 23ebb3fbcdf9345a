"""Deploy target data models."""

from dataclasses import dataclass

from labcoat.utils.shell import ssh_destination, ssh_target


@dataclass
class TargetInfo:
    """Host information queried from nix. Cached per host."""

    deploy_host: str
    deploy_user: str = ""

    @classmethod
    def from_json(cls, data: dict[str, str]) -> "TargetInfo":
        """Build from the ``nix eval --json`` target info object."""
        return cls(
            deploy_host=data.get("deployHost") or "",
            deploy_user=data.get("deployUser") or "",
        )

    @property
    def ssh_target(self) -> str:
        """``[user@]host`` as passed to ssh."""
        return ssh_target(self.deploy_host, self.deploy_user)

    @property
    def ssh_destination(self) -> str:
        """``ssh://[user@]host`` for display."""
        return ssh_destination(self.deploy_host, self.deploy_user)
