"""Dependency injection container for labcoat."""

from dataclasses import dataclass

from labcoat.config import Config
from labcoat.services.fleet import Fleet
from labcoat.services.pool import WorkerPool
from labcoat.ui.styles import PLAIN_STYLES, Styles


@dataclass
class Dependencies:
    """Container for labcoat dependencies.

    Holds configuration, the nix worker pool and the fleet built on them.

    Example:
        deps = Dependencies.create()
        await deps.fleet.load_hosts()
    """

    config: Config
    nix_pool: WorkerPool
    fleet: Fleet

    @classmethod
    def create(cls, styles: Styles = PLAIN_STYLES) -> "Dependencies":
        """Create dependencies from the environment and config file.

        Returns:
            Initialized Dependencies instance
        """
        return cls.from_config(Config.from_env(), styles)

    @classmethod
    def from_config(cls, config: Config, styles: Styles = PLAIN_STYLES) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Custom Config instance
            styles: Renderers for host views

        Returns:
            Dependencies with pool and fleet initialized from config
        """
        nix_pool = WorkerPool("nix", config.nix_workers)
        fleet = Fleet(config, nix_pool, styles)
        return cls(config=config, nix_pool=nix_pool, fleet=fleet)

    async def cleanup(self) -> None:
        """Clean up resources (cancel running actions)."""
        await self.fleet.close()
