"""Global state management for labcoat."""

from labcoat.config import Config
from labcoat.services.fleet import Fleet
from labcoat.services.pool import WorkerPool

# Global state (initialized on first access)
_config: Config | None = None
_fleet: Fleet | None = None


def get_config() -> Config:
    """Get or create config."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def get_fleet() -> Fleet:
    """Get or create the fleet, with a nix worker pool sized from config."""
    global _fleet
    if _fleet is None:
        config = get_config()
        _fleet = Fleet(config, WorkerPool("nix", config.nix_workers))
    return _fleet


def reset_state() -> None:
    """Reset global state for testing.

    This function clears the singleton instances, allowing tests
    to start with fresh state. Should only be used in test fixtures.
    """
    global _config, _fleet
    _config = None
    _fleet = None


def set_config(config: Config) -> None:
    """Set the global config instance.

    Args:
        config: Config instance to use globally.
    """
    global _config
    _config = config


def set_fleet(fleet: Fleet) -> None:
    """Set the global fleet instance.

    Args:
        fleet: Fleet instance to use globally.
    """
    global _fleet
    _fleet = fleet
