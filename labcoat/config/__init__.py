"""Configuration module for labcoat.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- Settings: Environment variable configuration
- General, Commands, Hosts, Nix: Config file sections
"""

from labcoat.config.main import Commands, Config, ConfigError, General, Hosts, Nix
from labcoat.config.settings import Settings

__all__ = ["Commands", "Config", "ConfigError", "General", "Hosts", "Nix", "Settings"]
