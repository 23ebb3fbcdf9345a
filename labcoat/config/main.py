"""Application configuration.

Combines two sources:
- Settings: LABCOAT_* environment variables (process and transport concerns)
- The TOML config file: fleet behaviour, overlaid on built-in defaults
"""

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from labcoat.config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_STATUS_CMDS = [
    "date",
    "systemctl --failed",
    "nixos-rebuild --no-build-nix list-generations",
    "uname -a",
    "uptime",
    "df -h -x tmpfs -x overlay",
]


class ConfigError(Exception):
    """Config file could not be read or has invalid values."""


@dataclass
class General:
    pager: str = "less"


@dataclass
class Commands:
    # List of commands to run to display host status.
    status_cmds: list[str] = field(default_factory=lambda: list(DEFAULT_STATUS_CMDS))


@dataclass
class Hosts:
    """Host deployment configuration.

    Nix attrs typically start with ``flake`` or ``target``.
    """

    default_ssh_domain: str = ""  # Appended after '.' to bare hostnames.
    default_ssh_user: str = "root"
    deploy_host_attr: str = "target.config.networking.fqdnOrHostName"
    deploy_user_attr: str = ""


@dataclass
class Nix:
    default_build_host: str = "localhost"  # Default [user@]host to run Nix builds on.


def _overlay(section: Any, table: dict[str, Any], name: str) -> None:
    """Copy ``kebab-case`` keys from a TOML table onto a section dataclass."""
    known = {f.name: f for f in fields(section)}
    for key, value in table.items():
        attr = key.replace("-", "_")
        if attr not in known:
            logger.warning("Ignoring unknown config key [%s] %s", name, key)
            continue
        expected = type(getattr(section, attr))
        if not isinstance(value, expected):
            raise ConfigError(
                f"[{name}] {key} must be {expected.__name__}, got {type(value).__name__}"
            )
        setattr(section, attr, value)


@dataclass
class Config:
    """Application configuration.

    Aggregates environment settings and the config file sections.
    """

    settings: Settings = field(default_factory=Settings)
    general: General = field(default_factory=General)
    commands: Commands = field(default_factory=Commands)
    hosts: Hosts = field(default_factory=Hosts)
    nix: Nix = field(default_factory=Nix)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment and the config file it names.

        Returns:
            Configured instance with file values overlaid on defaults
        """
        settings = Settings.from_env()
        return cls.load(settings.config_path, settings.config_required, settings=settings)

    @classmethod
    def load(
        cls,
        path: Path | str,
        must_exist: bool = False,
        settings: Settings | None = None,
    ) -> "Config":
        """Load and parse a config file, overlaying default values.

        Args:
            path: TOML file to read
            must_exist: Raise instead of using defaults when the file is missing
            settings: Environment settings to attach (default: built-in defaults)

        Returns:
            Loaded configuration

        Raises:
            FileNotFoundError: If the file is missing and must_exist is set
            ConfigError: If the file is not valid TOML or has bad values
        """
        conf = cls(settings=settings or Settings())
        path = Path(path)

        try:
            content = path.read_bytes()
        except FileNotFoundError:
            if must_exist:
                raise
            logger.warning("Config file not found, using defaults (path=%s)", path)
            return conf

        try:
            data = tomllib.loads(content.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        for name in ("general", "commands", "hosts", "nix"):
            table = data.get(name, {})
            if not isinstance(table, dict):
                raise ConfigError(f"[{name}] must be a table")
            _overlay(getattr(conf, name), table, name)

        logger.debug("Loaded config (path=%s)", path)
        return conf

    # Delegate to settings for convenience
    @property
    def flake_path(self) -> Path:
        """Directory containing the fleet's flake.nix."""
        return self.settings.flake_path

    @property
    def nix_workers(self) -> int:
        """Maximum concurrent nix evaluations."""
        return self.settings.nix_workers

    @property
    def nix_timeout(self) -> float:
        """Seconds to wait for a free nix worker."""
        return self.settings.nix_timeout

    @property
    def transport(self) -> str:
        """Transport type (http or stdio)."""
        return self.settings.transport

    @property
    def http_host(self) -> str:
        """HTTP server bind address."""
        return self.settings.http_host

    @property
    def http_port(self) -> int:
        """HTTP server port."""
        return self.settings.http_port
