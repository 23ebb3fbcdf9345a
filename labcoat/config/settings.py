"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/labcoat/config.toml``."""
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "labcoat" / "config.toml"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Fleet
    flake_path: Path = field(default_factory=Path.cwd)
    config_path: Path = field(default_factory=default_config_path)
    config_required: bool = field(default=False)

    # Nix introspection
    nix_workers: int = field(default=2)
    nix_timeout: float = field(default=30.0)
    hover_delay: float = field(default=0.5)

    # Presentation
    enable_ui: bool = field(default=False)

    # Transport
    transport: str = field(default="http")
    http_host: str = field(default="127.0.0.1")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)
    log_file: Path | None = field(default=None)
    log_payloads: bool = field(default=False)
    slow_threshold_ms: int = field(default=1000)
    include_traceback: bool = field(default=False)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from LABCOAT_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        config_path = os.getenv("LABCOAT_CONFIG")
        log_file = os.getenv("LABCOAT_LOG_FILE")

        return cls(
            flake_path=Path(os.getenv("LABCOAT_FLAKE_PATH") or Path.cwd()),
            config_path=Path(config_path) if config_path else default_config_path(),
            # An explicitly named config file must exist.
            config_required=config_path is not None,
            nix_workers=cls._get_int("LABCOAT_NIX_WORKERS", 2),
            nix_timeout=cls._get_float("LABCOAT_NIX_TIMEOUT", 30.0),
            hover_delay=cls._get_float("LABCOAT_HOVER_DELAY", 0.5),
            enable_ui=cls._get_bool("LABCOAT_ENABLE_UI", False),
            transport=cls._get_transport(),
            http_host=os.getenv("LABCOAT_HTTP_HOST", "127.0.0.1"),
            http_port=cls._get_int("LABCOAT_HTTP_PORT", 8000),
            log_level=os.getenv("LABCOAT_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("LABCOAT_LOG_COLORS", True),
            log_file=Path(log_file) if log_file else None,
            log_payloads=cls._get_bool("LABCOAT_LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("LABCOAT_SLOW_THRESHOLD_MS", 1000),
            include_traceback=cls._get_bool("LABCOAT_INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Get float from environment, falling back to default when invalid."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float for %s: %s, using default %g", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("http" or "stdio")
        """
        transport = os.getenv("LABCOAT_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"
