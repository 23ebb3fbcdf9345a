"""Colorful console logging formatter."""

import logging
import re
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

# Log level colors
LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "labcoat.server": COLORS["bright_cyan"],
    "labcoat.runner": COLORS["bright_magenta"],
    "labcoat.services.pool": COLORS["bright_magenta"],
    "labcoat.services": COLORS["bright_blue"],
    "labcoat.tools": COLORS["bright_blue"],
    "labcoat.resources": COLORS["cyan"],
    "labcoat.middleware": COLORS["yellow"],
    "labcoat.config": COLORS["green"],
    "default": COLORS["white"],
}

PREFIX = "labcoat."

URI_PATTERN = re.compile(r"(\w+://[^\s)]+)")
MS_PATTERN = re.compile(r"(\d+\.?\d*ms)")
STATE_PATTERN = re.compile(r"\b(Done|Failed|Running)\b")


class ColorfulFormatter(logging.Formatter):
    """Colorful log formatter with local timestamps and component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        """Get color for a logger name; the longest matching prefix wins."""
        best = ""
        for prefix in COMPONENT_COLORS:
            if prefix != "default" and name.startswith(prefix) and len(prefix) > len(best):
                best = prefix
        return COMPONENT_COLORS[best] if best else COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        return f"{dt:%H:%M:%S}.{int(record.msecs):03d} {dt:%m/%d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(PREFIX):
            name = name[len(PREFIX) :]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as ``time | level | component | message``."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    def _highlight_message(self, message: str) -> str:
        """Highlight URIs, durations and runner states in log messages."""
        if not self.use_colors:
            return message

        if "://" in message:
            message = URI_PATTERN.sub(f"{COLORS['bright_blue']}\\1{COLORS['reset']}", message)

        if "ms" in message:
            message = MS_PATTERN.sub(f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message)

        return STATE_PATTERN.sub(
            lambda m: self._colorize(
                m.group(1),
                COLORS["bright_red"] if m.group(1) == "Failed" else COLORS["bright_cyan"],
            ),
            message,
        )
