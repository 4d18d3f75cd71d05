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
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "magenta": "\033[35m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Longest matching prefix wins
COMPONENT_COLORS = {
    "fleet_mcp.server": COLORS["bright_cyan"],
    "fleet_mcp.services.dispatcher": COLORS["bright_magenta"],
    "fleet_mcp.services.session": COLORS["magenta"],
    "fleet_mcp.services.store": COLORS["bright_blue"],
    "fleet_mcp.tools": COLORS["cyan"],
    "fleet_mcp.middleware": COLORS["yellow"],
    "fleet_mcp.config": COLORS["green"],
    "default": COLORS["white"],
}

_ADDRESS_PATTERN = re.compile(r"([\w.\-]+@[\w.\-]+:\d+)")
_DURATION_PATTERN = re.compile(r"(\d+\.?\d*ms)")
_TALLY_PATTERN = re.compile(r"(\d+/\d+ host\(s\))")


class ColorfulFormatter(logging.Formatter):
    """Colorful log formatter with component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        matches = [
            prefix
            for prefix in COMPONENT_COLORS
            if prefix != "default" and name.startswith(prefix)
        ]
        if not matches:
            return COMPONENT_COLORS["default"]
        return COMPONENT_COLORS[max(matches, key=len)]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        return f"{dt:%H:%M:%S}.{int(record.msecs):03d} {dt:%m/%d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix("fleet_mcp.")
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<22}", color)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as ``time | level | component | message``."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line

    def _highlight_message(self, message: str) -> str:
        """Highlight addresses, durations and host tallies."""
        if not self.use_colors:
            return message

        message = _ADDRESS_PATTERN.sub(
            f"{COLORS['bright_magenta']}\\1{COLORS['reset']}", message
        )
        message = _DURATION_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        message = _TALLY_PATTERN.sub(f"{COLORS['cyan']}\\1{COLORS['reset']}", message)
        return message


class MCPRequestFormatter(ColorfulFormatter):
    """Formatter that prefixes lifecycle events with a visual marker."""

    MARKERS = (
        (("starting", "ready"), "bright_green", ">>>"),
        (("shutting down", "shutdown"), "bright_red", "<<<"),
        (("error", "failed"), "bright_red", "!! "),
        (("warning", "slow", "disabled"), "bright_yellow", "!  "),
        (("completed", "succeeded"), "bright_green", "OK "),
        (("opening", "connecting"), "bright_cyan", "+  "),
        (("closing", "removing"), "bright_yellow", "-  "),
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format with a marker derived from the message text."""
        base = super().format(record)
        if not self.use_colors:
            return base

        message = record.getMessage().lower()
        for keywords, color, marker in self.MARKERS:
            if any(keyword in message for keyword in keywords):
                return f"{COLORS[color]}{marker}{COLORS['reset']} {base}"
        return f"    {base}"
