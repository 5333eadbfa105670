"""Structured logging helpers for httpmock."""

from __future__ import annotations

import logging
import sys
from io import StringIO
from typing import Any

import structlog
from rich.console import Console
from rich.text import Text

from .output_config import LogFormat

LOGGER_NAME = "httpmock"

# Keys rendered by the console renderer itself or carrying multi-line payloads.
_SKIPPED_KEYS = ("color_message", "stack", "exception")


class RichConsoleRenderer:
    """structlog renderer that colours mock server events with Rich."""

    def __init__(self, width: int = 200) -> None:
        self.width = width
        self.level_styles = {
            "debug": "dim cyan",
            "info": "cyan",
            "warning": "yellow",
            "error": "bold red",
            "critical": "bold white on red",
        }

    def __call__(self, logger: Any, name: str, event_dict: dict[str, Any]) -> str:
        timestamp = event_dict.pop("timestamp", "")
        level = event_dict.pop("level", "info")
        event = event_dict.pop("event", "")

        text = Text()
        text.append(timestamp, style="dim white")
        text.append(" ")
        text.append(f"[{level:<8}]", style=self.level_styles.get(level, "white"))
        text.append(" ")
        text.append(event, style="bold white")

        # Align key-value pairs after the event name
        padding = max(0, 28 - len(event))
        if padding > 0 and event_dict:
            text.append(" " * padding)

        items = [(k, v) for k, v in sorted(event_dict.items()) if k not in _SKIPPED_KEYS]
        for i, (key, value) in enumerate(items):
            text.append(f"{key}=", style="dim white")
            text.append(str(value), style="bright_cyan")
            if i < len(items) - 1:
                text.append(" ")

        buffer = StringIO()
        console = Console(file=buffer, force_terminal=True, width=self.width, legacy_windows=False)
        console.print(text, end="")
        return buffer.getvalue()


def build_processors(log_format: LogFormat) -> list[Any]:
    """Return the structlog processor chain for ``log_format``."""

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.format_exc_info,
    ]

    if log_format == "console":
        processors.append(RichConsoleRenderer())
    elif log_format == "plain":
        # No colours, for CI and captured output
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:  # json
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(log_level: str, log_format: LogFormat = "console") -> structlog.stdlib.BoundLogger:
    """Configure structlog for mock server events and return the httpmock logger."""

    normalized_level = getattr(logging, log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=normalized_level,
        stream=sys.stderr,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(normalized_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(LOGGER_NAME)
