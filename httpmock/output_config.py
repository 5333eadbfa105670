"""Environment driven configuration for httpmock logging and fixtures."""

import os
from typing import Literal


LogFormat = Literal["json", "console", "plain"]

LOG_FORMAT_ENV = "HTTPMOCK_LOG_FORMAT"
LOG_LEVEL_ENV = "HTTPMOCK_LOG_LEVEL"
CONFIGURE_LOGGING_ENV = "HTTPMOCK_CONFIGURE_LOGGING"
OVERWRITE_ENV = "OVERWRITE"

DEFAULT_LOG_LEVEL = "WARNING"

_FORMAT_ALIASES: dict[str, LogFormat] = {
    "json": "json",
    "plain": "plain",
    "console": "console",
    "auto": "console",
    "rich": "console",
}
_TRUE_VALUES = {"1", "t", "true", "yes", "on"}


def get_log_format(override: str | None = None) -> LogFormat:
    """Resolve the log format from ``override``, then the environment, else console."""
    for candidate in (override, os.environ.get(LOG_FORMAT_ENV)):
        if candidate and candidate.lower() in _FORMAT_ALIASES:
            return _FORMAT_ALIASES[candidate.lower()]
    return "console"


def get_log_level(cli_override: str | None = None) -> str:
    """Return the log level name, preferring ``cli_override`` over the environment."""
    value = cli_override or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL
    return value.upper()


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in _TRUE_VALUES


def overwrite_fixtures() -> bool:
    """True when fixture files should be rewritten from the values under test."""
    return env_flag(OVERWRITE_ENV)


def configure_logging_requested() -> bool:
    """True when the pytest plugin may take over global logging configuration."""
    return env_flag(CONFIGURE_LOGGING_ENV)
