"""Pydantic settings model shared by the pytest plugin and ad-hoc servers."""

from __future__ import annotations

from pydantic import BaseModel

from .output_config import LogFormat, configure_logging_requested, get_log_format, get_log_level


class MockSettings(BaseModel):
    """Runtime options for mock servers created by the pytest plugin.

    ``configure_logging`` is off by default: the plugin leaves the process's
    logging and structlog setup alone unless it is asked to install its own.
    """

    host: str = "127.0.0.1"
    log_level: str = "WARNING"
    log_format: LogFormat = "console"
    configure_logging: bool = False

    @classmethod
    def from_env(cls, **overrides: object) -> "MockSettings":
        """Build settings from the ``HTTPMOCK_*`` environment variables."""

        values: dict[str, object] = {
            "log_level": get_log_level(),
            "log_format": get_log_format(),
            "configure_logging": configure_logging_requested(),
        }
        values.update(overrides)
        return cls.model_validate(values)
