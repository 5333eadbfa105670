from __future__ import annotations

import pytest
import structlog

from httpmock.logging_utils import RichConsoleRenderer, build_processors
from httpmock.output_config import get_log_format, get_log_level, overwrite_fixtures
from httpmock.settings import MockSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("HTTPMOCK_LOG_FORMAT", "HTTPMOCK_LOG_LEVEL", "HTTPMOCK_CONFIGURE_LOGGING", "OVERWRITE"):
        monkeypatch.delenv(name, raising=False)


def test_log_format_priority(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_log_format() == "console"

    monkeypatch.setenv("HTTPMOCK_LOG_FORMAT", "JSON")
    assert get_log_format() == "json"
    assert get_log_format("plain") == "plain"

    monkeypatch.setenv("HTTPMOCK_LOG_FORMAT", "rich")
    assert get_log_format() == "console"

    assert get_log_format("auto") == "console"

    monkeypatch.setenv("HTTPMOCK_LOG_FORMAT", "bogus")
    assert get_log_format() == "console"
    assert get_log_format("bogus") == "console"


def test_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_log_level() == "WARNING"
    monkeypatch.setenv("HTTPMOCK_LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"
    assert get_log_level("info") == "INFO"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("1", True),
        ("t", True),
        ("TRUE", True),
        ("Yes", True),
        ("on", True),
        ("0", False),
        ("", False),
        ("y", False),
        (" 1", False),
        ("true\n", False),
    ],
)
def test_overwrite_flag(monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
    monkeypatch.setenv("OVERWRITE", value)
    assert overwrite_fixtures() is expected


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTPMOCK_LOG_FORMAT", "json")
    monkeypatch.setenv("HTTPMOCK_LOG_LEVEL", "info")
    monkeypatch.setenv("HTTPMOCK_CONFIGURE_LOGGING", "1")

    settings = MockSettings.from_env(host="localhost")

    assert settings == MockSettings(host="localhost", log_level="INFO", log_format="json", configure_logging=True)


def test_settings_leave_logging_alone_by_default() -> None:
    assert MockSettings.from_env().configure_logging is False


@pytest.mark.parametrize(
    "log_format,renderer",
    [
        ("console", RichConsoleRenderer),
        ("plain", structlog.dev.ConsoleRenderer),
        ("json", structlog.processors.JSONRenderer),
    ],
)
def test_processors_end_with_renderer(log_format: str, renderer: type) -> None:
    assert isinstance(build_processors(log_format)[-1], renderer)


def test_rich_renderer_includes_event_and_fields() -> None:
    rendered = RichConsoleRenderer()(
        None,
        "info",
        {"timestamp": "2024-01-01T00:00:00Z", "level": "info", "event": "request_served", "status": 200},
    )

    assert "request_served" in rendered
    assert "status=" in rendered
    assert "200" in rendered
