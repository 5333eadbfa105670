"""Pytest fixtures for httpmock, registered through the ``pytest11`` entry point."""

from __future__ import annotations

from typing import Iterator

import pytest

from .logging_utils import configure_logging
from .reporting import RecordingReporter
from .server import MockServer
from .settings import MockSettings


@pytest.fixture(scope="session")
def httpmock_settings() -> MockSettings:
    settings = MockSettings.from_env()
    if settings.configure_logging:
        configure_logging(settings.log_level, settings.log_format)
    return settings


@pytest.fixture
def httpmock_reporter(
    request: pytest.FixtureRequest,
    httpmock_settings: MockSettings,
) -> Iterator[RecordingReporter]:
    """Reporter whose recorded failures fail the test at teardown."""

    reporter = RecordingReporter(name=request.node.nodeid)
    yield reporter
    if reporter.failed:
        messages = [("FATAL: " if f.fatal else "") + f.message for f in reporter.failures]
        pytest.fail("\n".join(messages), pytrace=False)


@pytest.fixture
def httpmock_server(
    httpmock_settings: MockSettings,
    httpmock_reporter: RecordingReporter,
) -> Iterator[MockServer]:
    """A running mock server. Call ``finish()`` yourself before the test ends."""

    with MockServer(httpmock_reporter, host=httpmock_settings.host) as server:
        yield server
