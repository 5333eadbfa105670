"""Failure reporting for mock servers and assertions.

Everything in httpmock reports through a :class:`Reporter`: ``error`` records a
mismatch and lets the caller carry on, ``fatal`` records a failure and aborts
the caller by raising :class:`~httpmock.errors.FatalFailure`. The core never
imports a test framework; :mod:`httpmock.pytest_plugin` bridges a
:class:`RecordingReporter` to pytest.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import NoReturn, Protocol

import structlog

from .errors import FatalFailure

LOGGER = structlog.get_logger("httpmock")


class Reporter(Protocol):
    """Capability used to report test failures."""

    def error(self, message: str) -> None:
        """Record a non-fatal failure."""

    def fatal(self, message: str) -> NoReturn:
        """Record a failure and abort the caller."""

    def log(self, message: str) -> None:
        """Record an informational note."""


@dataclass(frozen=True)
class Failure:
    message: str
    fatal: bool = False


class RecordingReporter:
    """Thread-safe reporter that accumulates failures for later inspection.

    Mock request handlers run on the server's worker threads, so every report
    is recorded under a lock and nothing is raised into the test thread until
    :meth:`raise_for_failures` is called.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._failures: list[Failure] = []
        self._notes: list[str] = []
        self._logger = LOGGER.bind(reporter=name) if name else LOGGER

    def error(self, message: str) -> None:
        self._record(Failure(message))

    def fatal(self, message: str) -> NoReturn:
        self._record(Failure(message, fatal=True))
        raise FatalFailure(message)

    def log(self, message: str) -> None:
        with self._lock:
            self._notes.append(message)
        self._logger.info("note", message=message)

    @property
    def failures(self) -> list[Failure]:
        with self._lock:
            return list(self._failures)

    @property
    def errors(self) -> list[str]:
        return [f.message for f in self.failures if not f.fatal]

    @property
    def fatals(self) -> list[str]:
        return [f.message for f in self.failures if f.fatal]

    @property
    def notes(self) -> list[str]:
        with self._lock:
            return list(self._notes)

    @property
    def failed(self) -> bool:
        with self._lock:
            return bool(self._failures)

    def clear(self) -> None:
        with self._lock:
            self._failures.clear()
            self._notes.clear()

    def raise_for_failures(self) -> None:
        """Raise ``AssertionError`` listing every recorded failure, if any."""

        failures = self.failures
        if not failures:
            return
        lines = [f"{len(failures)} failure(s) reported:"]
        for failure in failures:
            prefix = "FATAL: " if failure.fatal else ""
            lines.append(f"{prefix}{failure.message}")
        raise AssertionError("\n".join(lines))

    def _record(self, failure: Failure) -> None:
        with self._lock:
            self._failures.append(failure)
        self._logger.error("failure_reported", message=failure.message, fatal=failure.fatal)
