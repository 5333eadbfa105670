"""Exception types raised by httpmock."""

from __future__ import annotations


class HttpMockError(Exception):
    """Base class for every error raised by httpmock."""


class InvalidURLError(HttpMockError, ValueError):
    """A URL passed to ``MockServer.expect`` could not be parsed."""


class SerializationError(HttpMockError, TypeError):
    """A canned request or response body could not be encoded as JSON."""


class FatalFailure(HttpMockError):
    """Raised by a reporter after recording a fatal failure.

    The failure is already recorded when this is raised; callers that catch it
    must not report it again.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
