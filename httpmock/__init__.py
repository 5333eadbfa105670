"""Simple programmable mock HTTP servers for tests."""

from .assertions import equal, equal_fixture
from .client import ClientResponse, MockClient
from .errors import FatalFailure, HttpMockError, InvalidURLError, SerializationError
from .expectations import Expectation, Option, method, optional, req_json, resp_json, status
from .reporting import Failure, RecordingReporter, Reporter
from .server import MockServer, create_server

__all__ = [
    # Server
    "MockServer",
    "create_server",
    "MockClient",
    "ClientResponse",
    # Expectations
    "Expectation",
    "Option",
    "method",
    "status",
    "req_json",
    "resp_json",
    "optional",
    # Reporting
    "Reporter",
    "RecordingReporter",
    "Failure",
    "equal",
    "equal_fixture",
    # Errors
    "HttpMockError",
    "InvalidURLError",
    "SerializationError",
    "FatalFailure",
]

__version__ = "1.0.0"
