"""Programmable mock HTTP server for tests.

Register expectations with :meth:`MockServer.expect`, point the code under test
at :attr:`MockServer.url`, then call :meth:`MockServer.finish` to report every
expectation that was never requested::

    with MockServer(reporter) as server:
        server.expect("/widgets", method("GET"), resp_json({"id": 1}))
        client.fetch(server.url + "/widgets")
        server.finish()
"""

from __future__ import annotations

import socketserver
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import SplitResult, urlsplit

import structlog

from . import assertions
from .client import MockClient
from .errors import FatalFailure, InvalidURLError
from .expectations import Expectation, Option, parse_url
from .reporting import Reporter

LOGGER = structlog.get_logger("httpmock")


class ThreadedHTTPServer(socketserver.ThreadingMixIn, HTTPServer):
    daemon_threads = True
    request_queue_size = 64


class MockServer:
    """Serves canned responses for an ordered list of expectations.

    Each expectation is consumed by the first request whose URL equals it
    exactly. Mismatches are reported on ``reporter`` and never stop the server.
    All registration, request handling and verification happen under a single
    lock, so concurrent requests are served one at a time.
    """

    def __init__(self, reporter: Reporter, host: str = "127.0.0.1") -> None:
        self._reporter = reporter
        self._host = host
        self._lock = threading.Lock()
        self._expectations: list[Expectation] = []
        self._httpd: ThreadedHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._logger = LOGGER.bind(host=host)

    def start(self) -> None:
        if self._httpd is not None:
            return
        httpd = ThreadedHTTPServer((self._host, 0), self._build_handler())
        self._httpd = httpd
        self._thread = threading.Thread(target=httpd.serve_forever, name="httpmock", daemon=True)
        self._thread.start()
        self._logger = self._logger.bind(port=httpd.server_address[1])
        self._logger.info("server_started", url=self.url)

    def close(self) -> None:
        if not self._httpd:
            return
        self._logger.info("server_stopping")
        try:
            self._httpd.shutdown()
            self._httpd.server_close()
        finally:
            if self._thread:
                self._thread.join(timeout=2)
            self._httpd = None
            self._thread = None
        self._logger.info("server_stopped")

    def __enter__(self) -> "MockServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def url(self) -> str:
        """Base URL of the running server, e.g. ``http://127.0.0.1:54321``."""
        if self._httpd is None:
            raise RuntimeError("mock server is not running")
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    def client(self, timeout: float | None = None) -> MockClient:
        """Return an HTTP client whose paths resolve against :attr:`url`."""
        if timeout is None:
            return MockClient(self.url)
        return MockClient(self.url, timeout=timeout)

    def expect(self, raw_url: str, *options: Option) -> None:
        """Register an expectation for a request to ``raw_url``.

        ``raw_url`` is usually server-relative (``/widgets?page=2``) because
        that is how requests arrive. Options are applied in order, so a later
        option overrides an earlier one for the same field. An unparseable URL
        is a fatal failure.
        """
        try:
            url = parse_url(raw_url)
        except InvalidURLError as exc:
            self._reporter.fatal(str(exc))

        expectation = Expectation(url=url)
        for apply in options:
            apply(expectation)

        with self._lock:
            self._expectations.append(expectation)
        self._logger.debug(
            "expectation_registered",
            url=expectation.display_url,
            method=expectation.method or "*",
            status=expectation.status,
            optional=expectation.optional,
        )

    def finish(self) -> None:
        """Report every non-optional expectation that was never requested."""
        with self._lock:
            missing = [e for e in self._expectations if not e.optional and not e.called]
            total = len(self._expectations)
            for expectation in missing:
                self._logger.warning("expectation_missing", url=expectation.display_url)
                self._reporter.error(f"No request for {expectation.display_url!r}")
        self._logger.info("expectations_verified", total=total, missing=len(missing))

    def _dispatch(self, handler: "_Handler", url: SplitResult, body: bytes, *, head_only: bool) -> None:
        with self._lock:
            for expectation in self._expectations:
                if expectation.matches(url):
                    expectation.called = True
                    self._logger.info("request_matched", method=handler.command, url=url.geturl())
                    self._check_expectation(handler, expectation, body, head_only=head_only)
                    return

            self._logger.warning("request_unmatched", method=handler.command, url=url.geturl())
            self._reporter.error(f"Unexpected request for {url.geturl()!r}")
            try:
                handler.write_response(HTTPStatus.NOT_FOUND, b"", head_only=head_only)
            except OSError as exc:
                self._reporter.fatal(f"writing not found response for {url.geturl()!r}: {exc}")

    def _reject_malformed(self, handler: "_Handler", exc: ValueError) -> None:
        # The body framing is unknown, so the connection cannot be reused.
        handler.close_connection = True
        self._logger.warning("request_malformed", method=handler.command, url=handler.path, error=str(exc))
        self._reporter.error(f"Malformed request for {handler.path!r}: {exc}")
        try:
            handler.write_response(HTTPStatus.BAD_REQUEST, b"")
        except OSError as write_exc:
            self._reporter.fatal(f"writing bad request response for {handler.path!r}: {write_exc}")

    def _check_expectation(
        self,
        handler: "_Handler",
        expectation: Expectation,
        body: bytes,
        *,
        head_only: bool,
    ) -> None:
        if expectation.method:
            assertions.equal(self._reporter, "method", expectation.method, handler.command, str.upper)

        if expectation.request_body:
            received = body.decode("utf-8", errors="replace")
            assertions.equal(self._reporter, "request", expectation.request_body, received, str.strip)

        status = expectation.status or HTTPStatus.OK
        payload = expectation.response_body.encode("utf-8")
        try:
            handler.write_response(status, payload, head_only=head_only)
        except OSError as exc:
            self._reporter.fatal(f"writing response for {expectation.display_url!r}: {exc}")
        self._logger.info(
            "request_served",
            method=handler.command,
            url=expectation.display_url,
            status=int(status),
            status_explicit=bool(expectation.status),
            content_length=len(payload),
        )

    def _build_handler(self) -> type[BaseHTTPRequestHandler]:
        server = self

        class Handler(_Handler):
            def handle_request(self, *, head_only: bool = False) -> None:
                try:
                    try:
                        body = self.read_body()
                    except ValueError as exc:
                        server._reject_malformed(self, exc)
                        return
                    server._logger.debug(
                        "request_received",
                        method=self.command,
                        url=self.path,
                        content_length=len(body),
                    )
                    server._dispatch(self, urlsplit(self.path), body, head_only=head_only)
                except FatalFailure as exc:
                    # Already recorded on the reporter; drop the connection.
                    server._logger.error("handler_fatal", url=self.path, error=exc.message)
                    self.close_connection = True

            def log_message(self, format: str, *args: Any) -> None:  # pragma: no cover - avoid stderr
                server._logger.debug(
                    "http_trace",
                    client_ip=self.client_address[0],
                    message=format % args,
                )

        return Handler


class _Handler(BaseHTTPRequestHandler):
    """Request handler speaking HTTP/1.1 with keep-alive."""

    protocol_version = "HTTP/1.1"

    def handle_request(self, *, head_only: bool = False) -> None:
        raise NotImplementedError

    def do_GET(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler requirement)
        self.handle_request()

    def do_POST(self) -> None:  # noqa: N802
        self.handle_request()

    def do_PUT(self) -> None:  # noqa: N802
        self.handle_request()

    def do_DELETE(self) -> None:  # noqa: N802
        self.handle_request()

    def do_PATCH(self) -> None:  # noqa: N802
        self.handle_request()

    def do_HEAD(self) -> None:  # noqa: N802
        self.handle_request(head_only=True)

    def do_OPTIONS(self) -> None:  # noqa: N802
        self.handle_request()

    def __getattr__(self, name: str) -> Any:
        # Any other verb, including lower-case spellings of the ones above.
        if name.startswith("do_"):
            if name[3:].upper() == "HEAD":
                return self.do_HEAD
            return self.handle_request
        raise AttributeError(name)

    def read_body(self) -> bytes:
        """Read the whole request body so the connection can be reused."""
        if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
            return self._read_chunked()
        raw_length = self.headers.get("Content-Length", "") or "0"
        try:
            length = int(raw_length)
        except ValueError:
            raise ValueError(f"invalid Content-Length {raw_length!r}") from None
        if length < 0:
            raise ValueError(f"invalid Content-Length {raw_length!r}")
        if length == 0:
            return b""
        return self.rfile.read(length)

    def _read_chunked(self) -> bytes:
        chunks = []
        while True:
            size_line = self.rfile.readline()
            raw_size = size_line.split(b";", 1)[0].strip()
            try:
                size = int(raw_size, 16)
            except ValueError:
                raise ValueError(f"invalid chunk size {raw_size!r}") from None
            if size == 0:
                # Trailer section ends with an empty line
                while self.rfile.readline() not in (b"\r\n", b"\n", b""):
                    pass
                break
            chunks.append(self.rfile.read(size))
            self.rfile.readline()
        return b"".join(chunks)

    def write_response(self, status: int, body: bytes, *, head_only: bool = False) -> None:
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and not head_only:
            self.wfile.write(body)
        self.wfile.flush()


def create_server(reporter: Reporter, host: str = "127.0.0.1") -> MockServer:
    """Create and start a :class:`MockServer`."""
    server = MockServer(reporter, host=host)
    server.start()
    return server
