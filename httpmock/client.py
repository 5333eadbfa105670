"""HTTP client bound to a mock server's base URL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import json
from urllib import error, request

DEFAULT_TIMEOUT = 5.0


@dataclass
class ClientResponse:
    """Status, headers and raw body of a response from the mock server."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


class MockClient:
    """Issues requests against a base URL and never raises on 4xx/5xx statuses."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # No proxies: the mock listens on a local port only
        self._opener = request.build_opener(request.ProxyHandler({}))

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def request(
        self,
        method: str,
        path: str,
        body: bytes | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> ClientResponse:
        data = body.encode("utf-8") if isinstance(body, str) else body
        req = request.Request(self.url(path), data=data, headers=headers or {}, method=method)
        try:
            with self._opener.open(req, timeout=self.timeout) as response:
                return ClientResponse(
                    status=response.getcode(),
                    body=response.read(),
                    headers=dict(response.headers.items()),
                )
        except error.HTTPError as exc:
            with exc:
                return ClientResponse(status=exc.code, body=exc.read(), headers=dict(exc.headers.items()))

    def get(self, path: str, headers: dict[str, str] | None = None) -> ClientResponse:
        return self.request("GET", path, headers=headers)

    def post(self, path: str, body: bytes | str | None = None, headers: dict[str, str] | None = None) -> ClientResponse:
        return self.request("POST", path, body=body, headers=headers)

    def post_json(self, path: str, payload: Any) -> ClientResponse:
        body = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        return self.post(path, body, headers={"Content-Type": "application/json"})

    def put(self, path: str, body: bytes | str | None = None, headers: dict[str, str] | None = None) -> ClientResponse:
        return self.request("PUT", path, body=body, headers=headers)

    def delete(self, path: str, headers: dict[str, str] | None = None) -> ClientResponse:
        return self.request("DELETE", path, headers=headers)
