"""Expectations registered on a mock server and the options that configure them."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import SplitResult, urlsplit

from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import InvalidURLError, SerializationError


@dataclass
class Expectation:
    """One anticipated request and the canned response returned for it."""

    url: SplitResult
    method: str = ""
    request_body: str = ""
    status: int = 0
    response_body: str = ""
    optional: bool = False
    called: bool = False

    def matches(self, url: SplitResult) -> bool:
        return not self.called and self.url == url

    @property
    def display_url(self) -> str:
        return self.url.geturl()


Option = Callable[[Expectation], None]


def parse_url(raw_url: str) -> SplitResult:
    """Split ``raw_url`` into its components, rejecting malformed input."""

    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw_url):
        raise InvalidURLError(f"parse {raw_url!r}: invalid control character in URL")
    if raw_url.startswith(":"):
        raise InvalidURLError(f"parse {raw_url!r}: missing protocol scheme")
    try:
        parts = urlsplit(raw_url)
        # Accessing port validates it
        parts.port
    except ValueError as exc:
        raise InvalidURLError(f"parse {raw_url!r}: {exc}") from exc
    _check_escapes(raw_url)
    return parts


def _check_escapes(raw_url: str) -> None:
    hexdigits = "0123456789abcdefABCDEF"
    index = raw_url.find("%")
    while index != -1:
        escape = raw_url[index + 1 : index + 3]
        if len(escape) < 2 or escape[0] not in hexdigits or escape[1] not in hexdigits:
            raise InvalidURLError(f"parse {raw_url!r}: invalid URL escape {raw_url[index:index + 3]!r}")
        index = raw_url.find("%", index + 3)


def encode_json(value: Any) -> str:
    """Serialize ``value`` to compact JSON with sorted keys.

    Pydantic models, dataclasses and datetimes are converted at any depth
    first. Non-ASCII text is written as UTF-8, not escaped. Anything that
    cannot be encoded raises :class:`SerializationError`.
    """
    try:
        plain = to_jsonable_python(value)
        return json.dumps(plain, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(f"cannot encode {type(value).__name__} as JSON: {exc}") from exc


def method(verb: str) -> Option:
    """Require the request to use ``verb`` (compared case-insensitively)."""

    def apply(e: Expectation) -> None:
        e.method = verb

    return apply


def status(code: int) -> Option:
    """Respond with ``code`` instead of the default 200."""

    def apply(e: Expectation) -> None:
        e.status = code

    return apply


def req_json(value: Any) -> Option:
    """Require the request body to equal ``value`` encoded as JSON."""

    body = encode_json(value)

    def apply(e: Expectation) -> None:
        e.request_body = body

    return apply


def resp_json(value: Any) -> Option:
    """Respond with ``value`` encoded as JSON."""

    body = encode_json(value)

    def apply(e: Expectation) -> None:
        e.response_body = body

    return apply


def optional() -> Option:
    """Do not fail ``finish()`` if the expectation is never called."""

    def apply(e: Expectation) -> None:
        e.optional = True

    return apply
