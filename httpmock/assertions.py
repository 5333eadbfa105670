"""Assorted helpers for asserting test invariants through a reporter."""

from __future__ import annotations

import difflib
from pathlib import Path
from pprint import pformat
from typing import Any, Callable

from .output_config import overwrite_fixtures
from .reporting import Reporter


def diff(want: Any, got: Any) -> str:
    """Return a unified diff of the two values, or ``""`` when they are equal."""

    if want == got:
        return ""
    lines = difflib.unified_diff(
        pformat(want).splitlines(),
        pformat(got).splitlines(),
        fromfile="want",
        tofile="got",
        lineterm="",
    )
    return "\n".join(lines)


def equal(
    reporter: Reporter,
    name: str,
    want: Any,
    got: Any,
    transform: Callable[[Any], Any] | None = None,
) -> bool:
    """Report a mismatch on ``reporter`` unless ``want`` and ``got`` are equal.

    When ``transform`` is given it is applied to both values before comparing,
    e.g. ``str.upper`` for case-insensitive checks. Returns True when equal.
    """
    if transform is not None:
        want, got = transform(want), transform(got)

    delta = diff(want, got)
    if delta:
        reporter.error(f"{name} mismatch (-want +got):\n{delta}")
        return False
    return True


def equal_fixture(reporter: Reporter, name: str, filename: str | Path, got: bytes) -> bool:
    """Compare ``got`` to the contents of ``filename``.

    If the ``OVERWRITE`` environment variable is true, ``got`` is written to
    the file first so the fixture can be regenerated.
    """
    path = Path(filename)

    if overwrite_fixtures():
        reporter.log(f"overwriting {path}")
        try:
            path.write_bytes(got)
        except OSError as exc:
            reporter.fatal(str(exc))

    try:
        want = path.read_bytes()
    except OSError as exc:
        reporter.fatal(str(exc))

    return equal(reporter, f"{name}/{filename}", want, got)
