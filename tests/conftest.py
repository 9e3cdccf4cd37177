"""Shared test fixtures for declarest.

Provides a scripted in-memory transport, response builders, and config
isolation so that no test reads the real user configuration or touches the
network. These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Optional, Union

import pytest

from declarest.models import Options, Request, Response, ResponseBody
from declarest.transport import Transport


# ---------------------------------------------------------------------------
# Scripted transport
# ---------------------------------------------------------------------------


class FakeTransport(Transport):
    """Returns (or raises) scripted outcomes in order and records every call."""

    def __init__(self, *outcomes: Union[Response, Exception]) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[Request] = []
        self.options: list[Options] = []

    def execute(self, request: Request, options: Options) -> Response:
        self.requests.append(request)
        self.options.append(options)
        if not self.outcomes:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_response(
    status: int = 200,
    body: Optional[str] = "",
    headers: Optional[dict[str, tuple[str, ...]]] = None,
    reason: Optional[str] = None,
) -> Response:
    """Build a :class:`Response` with an unread text body (``None`` for no body)."""
    return Response(
        status=status,
        reason=reason,
        headers=headers or {},
        body=ResponseBody.from_text(body) if body is not None else None,
        length=len(body.encode("utf-8")) if body is not None else None,
    )


@pytest.fixture
def fake_transport() -> Callable[..., FakeTransport]:
    """Factory for :class:`FakeTransport` instances."""
    return FakeTransport


@pytest.fixture
def response() -> Callable[..., Response]:
    """Factory for scripted responses, see :func:`make_response`."""
    return make_response


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME and HOME at tmp_path and clear DECLAREST_* variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for var in [
        "DECLAREST_CONFIG",
        "DECLAREST_CONNECT_TIMEOUT",
        "DECLAREST_READ_TIMEOUT",
        "DECLAREST_MAX_ATTEMPTS",
        "DECLAREST_LOG_WIRE",
    ]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path

