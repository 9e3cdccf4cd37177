"""Tests for declarest.wire and declarest.log."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from rich.logging import RichHandler

from declarest.log import LOGGER_NAME, configure_logging
from declarest.models import Request, Response, ResponseBody, Target
from declarest.wire import LoggingWire, NoOpWire


class Api:
    pass


TARGET = Target(interface=Api, url="https://api.example.com", name="api")


@pytest.fixture(autouse=True)
def _reset_declarest_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestLoggingWire:
    def test_logs_request_and_response(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="declarest.wire")
        wire = LoggingWire()
        wire.wire_request(
            TARGET,
            Request(method="GET", url="https://api.example.com/x", headers={"Accept": ("*/*",)}),
        )
        response = Response(status=200, reason="OK", headers={"X-Id": ("1",)})
        assert wire.wire_response(TARGET, response) is response

        text = caplog.text
        assert "[api] ---> GET https://api.example.com/x HTTP/1.1" in text
        assert "Accept: */*" in text
        assert "[api] <--- HTTP 200 OK" in text
        assert "[api] X-Id: 1" in text

    def test_logs_body_and_keeps_it_readable(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="declarest.wire")
        original = ResponseBody.from_text('{"id": 1}')
        response = Response(status=200, body=original)

        logged = LoggingWire(log_bodies=True).wire_response(TARGET, response)

        assert '{"id": 1}' in caplog.text
        assert original.consumed
        assert logged.body is not None
        assert logged.body.text() == '{"id": 1}'
        assert logged.length == 9

    def test_silent_unless_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="declarest.wire")
        body = ResponseBody.from_text("x")
        response = Response(status=200, body=body)

        assert LoggingWire(log_bodies=True).wire_response(TARGET, response) is response
        assert not body.consumed
        assert caplog.text == ""

    def test_noop(self) -> None:
        response = Response(status=204)
        wire = NoOpWire()
        wire.wire_request(TARGET, Request(method="GET", url="https://api.example.com/"))
        assert wire.wire_response(TARGET, response) is response


class TestConfigureLogging:
    def test_default_level(self) -> None:
        logger = configure_logging()
        assert logger.name == "declarest"
        assert logger.level == logging.WARNING
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_verbose(self) -> None:
        assert configure_logging(verbose=True).level == logging.DEBUG

    def test_quiet_wins(self) -> None:
        assert configure_logging(verbose=True, quiet=True).level == logging.ERROR

    def test_idempotent(self) -> None:
        configure_logging()
        logger = configure_logging()
        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1
