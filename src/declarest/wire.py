"""Wire logging of outgoing requests and incoming responses.

:class:`MethodHandler` hands every request and response to a :class:`Wire`
around the transport call. :class:`NoOpWire` is the default;
:class:`LoggingWire` writes to the ``declarest.wire`` logger at DEBUG level.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from declarest.models import Request, Response, ResponseBody, Target

wire_logger = logging.getLogger("declarest.wire")


class Wire(ABC):
    """Observes the requests and responses of a target."""

    @abstractmethod
    def wire_request(self, target: Target, request: Request) -> None: ...

    @abstractmethod
    def wire_response(self, target: Target, response: Response) -> Response:
        """Observe *response*; return it, or a replacement if the body was read."""


class NoOpWire(Wire):
    def wire_request(self, target: Target, request: Request) -> None:
        pass

    def wire_response(self, target: Target, response: Response) -> Response:
        return response


class LoggingWire(Wire):
    """Logs request lines, headers and response status lines.

    Args:
        log_bodies: Also log response bodies. The body is buffered in memory
            so that it can still be decoded afterwards.
    """

    def __init__(self, log_bodies: bool = False) -> None:
        self.log_bodies = log_bodies

    def wire_request(self, target: Target, request: Request) -> None:
        if not wire_logger.isEnabledFor(logging.DEBUG):
            return
        wire_logger.debug("[%s] ---> %s", target.name, str(request).replace("\n", "\n    "))

    def wire_response(self, target: Target, response: Response) -> Response:
        if not wire_logger.isEnabledFor(logging.DEBUG):
            return response
        wire_logger.debug(
            "[%s] <--- HTTP %s %s", target.name, response.status, response.reason or ""
        )
        for name, values in response.headers.items():
            for value in values:
                wire_logger.debug("[%s] %s: %s", target.name, name, value)
        if self.log_bodies and response.body is not None:
            encoding = response.body.encoding
            data = response.body.read()
            wire_logger.debug("[%s] %s", target.name, data.decode(encoding, errors="replace"))
            response = response.model_copy(
                update={"body": ResponseBody.from_bytes(data, encoding), "length": len(data)}
            )
        return response
