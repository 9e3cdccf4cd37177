"""Abstract encoder and decoder contracts.

Implementations are looked up per operation by config key (falling back to
the interface name) and called by :class:`~declarest.handler.MethodHandler`:

- :class:`BodyEncoder` -- writes the body argument into the request template.
- :class:`FormEncoder` -- writes the collected form parameters.
- :class:`Decoder` -- turns a 2xx response body into the declared type.
- :class:`ErrorDecoder` -- turns any other response into an exception.

Encoders run on the private template copy of a single attempt, so a retried
call encodes again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from declarest.models import Response, ResponseBody
from declarest.template import RequestTemplate


class BodyEncoder(ABC):
    """Encodes the single unmarked argument of an operation.

    Example::

        @post
        @path("/")
        def create(self, user: User) -> None: ...
    """

    @abstractmethod
    def encode(self, value: Any, template: RequestTemplate) -> None:
        """Write *value* into *template*, typically via ``set_body`` and ``header``."""


class FormEncoder(ABC):
    """Encodes the parameters marked with :class:`~declarest.markers.FormParam`.

    Example::

        @post
        @path("/")
        def login(
            self,
            username: Annotated[str, FormParam()],
            password: Annotated[str, FormParam()],
        ) -> Session: ...
    """

    @abstractmethod
    def encode_form(self, form_params: Mapping[str, Any], template: RequestTemplate) -> None:
        """Write *form_params* (non-``None`` values only) into *template*."""


class Decoder(ABC):
    """Decodes a successful response body into the operation's return type."""

    @abstractmethod
    def decode(self, config_key: str, body: ResponseBody, return_type: Any) -> Any:
        """Read *body* and return a value of *return_type*.

        Raises:
            DecodeError: If the body cannot be decoded.
        """


class ErrorDecoder(ABC):
    """Translates a non-2xx response into the exception raised to the caller."""

    @abstractmethod
    def decode(self, config_key: str, response: Response) -> Exception:
        """Return (not raise) the exception for *response*."""
