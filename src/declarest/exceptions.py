"""Exception hierarchy for declarest.

All exceptions inherit from :class:`DeclarestError`. The subclasses map
one-to-one onto the failure classes of the request pipeline, and only
:class:`TransportError` is ever handed to a
:class:`~declarest.retry.Retryer`.

Subclass hierarchy::

    DeclarestError
    +-- ConfigurationError   (parse / setup time, fatal)
    +-- ArgumentError        (bad call-time argument)
    +-- TransportError       (I/O failure, retryable)
    +-- DecodeError          (response body could not be decoded)
    +-- ApplicationError     (non-2xx response translated by an ErrorDecoder)
"""

from __future__ import annotations

from typing import Optional


class DeclarestError(Exception):
    """Base exception for all declarest errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(DeclarestError):
    """Raised when an interface description or client configuration is invalid.

    Covers missing or duplicate HTTP-verb markers, conflicting body and form
    parameters, duplicate body parameters, and missing encoder/decoder
    bindings. Always raised before any request is sent.
    """


class ArgumentError(DeclarestError):
    """Raised when a required URI-override or body argument is ``None``."""


class TransportError(DeclarestError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    This is the only failure class routed through the retry policy.
    """


class DecodeError(DeclarestError):
    """Raised when a decoder cannot turn a response body into the declared type."""


class ApplicationError(DeclarestError):
    """A non-2xx response, translated by an :class:`~declarest.codec.ErrorDecoder`.

    Args:
        message: Human-readable error description.
        status: HTTP status code.
        reason: HTTP reason phrase, if the server sent one.
        headers: Response headers.
        body: The start of the response body, if any.
    """

    def __init__(
        self,
        message: str,
        status: int,
        reason: Optional[str] = None,
        headers: Optional[dict[str, tuple[str, ...]]] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.headers = headers or {}
        self.body = body
