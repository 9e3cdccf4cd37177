"""Canonical Pydantic models shared across all declarest modules.

The models fall into two groups:

**Setup models** -- supplied by the caller once per client:
    :class:`Target`, :class:`Options`, and the configuration models
    :class:`RetryConfig` and :class:`ClientConfig`.

**Per-call models** -- produced once per invocation and discarded after use:
    :class:`Request`, :class:`Response` and the lazily-read
    :class:`ResponseBody` it carries.

Setup and per-call models are frozen Pydantic v2 models. The mutable
request builder lives in :mod:`declarest.template`, and per-operation
metadata in :mod:`declarest.metadata`.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from declarest.exceptions import DeclarestError

if TYPE_CHECKING:
    from declarest.template import RequestTemplate


class HTTPMethod(str, enum.Enum):
    """HTTP verbs understood by the stock verb markers."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


class Options(BaseModel):
    """Per-request transport settings, resolved per operation or per interface.

    Timeouts are in seconds.
    """

    model_config = ConfigDict(frozen=True)

    connect_timeout: float = Field(default=10.0, gt=0, description="Connect timeout in seconds")
    read_timeout: float = Field(default=60.0, gt=0, description="Read timeout in seconds")


class RetryConfig(BaseModel):
    """Settings of the default exponential back-off retry policy."""

    period: float = Field(default=0.1, ge=0, description="First delay in seconds")
    max_period: float = Field(default=1.0, ge=0, description="Upper bound of any delay in seconds")
    max_attempts: int = Field(default=5, ge=1, description="Total attempts including the first")


class ClientConfig(BaseModel):
    """Client defaults loaded by :func:`~declarest.config.load_config`.

    Stored as JSON, e.g.::

        {"options": {"connect_timeout": 5}, "retry": {"max_attempts": 3}}
    """

    options: Options = Field(default_factory=Options)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    log_wire: bool = Field(default=False, description="Log requests and responses at DEBUG")


class Target(BaseModel):
    """The interface a client implements and the base URL it talks to.

    Two clients are interchangeable iff their targets are equal.

    Example::

        Target(interface=GitHub, url="https://api.github.com")
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    interface: Any = Field(description="Annotated class or InterfaceDescriptor")
    url: str
    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name"):
            data = {**data, "name": data.get("url", "")}
        return data

    @property
    def interface_name(self) -> str:
        """Simple name of the interface, as used in config keys."""
        if isinstance(self.interface, type):
            return self.interface.__name__
        return self.interface.name

    def apply(self, template: RequestTemplate) -> Request:
        """Prefix the base URL onto *template* and return the finished request.

        A template whose URL already starts with ``http`` was given a full URI
        at call time and is left alone.
        """
        if not template.url.startswith("http"):
            template.insert(0, self.url)
        return template.request()

    def __hash__(self) -> int:
        return hash((self.interface_name, self.url, self.name))


Headers = Mapping[str, tuple[str, ...]]


def _read_only(headers: Headers) -> Headers:
    return MappingProxyType(dict(headers))


class Request(BaseModel):
    """A fully resolved HTTP request. Safe to replay.

    ``headers`` is a read-only mapping of header name to values.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: Headers = Field(default_factory=dict, validate_default=True)
    body: Optional[str] = None

    @field_validator("headers")
    @classmethod
    def _freeze_headers(cls, value: Headers) -> Headers:
        return _read_only(value)

    def __str__(self) -> str:
        lines = [f"{self.method} {self.url} HTTP/1.1"]
        for name, values in self.headers.items():
            for value in values:
                lines.append(f"{name}: {value}")
        if self.body is not None:
            lines.append("")
            lines.append(self.body)
        return "\n".join(lines)


class ResponseBody:
    """A response body that is read lazily and at most once.

    Wraps an iterator of byte chunks (typically straight from the transport)
    plus an optional ``close`` callable that releases the underlying
    connection.

    Args:
        chunks: Byte chunks making up the body.
        close: Called once when the body is closed.
        encoding: Charset used by :meth:`text`.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        close: Optional[Callable[[], None]] = None,
        encoding: str = "utf-8",
    ) -> None:
        self._chunks = iter(chunks)
        self._close = close
        self.encoding = encoding
        self.consumed = False
        self.closed = False

    @classmethod
    def from_bytes(cls, data: bytes, encoding: str = "utf-8") -> ResponseBody:
        return cls([data], encoding=encoding)

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> ResponseBody:
        return cls([text.encode(encoding)], encoding=encoding)

    def __iter__(self) -> Iterator[bytes]:
        self._mark_consumed()
        try:
            yield from self._chunks
        finally:
            self.close()

    def read(self) -> bytes:
        """Read the whole body. Raises if the body was already read."""
        return b"".join(self)

    def text(self) -> str:
        """Read the whole body and decode it with :attr:`encoding`."""
        return self.read().decode(self.encoding, errors="replace")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._close is not None:
            self._close()

    def _mark_consumed(self) -> None:
        if self.consumed:
            raise DeclarestError("Response body has already been read")
        self.consumed = True

    def __enter__(self) -> ResponseBody:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class Response(BaseModel):
    """An HTTP response whose body, if any, has not been read yet."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: int
    reason: Optional[str] = None
    headers: Headers = Field(default_factory=dict, validate_default=True)
    body: Optional[ResponseBody] = None
    length: Optional[int] = None

    @field_validator("headers")
    @classmethod
    def _freeze_headers(cls, value: Headers) -> Headers:
        return _read_only(value)

    def header(self, name: str) -> Optional[str]:
        """Return the first value of header *name* (case-insensitive)."""
        wanted = name.lower()
        for key, values in self.headers.items():
            if key.lower() == wanted and values:
                return values[0]
        return None

    def buffered(self) -> Response:
        """Return a copy whose body is fully read into memory.

        The original body is consumed and closed.
        """
        if self.body is None:
            return self
        data = self.body.read()
        return self.model_copy(
            update={"body": ResponseBody.from_bytes(data, self.body.encoding), "length": len(data)}
        )
