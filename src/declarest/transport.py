"""The transport collaborator that performs the actual HTTP exchange.

The core only depends on the :class:`Transport` contract. :class:`HttpxTransport`
is the stock implementation, backed by a shared :class:`httpx.Client`
(which is safe for concurrent callers).

Example::

    with HttpxTransport(verify=ssl_context) as transport:
        github = create(GitHub, "https://api.github.com", transport=transport)
"""

from __future__ import annotations

import logging
import ssl
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Optional, Union

import httpx

from declarest.exceptions import TransportError
from declarest.models import Options, Request, Response, ResponseBody

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Submits requests. Implementations must be thread-safe."""

    @abstractmethod
    def execute(self, request: Request, options: Options) -> Response:
        """Send *request* and return once the response headers have arrived.

        The returned body, if any, must not have been read yet.

        Raises:
            TransportError: On a network error reaching ``request.url``.
        """


class HttpxTransport(Transport):
    """:class:`Transport` backed by :class:`httpx.Client`.

    Args:
        verify: ``True``/``False`` or an :class:`ssl.SSLContext` used for TLS.
        client: An existing client to use instead of creating one. A client
            passed in is not closed by :meth:`close`.
        follow_redirects: Follow 3xx responses.
    """

    def __init__(
        self,
        verify: Union[bool, ssl.SSLContext] = True,
        client: Optional[httpx.Client] = None,
        follow_redirects: bool = True,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(verify=verify, follow_redirects=follow_redirects)

    def execute(self, request: Request, options: Options) -> Response:
        headers = [(name, value) for name, values in request.headers.items() for value in values]
        content = request.body.encode("utf-8") if request.body is not None else None
        timeout = httpx.Timeout(options.read_timeout, connect=options.connect_timeout)
        try:
            outgoing = self._client.build_request(
                request.method,
                request.url,
                headers=headers,
                content=content,
                timeout=timeout,
            )
            response = self._client.send(outgoing, stream=True)
        except httpx.HTTPError as exc:
            raise TransportError(f"{exc} executing {request.method} {request.url}") from exc
        return self._convert_response(response)

    def _convert_response(self, response: httpx.Response) -> Response:
        headers: dict[str, tuple[str, ...]] = {}
        for name, value in response.headers.multi_items():
            headers[name] = headers.get(name, ()) + (value,)

        length: Optional[int] = None
        content_length = response.headers.get("content-length")
        if content_length is not None and content_length.isdigit():
            length = int(content_length)

        return Response(
            status=response.status_code,
            reason=response.reason_phrase or None,
            headers=headers,
            body=ResponseBody(
                _iter_bytes(response),
                close=response.close,
                encoding=response.encoding or "utf-8",
            ),
            length=length,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _iter_bytes(response: httpx.Response) -> Iterator[bytes]:
    try:
        yield from response.iter_bytes()
    except httpx.HTTPError as exc:
        raise TransportError(f"{exc} reading response body from {response.url}") from exc
