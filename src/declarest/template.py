"""Mutable request builder and the ``{name}`` template expansion engine.

A :class:`RequestTemplate` is the skeleton of an HTTP request. The contract
parser builds one per operation, with ``{name}`` placeholders wherever an
argument will be substituted, and every invocation resolves a private
:meth:`~RequestTemplate.copy` of it into a frozen
:class:`~declarest.models.Request`.

Placeholders that have no binding are left in place as literal ``{name}``
text, so a template can be resolved in stages.

The query multimap always stores form-url-encoded names and values (except
values that are placeholders). :attr:`RequestTemplate.queries` hands out a
decoded copy.

Example::

    template = RequestTemplate().set_method("GET").append("/repos/{owner}")
    template.query("per_page", "{per_page}")
    request = template.resolve({"owner": "netflix", "per_page": 10}).request()
    # GET /repos/netflix?per_page=10
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional
from urllib.parse import quote_plus, unquote_plus

from declarest.models import Request

CONTENT_LENGTH = "Content-Length"


def url_encode(value: Any) -> str:
    """Form-url-encode ``str(value)`` (spaces become ``+``)."""
    return quote_plus(str(value), safe="*")


def url_decode(value: str) -> str:
    """Inverse of :func:`url_encode`."""
    return unquote_plus(value)


def expand(template: str, variables: Mapping[str, Any]) -> str:
    """Expand ``{name}`` placeholders in *template* from *variables*.

    A single left-to-right scan. Names that are missing from *variables* (or
    bound to ``None``) are written back as literal ``{name}``. Templates
    shorter than three characters cannot hold a placeholder and are returned
    unchanged.

    To put literal curly braces in a template, url-encode them first.

    Example::

        expand("/users/{id}", {"id": 7})   # "/users/7"
        expand("/users/{id}", {})          # "/users/{id}"
    """
    if len(template) < 3:
        return template

    in_var = False
    var: list[str] = []
    out: list[str] = []
    for char in template:
        if char == "{":
            in_var = True
        elif char == "}" and in_var:
            in_var = False
            key = "".join(var)
            value = variables.get(key)
            if value is not None:
                out.append(str(value))
            else:
                out.append("{" + key + "}")
            var = []
        elif in_var:
            var.append(char)
        else:
            out.append(char)
    if in_var:
        out.append("{" + "".join(var))
    return "".join(out)


def _is_placeholder(value: Optional[str]) -> bool:
    return value is not None and value.startswith("{")


def _encode_if_not_variable(value: Optional[str]) -> Optional[str]:
    if value is None or _is_placeholder(value):
        return value
    return url_encode(value)


def _parse_and_decode_queries(query_line: str) -> dict[str, list[Optional[str]]]:
    """Split ``a=1&b&c=x=y`` into ``{"a": ["1"], "b": [None], "c": ["x=y"]}``."""
    parsed: dict[str, list[Optional[str]]] = {}
    if not query_line:
        return parsed
    for part in query_line.split("&"):
        if not part:
            continue
        # '=' may appear again inside the value
        key, sep, value = part.partition("=")
        parsed.setdefault(url_decode(key), []).append(url_decode(value) if sep else None)
    return parsed


class RequestTemplate:
    """Builds a request to an HTTP target. Not thread safe.

    Every setter returns ``self`` so calls can be chained. Use :meth:`copy`
    before mutating a template that is shared, e.g. a cached skeleton.
    """

    def __init__(self) -> None:
        self._method: Optional[str] = None
        self._url = ""
        self._queries: dict[str, list[Optional[str]]] = {}
        self._headers: dict[str, list[str]] = {}
        self._body: Optional[str] = None
        self._body_template: Optional[str] = None

    def copy(self) -> RequestTemplate:
        """Return an independent copy; mutating it never touches ``self``."""
        other = RequestTemplate()
        other._method = self._method
        other._url = self._url
        other._queries = {name: list(values) for name, values in self._queries.items()}
        other._headers = {name: list(values) for name, values in self._headers.items()}
        other._body = self._body
        other._body_template = self._body_template
        return other

    __copy__ = copy

    # ------------------------------------------------------------------ #
    # Method / URL
    # ------------------------------------------------------------------ #

    @property
    def method(self) -> Optional[str]:
        return self._method

    def set_method(self, method: str) -> RequestTemplate:
        if method is None:
            raise ValueError("method")
        self._method = method
        return self

    @property
    def url(self) -> str:
        return self._url

    def append(self, value: str) -> RequestTemplate:
        """Append *value* to the URL, pulling any ``?k=v`` pairs into the queries."""
        self._url = self._pull_any_queries_out_of_url(self._url + value)
        return self

    def insert(self, pos: int, value: str) -> RequestTemplate:
        """Insert *value* into the URL at *pos*, pulling out any ``?k=v`` pairs."""
        self._url = self._pull_any_queries_out_of_url(self._url[:pos] + value + self._url[pos:])
        return self

    def _pull_any_queries_out_of_url(self, url: str) -> str:
        """Move the query part of *url* into the query multimap, return the rest.

        Names already registered keep their values in front; literal values
        found in the URL are appended after them.
        """
        index = url.find("?")
        if index == -1:
            return url
        for name, values in _parse_and_decode_queries(url[index + 1:]).items():
            encoded_name = _encode_if_not_variable(name)
            self._queries.setdefault(encoded_name, []).extend(
                _encode_if_not_variable(value) for value in values
            )
        return url[:index]

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def query(self, name: str, *values: Optional[str]) -> RequestTemplate:
        """Replace all values of query *name*.

        Passing no values or a single ``None`` removes the query. Values
        starting with ``{`` are placeholders and are stored unencoded.

        Example::

            template.query("Signature", "{signature}")
        """
        if name is None:
            raise ValueError("query name")
        encoded_name = _encode_if_not_variable(name)
        self._queries.pop(encoded_name, None)
        if values and not (len(values) == 1 and values[0] is None):
            self._queries[encoded_name] = [_encode_if_not_variable(value) for value in values]
        return self

    def set_queries(
        self, queries: Optional[Mapping[str, Iterable[Optional[str]]]]
    ) -> RequestTemplate:
        """Replace queries per name from *queries*; ``None`` or empty clears them all."""
        if not queries:
            self._queries.clear()
        else:
            for name, values in queries.items():
                self.query(name, *values)
        return self

    @property
    def queries(self) -> dict[str, list[Optional[str]]]:
        """A url-decoded copy of the query multimap."""
        return {
            url_decode(name): [None if value is None else url_decode(value) for value in values]
            for name, values in self._queries.items()
        }

    def query_line(self) -> str:
        """Return ``?k=v&k2=v2`` for the current queries, or ``""`` when there are none.

        Valueless keys are written without ``=``.
        """
        parts: list[str] = []
        for name, values in self._queries.items():
            for value in values:
                parts.append(name if value is None else f"{name}={value}")
        if not parts:
            return ""
        return "?" + "&".join(parts)

    # ------------------------------------------------------------------ #
    # Headers
    # ------------------------------------------------------------------ #

    def header(self, name: str, *values: Optional[str]) -> RequestTemplate:
        """Replace all values of header *name*; a single ``None`` removes it.

        Example::

            template.header("X-Application-Version", "{version}")
        """
        if name is None:
            raise ValueError("header name")
        if not values or (len(values) == 1 and values[0] is None):
            self._headers.pop(name, None)
        else:
            self._headers[name] = [value for value in values if value is not None]
        return self

    def set_headers(self, headers: Optional[Mapping[str, Iterable[str]]]) -> RequestTemplate:
        """Add every header in *headers*; ``None`` or empty clears them all."""
        if not headers:
            self._headers.clear()
        else:
            for name, values in headers.items():
                self._headers.setdefault(name, []).extend(values)
        return self

    @property
    def headers(self) -> dict[str, list[str]]:
        """A copy of the header multimap."""
        return {name: list(values) for name, values in self._headers.items()}

    # ------------------------------------------------------------------ #
    # Body
    # ------------------------------------------------------------------ #

    @property
    def body(self) -> Optional[str]:
        return self._body

    def set_body(self, body: Optional[str]) -> RequestTemplate:
        """Set the literal body, replace ``Content-Length`` and drop any body template.

        Usually called by a :class:`~declarest.codec.BodyEncoder` or
        :class:`~declarest.codec.FormEncoder`.
        """
        self._body = body
        if body is not None:
            self.header(CONTENT_LENGTH, str(len(body.encode("utf-8"))))
        self._body_template = None
        return self

    @property
    def body_template(self) -> Optional[str]:
        return self._body_template

    def set_body_template(self, body_template: Optional[str]) -> RequestTemplate:
        """Set a body template expanded at :meth:`resolve` time; drops any literal body."""
        self._body_template = body_template
        self._body = None
        return self

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #

    def resolve(self, unencoded: Mapping[str, Any]) -> RequestTemplate:
        """Substitute *unencoded* values into every part of the request.

        Query and URL placeholders receive url-encoded values (with ``%2F``
        turned back into ``/`` in the URL so path values may carry slashes).
        Headers that consist of a single placeholder receive the raw value.
        A body template is expanded with raw values, then url-decoded, and
        becomes the literal body.

        Mutates and returns ``self``.
        """
        encoded = {
            name: url_encode(value) for name, value in unencoded.items() if value is not None
        }

        query_line = expand(self.query_line(), encoded)
        self._queries.clear()
        self._pull_any_queries_out_of_url(query_line)

        self._url = expand(self._url, encoded).replace("%2F", "/")

        resolved_headers: dict[str, list[str]] = {}
        for name, values in self._headers.items():
            resolved = resolved_headers.setdefault(name, [])
            for value in values:
                if _is_placeholder(value) and value.endswith("}") and value.count("{") == 1:
                    raw = unencoded.get(value[1:-1])
                    resolved.append(value if raw is None else str(raw))
                else:
                    resolved.append(value)
        self._headers = resolved_headers

        if self._body_template is not None:
            self.set_body(url_decode(expand(self._body_template, unencoded)))
        return self

    def request(self) -> Request:
        """Freeze the current state into a :class:`~declarest.models.Request`."""
        return Request(
            method=self._method or "",
            url=self._url + self.query_line(),
            headers={name: tuple(values) for name, values in self._headers.items()},
            body=self._body,
        )

    # ------------------------------------------------------------------ #
    # Dunder helpers
    # ------------------------------------------------------------------ #

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RequestTemplate):
            return NotImplemented
        return (
            self._method == other._method
            and self._url == other._url
            and self._queries == other._queries
            and self._headers == other._headers
            and self._body == other._body
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RequestTemplate({self._method} {self._url}{self.query_line()})"
