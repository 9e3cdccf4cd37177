"""Declarative markers that describe how an operation maps onto HTTP.

Two kinds of markers exist:

* **Method markers** -- attached to an interface method by decorators
  (:func:`get`, :func:`post`, ..., :func:`path`, :func:`body`,
  :func:`produces`, :func:`consumes`).
* **Parameter markers** -- :class:`PathParam`, :class:`QueryParam`,
  :class:`HeaderParam` and :class:`FormParam`, placed in
  :data:`typing.Annotated` metadata.

A parameter annotated with :class:`httpx.URL` and no marker overrides the
target's base URL at call time.

Example::

    class GitHub:
        @get
        @path("/repos/{owner}/{repo}/contributors")
        def contributors(
            self,
            owner: Annotated[str, PathParam("owner")],
            repo: Annotated[str, PathParam("repo")],
        ) -> list[Contributor]: ...

Every marker is also a Pydantic model with a ``kind`` discriminator, so the
same descriptions can be written as JSON/YAML literals (see
:mod:`declarest.loader`).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from declarest.models import HTTPMethod

MARKERS_ATTR = "__declarest_markers__"

F = TypeVar("F", bound=Callable[..., Any])


# --- Method markers ---


class HttpMethodMarker(BaseModel):
    """Declares the HTTP verb of an operation. Exactly one is required."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["http_method"] = "http_method"
    verb: str


class PathMarker(BaseModel):
    """Appends a URL fragment (which may carry ``?k=v`` pairs) to the operation."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["path"] = "path"
    value: str


class BodyMarker(BaseModel):
    """A literal request body, or a body template when it contains ``{``.

    Curly braces meant literally must be url-encoded (``%7B`` / ``%7D``).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["body"] = "body"
    value: str


class ProducesMarker(BaseModel):
    """Media types of the request body; sets ``Content-Type``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["produces"] = "produces"
    media_types: tuple[str, ...]


class ConsumesMarker(BaseModel):
    """Media types accepted in the response; sets ``Accept``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["consumes"] = "consumes"
    media_types: tuple[str, ...]


MethodMarker = Annotated[
    Union[HttpMethodMarker, PathMarker, BodyMarker, ProducesMarker, ConsumesMarker],
    Field(discriminator="kind"),
]


# --- Parameter markers ---


class _ParamMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(
        default=None, description="Template variable name; defaults to the parameter name"
    )

    def __init__(self, name: Optional[str] = None, **data: Any) -> None:
        super().__init__(name=name, **data)


class PathParam(_ParamMarker):
    """Binds the argument to a ``{name}`` placeholder in the path."""

    kind: Literal["path_param"] = "path_param"


class QueryParam(_ParamMarker):
    """Binds the argument to query parameter *name*."""

    kind: Literal["query_param"] = "query_param"


class HeaderParam(_ParamMarker):
    """Binds the argument to request header *name*."""

    kind: Literal["header_param"] = "header_param"


class FormParam(_ParamMarker):
    """Collects the argument into the form passed to a FormEncoder."""

    kind: Literal["form_param"] = "form_param"


ParamMarker = Annotated[
    Union[PathParam, QueryParam, HeaderParam, FormParam],
    Field(discriminator="kind"),
]

PARAM_MARKER_TYPES = (PathParam, QueryParam, HeaderParam, FormParam)


# --- Decorators ---


def add_marker(func: F, marker: BaseModel) -> F:
    """Attach *marker* to *func*, keeping source order across stacked decorators."""
    markers = list(getattr(func, MARKERS_ATTR, ()))
    # decorators run bottom-up
    markers.insert(0, marker)
    setattr(func, MARKERS_ATTR, markers)
    return func


def http_method(verb: str) -> Callable[[F], F]:
    """Return a decorator marking an operation with HTTP verb *verb*.

    Example::

        propfind = http_method("PROPFIND")
    """

    def decorator(func: F) -> F:
        return add_marker(func, HttpMethodMarker(verb=verb))

    decorator.__name__ = verb.lower()
    return decorator


get = http_method(HTTPMethod.GET.value)
post = http_method(HTTPMethod.POST.value)
put = http_method(HTTPMethod.PUT.value)
patch = http_method(HTTPMethod.PATCH.value)
delete = http_method(HTTPMethod.DELETE.value)
head = http_method(HTTPMethod.HEAD.value)
options = http_method(HTTPMethod.OPTIONS.value)


def path(value: str) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        return add_marker(func, PathMarker(value=value))

    return decorator


def body(value: str) -> Callable[[F], F]:
    """Declare a literal body or a ``{name}`` body template.

    Example::

        @post
        @body("<login><user>{user}</user></login>")
        def login(self, user: Annotated[str, FormParam("user")]) -> None: ...
    """

    def decorator(func: F) -> F:
        return add_marker(func, BodyMarker(value=value))

    return decorator


def produces(*media_types: str) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        return add_marker(func, ProducesMarker(media_types=media_types))

    return decorator


def consumes(*media_types: str) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        return add_marker(func, ConsumesMarker(media_types=media_types))

    return decorator
