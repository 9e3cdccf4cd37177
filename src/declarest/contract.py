"""Compile interface descriptors into :class:`~declarest.metadata.MethodMetadata`.

The contract defines which markers are valid and what they mean. It is
stateless: :func:`parse_and_validate_metadata` walks every operation of an
interface and :func:`parse_operation` compiles one.

Method markers are applied in declaration order:

* an HTTP-verb marker sets the method (exactly one is required),
* a path marker appends to the URL, pulling any ``?k=v`` pairs into queries,
* a body marker becomes the literal body, or a body template when it
  contains ``{``,
* produces / consumes markers set ``Content-Type`` / ``Accept``.

Each parameter is then bound by its markers. An unmarked parameter is the
URI override when its type is :class:`httpx.URL`, and the single body
parameter otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from declarest.descriptors import OperationDescriptor, describe
from declarest.exceptions import ConfigurationError
from declarest.markers import (
    BodyMarker,
    ConsumesMarker,
    FormParam,
    HeaderParam,
    HttpMethodMarker,
    PathMarker,
    PathParam,
    ProducesMarker,
    QueryParam,
)
from declarest.metadata import MethodMetadata
from declarest.template import RequestTemplate

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"
ACCEPT = "Accept"


def parse_and_validate_metadata(interface: Any) -> list[MethodMetadata]:
    """Compile every operation of *interface*.

    Args:
        interface: An annotated class or an
            :class:`~declarest.descriptors.InterfaceDescriptor`.

    Returns:
        One :class:`~declarest.metadata.MethodMetadata` per operation, in
        declaration order.

    Raises:
        ConfigurationError: If any operation is invalid.
    """
    descriptor = describe(interface)
    metadata = [parse_operation(descriptor.name, operation) for operation in descriptor.operations]
    logger.debug("Parsed %d operations of %s", len(metadata), descriptor.name)
    return metadata


def parse_operation(interface_name: str, operation: OperationDescriptor) -> MethodMetadata:
    """Compile one operation into :class:`~declarest.metadata.MethodMetadata`.

    Raises:
        ConfigurationError: On a missing or duplicate HTTP verb, a body
            parameter mixed with form parameters, or more than one body
            parameter.
    """
    key = operation.config_key(interface_name)
    template = RequestTemplate()

    for marker in operation.markers:
        if isinstance(marker, HttpMethodMarker):
            if template.method is not None:
                raise ConfigurationError(
                    f"Method {key} contains multiple HTTP methods. "
                    f"Found: {template.method} and {marker.verb}"
                )
            template.set_method(marker.verb)
        elif isinstance(marker, BodyMarker):
            if "{" not in marker.value:
                template.set_body(marker.value)
            else:
                template.set_body_template(marker.value)
        elif isinstance(marker, PathMarker):
            template.append(marker.value)
        elif isinstance(marker, ProducesMarker):
            template.header(CONTENT_TYPE, ",".join(marker.media_types))
        elif isinstance(marker, ConsumesMarker):
            template.header(ACCEPT, ",".join(marker.media_types))

    if template.method is None:
        raise ConfigurationError(
            f"Method {key} not annotated with HTTP method type (ex. GET, POST)"
        )

    index_to_name: dict[int, list[str]] = {}
    form_params: list[str] = []
    url_index: Optional[int] = None
    body_index: Optional[int] = None

    def bind(index: int, name: str) -> None:
        names = index_to_name.setdefault(index, [])
        if name not in names:
            names.append(name)

    for index, param in enumerate(operation.parameters):
        has_http_marker = False
        for param_marker in param.markers:
            name = param_marker.name or param.name
            if isinstance(param_marker, PathParam):
                bind(index, name)
            elif isinstance(param_marker, QueryParam):
                template.query(name, *template.queries.get(name, []), f"{{{name}}}")
                bind(index, name)
            elif isinstance(param_marker, HeaderParam):
                template.header(name, *template.headers.get(name, []), f"{{{name}}}")
                bind(index, name)
            elif isinstance(param_marker, FormParam):
                if body_index is not None:
                    raise ConfigurationError(
                        f"Body parameters cannot be used with form parameters: {key}"
                    )
                form_params.append(name)
                bind(index, name)
            else:
                continue
            has_http_marker = True

        if has_http_marker:
            continue
        if param.uri:
            url_index = index
            continue
        if form_params:
            raise ConfigurationError(
                f"Body parameters cannot be used with form parameters: {key}"
            )
        if body_index is not None:
            raise ConfigurationError(f"Method has too many body parameters: {key}")
        body_index = index

    return MethodMetadata(
        config_key=key,
        return_type=operation.return_type,
        url_index=url_index,
        body_index=body_index,
        template=template,
        form_params=tuple(form_params),
        index_to_name={index: tuple(names) for index, names in index_to_name.items()},
    )
