"""JSON encoding and typed decoding backed by Pydantic.

:class:`JsonDecoder` validates the body against the declared return type
with a :class:`pydantic.TypeAdapter`, so an operation declared as
``-> list[Contributor]`` returns validated ``Contributor`` models.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from declarest.codec.base import BodyEncoder, Decoder, FormEncoder
from declarest.exceptions import DecodeError
from declarest.models import ResponseBody
from declarest.template import RequestTemplate

JSON_MEDIA_TYPE = "application/json"


def _dump(value: Any) -> str:
    try:
        return to_json(value).decode("utf-8")
    except PydanticSerializationError as exc:
        raise TypeError(f"Cannot encode {type(value).__name__} as JSON: {exc}") from exc


def _set_content_type(template: RequestTemplate) -> None:
    if "Content-Type" not in template.headers:
        template.header("Content-Type", JSON_MEDIA_TYPE)


class JsonBodyEncoder(BodyEncoder):
    """Serialises the body argument (models, dataclasses, dicts, lists) as JSON."""

    def encode(self, value: Any, template: RequestTemplate) -> None:
        template.set_body(_dump(value))
        _set_content_type(template)


class JsonFormEncoder(FormEncoder):
    """Sends form parameters as a single JSON object."""

    def encode_form(self, form_params: Mapping[str, Any], template: RequestTemplate) -> None:
        template.set_body(_dump(dict(form_params)))
        _set_content_type(template)


class JsonDecoder(Decoder):
    """Parses the body as JSON and validates it against the return type.

    An empty body, or any body of an operation returning ``None``, decodes to
    ``None``. Adapters are built once per return type.
    """

    def __init__(self) -> None:
        self._adapters: dict[Any, TypeAdapter[Any]] = {}

    def _adapter(self, config_key: str, return_type: Any) -> TypeAdapter[Any]:
        adapter = self._adapters.get(return_type)
        if adapter is None:
            try:
                adapter = TypeAdapter(return_type)
            except PydanticSchemaGenerationError as exc:
                raise DecodeError(
                    f"Cannot decode JSON into the return type of {config_key}: {exc}"
                ) from exc
            self._adapters[return_type] = adapter
        return adapter

    def decode(self, config_key: str, body: ResponseBody, return_type: Any) -> Any:
        data = body.read()
        if return_type is None or not data.strip():
            return None
        adapter = self._adapter(config_key, return_type)
        try:
            return adapter.validate_json(data)
        except ValidationError as exc:
            raise DecodeError(f"Failed to decode response of {config_key}: {exc}") from exc
