"""Encoders and decoders plugged into the request pipeline.

Contracts live in :mod:`declarest.codec.base`; the remaining modules hold
stock implementations:

* :mod:`~declarest.codec.json_codec` -- :class:`JsonBodyEncoder`,
  :class:`JsonFormEncoder`, :class:`JsonDecoder` (Pydantic-validated).
* :mod:`~declarest.codec.form` -- :class:`UrlFormEncoder`.
* :mod:`~declarest.codec.text` -- :class:`ToStringDecoder`.
* :mod:`~declarest.codec.errors` -- :class:`DefaultErrorDecoder`.
"""

from declarest.codec.base import BodyEncoder, Decoder, ErrorDecoder, FormEncoder
from declarest.codec.errors import DefaultErrorDecoder
from declarest.codec.form import UrlFormEncoder
from declarest.codec.json_codec import JsonBodyEncoder, JsonDecoder, JsonFormEncoder
from declarest.codec.text import ToStringDecoder

__all__ = [
    "BodyEncoder",
    "Decoder",
    "DefaultErrorDecoder",
    "ErrorDecoder",
    "FormEncoder",
    "JsonBodyEncoder",
    "JsonDecoder",
    "JsonFormEncoder",
    "ToStringDecoder",
    "UrlFormEncoder",
]
