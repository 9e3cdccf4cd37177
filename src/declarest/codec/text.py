"""Plain-text decoding."""

from __future__ import annotations

from typing import Any

from declarest.codec.base import Decoder
from declarest.models import ResponseBody


class ToStringDecoder(Decoder):
    """Returns the body as text.

    The fallback for operations that return ``None`` or a raw
    :class:`~declarest.models.Response`.
    """

    def decode(self, config_key: str, body: ResponseBody, return_type: Any) -> Any:
        return body.text()
