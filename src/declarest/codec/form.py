"""``application/x-www-form-urlencoded`` form encoding."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from declarest.codec.base import FormEncoder
from declarest.template import RequestTemplate

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


class UrlFormEncoder(FormEncoder):
    """Encodes form parameters as ``a=1&b=2``. Sequence values repeat the key."""

    def encode_form(self, form_params: Mapping[str, Any], template: RequestTemplate) -> None:
        template.set_body(urlencode(dict(form_params), doseq=True))
        if "Content-Type" not in template.headers:
            template.header("Content-Type", FORM_MEDIA_TYPE)
