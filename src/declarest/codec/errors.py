"""Default translation of non-2xx responses."""

from __future__ import annotations

import logging

from declarest.codec.base import ErrorDecoder
from declarest.exceptions import ApplicationError, DeclarestError
from declarest.models import Response

logger = logging.getLogger(__name__)

BODY_SNIPPET_LENGTH = 200


class DefaultErrorDecoder(ErrorDecoder):
    """Returns an :class:`~declarest.exceptions.ApplicationError`.

    The message reads ``status 404 reading GitHub#contributors(str,str)``,
    followed by the start of the body when there is one.
    """

    def decode(self, config_key: str, response: Response) -> Exception:
        snippet = None
        if response.body is not None:
            try:
                snippet = response.body.text()[:BODY_SNIPPET_LENGTH]
            except DeclarestError as exc:
                logger.debug("Could not read error body of %s: %s", config_key, exc)
        message = f"status {response.status} reading {config_key}"
        if snippet:
            message = f"{message}; content:\n{snippet}"
        return ApplicationError(
            message,
            status=response.status,
            reason=response.reason,
            headers=dict(response.headers),
            body=snippet,
        )
