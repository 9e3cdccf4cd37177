"""Per-operation metadata produced by the contract parser."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from declarest.template import RequestTemplate


class MethodMetadata(BaseModel):
    """Everything needed to turn one operation's arguments into a request.

    Built once per operation by :func:`~declarest.contract.parse_operation`
    and owned by the operation's :class:`~declarest.handler.MethodHandler`.
    The :attr:`template` is a shared skeleton: handlers resolve copies of it,
    never the instance itself.

    Attributes:
        config_key: Canonical signature, e.g. ``GitHub#contributors(str,str)``.
        return_type: Declared return type; ``None`` when nothing is returned.
        url_index: Index of the argument that overrides the target URL.
        body_index: Index of the argument passed to the BodyEncoder.
        template: Request skeleton with ``{name}`` placeholders.
        form_params: Names collected for the FormEncoder, in declaration order.
        index_to_name: Argument index to the template variable names it binds.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    config_key: str
    return_type: Any = None
    url_index: Optional[int] = None
    body_index: Optional[int] = None
    template: RequestTemplate = Field(default_factory=RequestTemplate)
    form_params: tuple[str, ...] = ()
    index_to_name: dict[int, tuple[str, ...]] = Field(default_factory=dict)
