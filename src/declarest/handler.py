"""Per-operation request pipeline.

A :class:`MethodHandler` turns one call's arguments into a
:class:`~declarest.models.Request`, executes it, and decodes the
:class:`~declarest.models.Response`:

1. **Bind** -- a template-from-args strategy copies the cached template,
   inserts any URI override, collects ``name -> value`` bindings from the
   arguments and runs the encoder (form, body, or none).
2. **Resolve** -- placeholders are substituted and the target URL applied.
3. **Execute** -- the :class:`~declarest.transport.Transport` is called with
   the operation's :class:`~declarest.models.Options`. A
   :class:`~declarest.exceptions.TransportError` goes to the
   :class:`~declarest.retry.Retryer`, which either restarts at step 1 or
   propagates it.
4. **Decode** -- 2xx bodies go through the
   :class:`~declarest.codec.Decoder`; anything else goes through the
   :class:`~declarest.codec.ErrorDecoder` and the resulting exception is
   raised.

The strategy for step 1 is chosen once per operation by
:class:`~declarest.dispatcher.HandlerResolver`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Optional

from declarest.codec.base import BodyEncoder, Decoder, ErrorDecoder, FormEncoder
from declarest.exceptions import ArgumentError, ConfigurationError, TransportError
from declarest.metadata import MethodMetadata
from declarest.models import Options, Response, Target
from declarest.retry import Retryer
from declarest.template import RequestTemplate
from declarest.transport import Transport
from declarest.wire import NoOpWire, Wire

logger = logging.getLogger(__name__)


class BuildTemplateFromArgs:
    """Binds arguments to placeholders only; used when there is no body to encode."""

    def __init__(self, metadata: MethodMetadata) -> None:
        self.metadata = metadata

    def __call__(self, argv: Sequence[Any]) -> RequestTemplate:
        mutable = self.metadata.template.copy()
        url_index = self.metadata.url_index
        if url_index is not None:
            if argv[url_index] is None:
                raise ArgumentError(
                    f"URI parameter {url_index} was None ({self.metadata.config_key})"
                )
            mutable.insert(0, str(argv[url_index]))

        variables: dict[str, Any] = {}
        for index, names in self.metadata.index_to_name.items():
            value = argv[index]
            # unbound placeholders stay in the template
            if value is None:
                continue
            for name in names:
                variables[name] = value
        return self.resolve(argv, mutable, variables)

    def resolve(
        self, argv: Sequence[Any], mutable: RequestTemplate, variables: dict[str, Any]
    ) -> RequestTemplate:
        return mutable.resolve(variables)


class BuildFormEncodedTemplateFromArgs(BuildTemplateFromArgs):
    """Passes the bound form parameters to a :class:`~declarest.codec.FormEncoder`."""

    def __init__(self, metadata: MethodMetadata, form_encoder: FormEncoder) -> None:
        super().__init__(metadata)
        self.form_encoder = form_encoder

    def resolve(
        self, argv: Sequence[Any], mutable: RequestTemplate, variables: dict[str, Any]
    ) -> RequestTemplate:
        form_params = self.metadata.form_params
        form = {name: value for name, value in variables.items() if name in form_params}
        self.form_encoder.encode_form(form, mutable)
        return super().resolve(argv, mutable, variables)


class BuildBodyEncodedTemplateFromArgs(BuildTemplateFromArgs):
    """Passes the body argument to a :class:`~declarest.codec.BodyEncoder`."""

    def __init__(self, metadata: MethodMetadata, body_encoder: BodyEncoder) -> None:
        super().__init__(metadata)
        if metadata.body_index is None:
            raise ConfigurationError(f"No body parameter on {metadata.config_key}")
        self.body_index: int = metadata.body_index
        self.body_encoder = body_encoder

    def resolve(
        self, argv: Sequence[Any], mutable: RequestTemplate, variables: dict[str, Any]
    ) -> RequestTemplate:
        body = argv[self.body_index]
        if body is None:
            raise ArgumentError(
                f"Body parameter {self.body_index} was None ({self.metadata.config_key})"
            )
        self.body_encoder.encode(body, mutable)
        return super().resolve(argv, mutable, variables)


class MethodHandler:
    """Executes one operation of a target.

    Args:
        target: The target requests are sent to.
        metadata: The operation's compiled metadata.
        build_template_from_args: Strategy producing a resolved template.
        options: Timeouts passed to the transport.
        decoder: Decodes 2xx bodies.
        error_decoder: Translates other responses into exceptions.
        transport: Performs the HTTP exchange.
        retryer: This handler's own retry policy; cloned for every call.
        wire: Observes requests and responses.
    """

    def __init__(
        self,
        target: Target,
        metadata: MethodMetadata,
        build_template_from_args: BuildTemplateFromArgs,
        options: Options,
        decoder: Decoder,
        error_decoder: ErrorDecoder,
        transport: Transport,
        retryer: Retryer,
        wire: Optional[Wire] = None,
    ) -> None:
        self.target = target
        self.metadata = metadata
        self.build_template_from_args = build_template_from_args
        self.options = options
        self.decoder = decoder
        self.error_decoder = error_decoder
        self.transport = transport
        self.retryer = retryer
        self.wire = wire or NoOpWire()

    def invoke(self, argv: Sequence[Any]) -> Any:
        """Run the operation with positional arguments *argv*.

        Raises:
            ArgumentError: If a required URI or body argument is ``None``.
            TransportError: When the retryer gives up.
            DecodeError: If the body cannot be decoded.
            Exception: Whatever the error decoder returns for a non-2xx response.
        """
        retryer = self.retryer.clone()
        while True:
            template = self.build_template_from_args(argv)
            try:
                response = self._execute(template)
            except TransportError as exc:
                retryer.continue_or_propagate(exc)
                continue
            return self._decode(response)

    def _execute(self, template: RequestTemplate) -> Response:
        request = self.target.apply(template)
        self.wire.wire_request(self.target, request)
        response = self.transport.execute(request, self.options)
        return self.wire.wire_response(self.target, response)

    def _decode(self, response: Response) -> Any:
        config_key = self.metadata.config_key
        return_type = self.metadata.return_type
        try:
            if 200 <= response.status < 300:
                if return_type is Response:
                    return response.buffered()
                if response.body is None:
                    return None
                result = self.decoder.decode(config_key, response.body, return_type)
                return None if return_type is None else result
            logger.debug("%s returned HTTP %d", config_key, response.status)
            raise self.error_decoder.decode(config_key, response)
        finally:
            if response.body is not None:
                response.body.close()


class MethodHandlerFactory:
    """Creates handlers that share a transport and wire.

    Every handler gets its own :meth:`~declarest.retry.Retryer.clone` of
    *retryer*.
    """

    def __init__(self, transport: Transport, retryer: Retryer, wire: Optional[Wire] = None) -> None:
        self.transport = transport
        self.retryer = retryer
        self.wire = wire or NoOpWire()

    def create(
        self,
        target: Target,
        metadata: MethodMetadata,
        build_template_from_args: BuildTemplateFromArgs,
        options: Options,
        decoder: Decoder,
        error_decoder: ErrorDecoder,
    ) -> MethodHandler:
        return MethodHandler(
            target,
            metadata,
            build_template_from_args,
            options,
            decoder,
            error_decoder,
            self.transport,
            self.retryer.clone(),
            self.wire,
        )
