"""One-call construction of a client.

:func:`create` wires the default collaborators together: an
:class:`~declarest.transport.HttpxTransport`, a
:class:`~declarest.retry.DefaultRetryer` and the stock codecs. Every one of
them can be replaced, and per-operation codecs or options are passed as
mappings keyed by config key or interface name (see
:mod:`declarest.dispatcher`).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from declarest.codec.base import BodyEncoder, Decoder, ErrorDecoder, FormEncoder
from declarest.config import load_config, retryer_from_config
from declarest.descriptors import describe
from declarest.dispatcher import Dispatcher, HandlerResolver
from declarest.handler import MethodHandlerFactory
from declarest.models import ClientConfig, Options, Target
from declarest.retry import Retryer
from declarest.transport import HttpxTransport, Transport
from declarest.wire import LoggingWire, NoOpWire, Wire


def create(
    interface: Any,
    url: str,
    *,
    name: str = "",
    transport: Optional[Transport] = None,
    retryer: Optional[Retryer] = None,
    wire: Optional[Wire] = None,
    config: Optional[ClientConfig] = None,
    options: Optional[Mapping[str, Options]] = None,
    body_encoders: Optional[Mapping[str, BodyEncoder]] = None,
    form_encoders: Optional[Mapping[str, FormEncoder]] = None,
    decoders: Optional[Mapping[str, Decoder]] = None,
    error_decoders: Optional[Mapping[str, ErrorDecoder]] = None,
) -> Any:
    """Build a client implementing *interface* against base URL *url*.

    Args:
        interface: An annotated class or an
            :class:`~declarest.descriptors.InterfaceDescriptor`.
        url: Base URL prepended to every request path.
        name: Target name used in logs; defaults to *url*.
        transport: Defaults to a new :class:`~declarest.transport.HttpxTransport`.
        retryer: Defaults to the retry policy of *config*.
        wire: Defaults to :class:`~declarest.wire.LoggingWire` when
            ``config.log_wire`` is set, else no wire logging.
        config: Client defaults; :func:`~declarest.config.load_config` is
            used when omitted.
        options: Options per config key or interface name. The interface
            entry defaults to ``config.options``.
        body_encoders: BodyEncoders per config key or interface name.
        form_encoders: FormEncoders per config key or interface name.
        decoders: Decoders per config key or interface name.
        error_decoders: ErrorDecoders per config key or interface name.

    Returns:
        The client. Its methods perform HTTP calls.

    Raises:
        ConfigurationError: If the interface is invalid or a required codec
            is missing.
    """
    if config is None:
        config = load_config()
    interface_name = describe(interface).name

    resolved_options = dict(options or {})
    resolved_options.setdefault(interface_name, config.options)

    if wire is None:
        wire = LoggingWire() if config.log_wire else NoOpWire()

    factory = MethodHandlerFactory(
        transport or HttpxTransport(),
        retryer or retryer_from_config(config),
        wire,
    )
    resolver = HandlerResolver(
        factory,
        options=resolved_options,
        body_encoders=body_encoders,
        form_encoders=form_encoders,
        decoders=decoders,
        error_decoders=error_decoders,
    )
    target = Target(interface=interface, url=url, name=name)
    return Dispatcher(resolver).new_instance(target)
