"""Route calls on a generated client to per-operation handlers.

:class:`HandlerResolver` compiles a target's interface and resolves, once
per operation, the collaborators its :class:`~declarest.handler.MethodHandler`
needs. Per-operation configuration is looked up in plain mappings keyed by
config key, falling back to the interface name::

    decoders = {
        "GitHub": JsonDecoder(),                          # every operation
        "GitHub#readme(str,str)": ToStringDecoder(),      # this one only
    }

:class:`Dispatcher` then builds a concrete subclass of the interface whose
methods bind their arguments and invoke the matching handler. Equality,
hashing and ``repr`` of a client depend only on its
:class:`~declarest.models.Target` and never touch the network.
"""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Mapping
from typing import Any, Optional, TypeVar

from declarest.codec.base import BodyEncoder, Decoder, ErrorDecoder, FormEncoder
from declarest.codec.errors import DefaultErrorDecoder
from declarest.codec.text import ToStringDecoder
from declarest.contract import parse_and_validate_metadata
from declarest.descriptors import OperationDescriptor, describe, operation_signature
from declarest.exceptions import ConfigurationError
from declarest.handler import (
    BuildBodyEncodedTemplateFromArgs,
    BuildFormEncodedTemplateFromArgs,
    BuildTemplateFromArgs,
    MethodHandler,
    MethodHandlerFactory,
)
from declarest.models import Options, Response, Target

logger = logging.getLogger(__name__)

T = TypeVar("T")


def to_class_key(method_key: str) -> str:
    """``GitHub#contributors(str,str)`` -> ``GitHub``."""
    return method_key[: method_key.index("#")]


def for_method_or_class(config: Mapping[str, T], config_key: str) -> Optional[T]:
    """Look *config_key* up in *config*, falling back to its interface name."""
    if config_key in config:
        return config[config_key]
    return config.get(to_class_key(config_key))


def _no_config(config_key: str, kind: type) -> ConfigurationError:
    return ConfigurationError(f"no configuration for {config_key} present for {kind.__name__}!")


class HandlerResolver:
    """Builds the ``config key -> MethodHandler`` map of a target.

    Args:
        factory: Creates handlers around the shared transport and retryer.
        options: Options per config key or interface name.
        body_encoders: BodyEncoders per config key or interface name.
        form_encoders: FormEncoders per config key or interface name.
        decoders: Decoders per config key or interface name.
        error_decoders: ErrorDecoders per config key or interface name.
    """

    def __init__(
        self,
        factory: MethodHandlerFactory,
        options: Optional[Mapping[str, Options]] = None,
        body_encoders: Optional[Mapping[str, BodyEncoder]] = None,
        form_encoders: Optional[Mapping[str, FormEncoder]] = None,
        decoders: Optional[Mapping[str, Decoder]] = None,
        error_decoders: Optional[Mapping[str, ErrorDecoder]] = None,
    ) -> None:
        self.factory = factory
        self.options = dict(options or {})
        self.body_encoders = dict(body_encoders or {})
        self.form_encoders = dict(form_encoders or {})
        self.decoders = dict(decoders or {})
        self.error_decoders = dict(error_decoders or {})

    def apply(self, target: Target) -> dict[str, MethodHandler]:
        """Compile *target*'s interface and create one handler per operation.

        Raises:
            ConfigurationError: If the interface is invalid or an operation
                lacks a required decoder or encoder.
        """
        handlers: dict[str, MethodHandler] = {}
        for md in parse_and_validate_metadata(target.interface):
            key = md.config_key
            options = for_method_or_class(self.options, key) or Options()

            decoder = for_method_or_class(self.decoders, key)
            if decoder is None and (md.return_type is None or md.return_type is Response):
                decoder = ToStringDecoder()
            if decoder is None:
                raise _no_config(key, Decoder)

            error_decoder = for_method_or_class(self.error_decoders, key) or DefaultErrorDecoder()

            build_template_from_args: BuildTemplateFromArgs
            if md.form_params and md.template.body_template is None:
                form_encoder = for_method_or_class(self.form_encoders, key)
                if form_encoder is None:
                    raise _no_config(key, FormEncoder)
                build_template_from_args = BuildFormEncodedTemplateFromArgs(md, form_encoder)
            elif md.body_index is not None:
                body_encoder = for_method_or_class(self.body_encoders, key)
                if body_encoder is None:
                    raise _no_config(key, BodyEncoder)
                build_template_from_args = BuildBodyEncodedTemplateFromArgs(md, body_encoder)
            else:
                build_template_from_args = BuildTemplateFromArgs(md)

            handlers[key] = self.factory.create(
                target, md, build_template_from_args, options, decoder, error_decoder
            )
        logger.debug("Resolved %d handlers for %s", len(handlers), target.name)
        return handlers


class GeneratedClient:
    """Base of every generated client; identity comes from the target alone."""

    _target: Target
    _handlers: dict[str, MethodHandler]

    @property
    def target(self) -> Target:
        return self._target

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, GeneratedClient):
            return False
        return self._target == other._target

    def __hash__(self) -> int:
        return hash(self._target)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._target.name!r}, url={self._target.url!r})"


class Dispatcher:
    """Creates clients for targets.

    As this compiles the interface, callers should cache the result of
    :meth:`new_instance`.
    """

    def __init__(self, resolver: HandlerResolver) -> None:
        self.resolver = resolver

    def new_instance(self, target: Target) -> Any:
        """Return a client implementing ``target.interface``.

        For a class interface the client is an instance of a generated
        subclass; for an :class:`~declarest.descriptors.InterfaceDescriptor`
        it is an instance of a generated class with one method per operation.
        """
        handlers = self.resolver.apply(target)
        descriptor = describe(target.interface)

        namespace: dict[str, Any] = {}
        for operation in descriptor.operations:
            key = operation.config_key(descriptor.name)
            signature = operation_signature(target.interface, operation.name)
            if signature is None:
                signature = _descriptor_signature(key, operation)
            namespace[operation.name] = _operation_method(operation.name, key, signature)

        bases: tuple[type, ...] = (GeneratedClient,)
        if isinstance(target.interface, type):
            bases += (target.interface,)
        cls = types.new_class(
            f"{descriptor.name}Client", bases, exec_body=lambda ns: ns.update(namespace)
        )
        client = object.__new__(cls)
        client._target = target
        client._handlers = handlers
        return client


def _descriptor_signature(config_key: str, operation: OperationDescriptor) -> inspect.Signature:
    try:
        return inspect.Signature(
            [
                inspect.Parameter(param.name, inspect.Parameter.POSITIONAL_OR_KEYWORD)
                for param in operation.parameters
            ]
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid parameters for {config_key}: {exc}") from exc


def _operation_method(name: str, config_key: str, signature: inspect.Signature) -> Any:
    def method(self: GeneratedClient, *args: Any, **kwargs: Any) -> Any:
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return self._handlers[config_key].invoke(tuple(bound.arguments.values()))

    method.__name__ = name
    method.__qualname__ = name
    return method
