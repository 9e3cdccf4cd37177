"""Structured descriptors of an HTTP interface and its operations.

Descriptors are the input of the contract parser
(:mod:`declarest.contract`). They can be produced two ways:

* :func:`describe_interface` introspects a class whose methods carry the
  decorators and ``Annotated`` parameter markers of :mod:`declarest.markers`.
* :func:`~declarest.loader.load_interface` validates a JSON/YAML literal
  with the same shape.

This module also owns the canonical operation signature,
:func:`config_key`, used both to key per-operation configuration and to
route calls in the dispatcher.
"""

from __future__ import annotations

import inspect
import types
import typing
from typing import Annotated, Any, Optional, Union, get_args, get_origin

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from declarest.exceptions import ConfigurationError
from declarest.markers import MARKERS_ATTR, PARAM_MARKER_TYPES, MethodMarker, ParamMarker
from declarest.models import Response

URI_TYPE = httpx.URL
"""Unmarked parameters of this type override the target URL at call time."""

_RETURN_TYPE_ALIASES: dict[str, Any] = {
    "none": None,
    "response": Response,
    "any": Any,
    "str": str,
    "dict": dict,
    "list": list,
}


def config_key(interface_name: str, operation_name: str, type_names: typing.Iterable[str]) -> str:
    """Build the canonical signature of an operation.

    The format is ``Interface#operation(Type1,Type2)`` with no whitespace,
    and empty parentheses when the operation takes no parameters.

    Example::

        config_key("GitHub", "contributors", ["str", "str"])
        # 'GitHub#contributors(str,str)'
    """
    return f"{interface_name}#{operation_name}({','.join(type_names)})"


def simple_type_name(tp: Any) -> str:
    """Reduce a type annotation to the simple name used in config keys.

    ``Annotated`` metadata is stripped and generics are reduced to their
    origin, so ``Annotated[list[int], QueryParam()]`` becomes ``list``.
    """
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, str):
        return tp.rsplit(".", 1)[-1]
    origin = get_origin(tp)
    if origin is Annotated:
        return simple_type_name(get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        return "Union"
    if origin is not None:
        tp = origin
    name = getattr(tp, "__name__", None) or getattr(tp, "_name", None)
    return name or repr(tp)


class ParameterDescriptor(BaseModel):
    """One positional parameter of an operation."""

    name: str
    type_name: str = Field(default="object", description="Simple type name used in the config key")
    markers: list[ParamMarker] = Field(default_factory=list)
    uri: bool = Field(default=False, description="Overrides the target URL when unmarked")


class OperationDescriptor(BaseModel):
    """One operation of an interface: its method markers, parameters and return type."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    markers: list[MethodMarker] = Field(default_factory=list)
    parameters: list[ParameterDescriptor] = Field(default_factory=list)
    return_type: Any = Field(default=Any, description="None for operations that return nothing")

    @field_validator("return_type", mode="before")
    @classmethod
    def _alias_return_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() in _RETURN_TYPE_ALIASES:
            return _RETURN_TYPE_ALIASES[value.lower()]
        if value is type(None):
            return None
        return value

    def config_key(self, interface_name: str) -> str:
        return config_key(interface_name, self.name, (p.type_name for p in self.parameters))


class InterfaceDescriptor(BaseModel):
    """A named set of operations; stands in for an annotated class."""

    name: str
    operations: list[OperationDescriptor] = Field(default_factory=list)

    def __hash__(self) -> int:
        return hash(self.name)


def declared_operations(cls: type) -> dict[str, Any]:
    """Return the public functions declared on *cls* and its bases, minus ``object``.

    Later classes in the MRO never shadow earlier ones.
    """
    functions: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name.startswith("_") or not inspect.isfunction(member):
                continue
            functions[name] = member
    return functions


def describe_interface(cls: type) -> InterfaceDescriptor:
    """Introspect an annotated class into an :class:`InterfaceDescriptor`."""
    return InterfaceDescriptor(
        name=cls.__name__,
        operations=[describe_operation(func) for func in declared_operations(cls).values()],
    )


def describe_operation(func: Any) -> OperationDescriptor:
    """Introspect one decorated method into an :class:`OperationDescriptor`.

    The first parameter (``self``) is skipped.

    Raises:
        ConfigurationError: If annotations cannot be resolved or the method
            takes ``*args`` / ``**kwargs``.
    """
    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError) as exc:
        raise ConfigurationError(
            f"Cannot resolve annotations of {func.__qualname__}: {exc}"
        ) from exc

    signature = inspect.signature(func)
    parameters: list[ParameterDescriptor] = []
    for param in list(signature.parameters.values())[1:]:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise ConfigurationError(
                f"Method {func.__qualname__} cannot declare *args or **kwargs ({param.name})"
            )
        parameters.append(_describe_parameter(param.name, hints.get(param.name, object)))

    return OperationDescriptor(
        name=func.__name__,
        markers=list(getattr(func, MARKERS_ATTR, ())),
        parameters=parameters,
        return_type=hints.get("return", Any),
    )


def _describe_parameter(name: str, hint: Any) -> ParameterDescriptor:
    base = hint
    markers: list[Any] = []
    if get_origin(hint) is Annotated:
        base = get_args(hint)[0]
        for meta in hint.__metadata__:
            if isinstance(meta, PARAM_MARKER_TYPES):
                markers.append(meta if meta.name else meta.model_copy(update={"name": name}))
    return ParameterDescriptor(
        name=name,
        type_name=simple_type_name(base),
        markers=markers,
        uri=_is_uri_type(base),
    )


def _is_uri_type(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, URI_TYPE)


def describe(interface: Any) -> InterfaceDescriptor:
    """Return *interface* as a descriptor, introspecting it if it is a class."""
    if isinstance(interface, InterfaceDescriptor):
        return interface
    if isinstance(interface, type):
        return describe_interface(interface)
    raise ConfigurationError(
        f"Expected an annotated class or InterfaceDescriptor, got {type(interface).__name__}"
    )


def operation_signature(interface: Any, operation_name: str) -> Optional[inspect.Signature]:
    """Signature of *operation_name* on a class interface, without ``self``."""
    if not isinstance(interface, type):
        return None
    func = declared_operations(interface).get(operation_name)
    if func is None:
        return None
    signature = inspect.signature(func)
    return signature.replace(parameters=list(signature.parameters.values())[1:])
