"""Load interface descriptors from JSON or YAML literals.

An interface can be described without writing a class, e.g. in YAML::

    name: GitHub
    operations:
      - name: contributors
        markers:
          - {kind: http_method, verb: GET}
          - {kind: path, value: "/repos/{owner}/{repo}/contributors"}
        parameters:
          - {name: owner, type_name: str, markers: [{kind: path_param}]}
          - {name: repo, type_name: str, markers: [{kind: path_param}]}
        return_type: list

The public function is :func:`load_interface`, which accepts a file path or
an already-parsed mapping and returns an
:class:`~declarest.descriptors.InterfaceDescriptor`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from declarest.descriptors import InterfaceDescriptor
from declarest.exceptions import ConfigurationError


def load_interface(source: str | Path | Mapping[str, Any]) -> InterfaceDescriptor:
    """Load an interface description from a file or a mapping.

    Parameter markers without a ``name`` bind to the parameter's own name.

    Args:
        source: Path to a ``.json`` / ``.yaml`` / ``.yml`` file, or the
            parsed document itself.

    Returns:
        The validated :class:`~declarest.descriptors.InterfaceDescriptor`.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or the
            document does not describe an interface.
    """
    if isinstance(source, Mapping):
        data = dict(source)
    else:
        data = _load_from_file(Path(source))

    try:
        descriptor = InterfaceDescriptor.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid interface description: {exc}") from exc
    return _default_marker_names(descriptor)


def _default_marker_names(descriptor: InterfaceDescriptor) -> InterfaceDescriptor:
    for operation in descriptor.operations:
        for param in operation.parameters:
            param.markers = [
                marker if marker.name else marker.model_copy(update={"name": param.name})
                for marker in param.markers
            ]
    return descriptor


def _load_from_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigurationError(f"Interface file not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read interface file {path}: {exc}") from exc
    if not content.strip():
        raise ConfigurationError(f"Interface file is empty: {path}")

    hint = "yaml" if path.suffix.lower() in (".yaml", ".yml") else ""
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless hinted as YAML."""
    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigurationError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_object(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse interface as JSON or YAML: {exc}") from exc
    return _require_object(result)


def _require_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise ConfigurationError(f"Interface must be a JSON/YAML object (got {got})")
    return result
