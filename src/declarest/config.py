"""Client configuration with XDG paths and precedence resolution.

:func:`load_config` produces the effective
:class:`~declarest.models.ClientConfig`. Precedence (high to low):

    1. Environment overrides (``DECLAREST_CONNECT_TIMEOUT``,
       ``DECLAREST_READ_TIMEOUT``, ``DECLAREST_MAX_ATTEMPTS``,
       ``DECLAREST_LOG_WIRE``)
    2. An explicit ``path`` argument
    3. The file named by ``DECLAREST_CONFIG``
    4. User config (``$XDG_CONFIG_HOME/declarest/config.json``)
    5. Defaults

:func:`retryer_from_config` turns the retry settings into a
:class:`~declarest.retry.DefaultRetryer`; ``config.options`` is used as-is.
"""

from __future__ import annotations

import json
import os
import platform
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from declarest.exceptions import ConfigurationError
from declarest.models import ClientConfig
from declarest.retry import DefaultRetryer

_APP_NAME = "declarest"
_CONFIG_FILENAME = "config.json"

_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DECLAREST_CONNECT_TIMEOUT": ("options", "connect_timeout"),
    "DECLAREST_READ_TIMEOUT": ("options", "read_timeout"),
    "DECLAREST_MAX_ATTEMPTS": ("retry", "max_attempts"),
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory. It is not created.

    On Linux/BSD: ``$XDG_CONFIG_HOME/declarest/`` (default ``~/.config/declarest/``).
    On macOS/Windows: ``~/.declarest/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        return base / _APP_NAME
    return Path.home() / f".{_APP_NAME}"


# --- Loading ---


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config at {path} must be a JSON object")
    return data


def _resolve_path(path: Optional[str | Path]) -> Optional[Path]:
    if path is not None:
        explicit = Path(path).expanduser()
        if not explicit.is_file():
            raise ConfigurationError(f"Config file not found: {explicit}")
        return explicit
    env_path = os.environ.get("DECLAREST_CONFIG")
    if env_path:
        from_env = Path(env_path).expanduser()
        if not from_env.is_file():
            raise ConfigurationError(f"Config file not found: {from_env} (DECLAREST_CONFIG)")
        return from_env
    user = get_config_dir() / _CONFIG_FILENAME
    return user if user.is_file() else None


def _apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    for var, (section, field) in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            data.setdefault(section, {})[field] = value
    log_wire = environ.get("DECLAREST_LOG_WIRE")
    if log_wire:
        data["log_wire"] = log_wire.lower() in ("1", "true", "yes", "on")
    return data


def load_config(path: Optional[str | Path] = None) -> ClientConfig:
    """Resolve the effective client configuration.

    Args:
        path: Explicit JSON config file. Takes precedence over
            ``DECLAREST_CONFIG`` and the user config file.

    Returns:
        The validated :class:`~declarest.models.ClientConfig`.

    Raises:
        ConfigurationError: If a named file is missing, is not valid JSON, or
            fails validation.
    """
    config_path = _resolve_path(path)
    data = _read_json(config_path) if config_path is not None else {}
    data = _apply_env_overrides(data, os.environ)
    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        where = config_path or "environment"
        raise ConfigurationError(f"Invalid client config ({where}): {exc}") from exc


def retryer_from_config(config: ClientConfig) -> DefaultRetryer:
    """Build the default retry policy described by *config*."""
    return DefaultRetryer(
        period=config.retry.period,
        max_period=config.retry.max_period,
        max_attempts=config.retry.max_attempts,
    )
