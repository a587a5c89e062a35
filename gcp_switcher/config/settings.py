"""Configuration loading for gcp-switcher.

Settings come from, lowest to highest precedence: built-in defaults,
~/.config/gcp-switcher/config.json, GCP_SWITCHER_* environment variables,
then explicit overrides from the command line.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from ..exceptions import ConfigurationError
from .constants import (
    COMMAND_TIMEOUT_SECONDS,
    CONFIG_DIR,
    CONFIG_FILE_NAME,
    ENV_VAR_DEFINITIONS,
    FALLBACK_TIMER_SECONDS,
    LOG_FILE_NAME,
    LOGIN_TIMEOUT_SECONDS,
    LONG_COMMAND_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes"}


@dataclass(frozen=True)
class SwitcherConfig:
    """Process-lifetime settings passed to the components that need them."""

    gcloud_binary: str = "gcloud"
    command_timeout: float = COMMAND_TIMEOUT_SECONDS
    long_timeout: float = LONG_COMMAND_TIMEOUT_SECONDS
    login_timeout: float = LOGIN_TIMEOUT_SECONDS
    fallback_seconds: float = FALLBACK_TIMER_SECONDS
    debug: bool = False
    log_file: Path = field(default_factory=lambda: CONFIG_DIR / LOG_FILE_NAME)

    def __post_init__(self) -> None:
        for name in ("command_timeout", "long_timeout", "login_timeout", "fallback_seconds"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive number", value=value)
        if not self.gcloud_binary:
            raise ConfigurationError("gcloud_binary must not be empty")


def get_config_path() -> Path:
    """Get the path of the JSON config file."""
    return CONFIG_DIR / CONFIG_FILE_NAME


def load_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Load raw settings from the JSON config file.

    Returns:
        Dict of known settings, or an empty dict if the file doesn't exist or is invalid
    """
    path = path or get_config_path()
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring config file {path}: expected a JSON object")
        return {}

    known = {f.name for f in fields(SwitcherConfig)}
    return {k: v for k, v in raw.items() if k in known}


def read_env_overrides(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect settings from GCP_SWITCHER_* environment variables.

    Raises:
        ConfigurationError: If a variable has a value outside its valid set.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for name, definition in ENV_VAR_DEFINITIONS.items():
        value = environ.get(name)
        if value is None:
            continue
        valid_values = definition.get("valid_values")
        if valid_values is not None and value.lower() not in valid_values:
            raise ConfigurationError(
                f"Invalid value '{value}' for {name}. Valid values: {valid_values}"
            )
        overrides[definition["field"]] = value
    return overrides


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    coerced = dict(values)
    if "log_file" in coerced:
        coerced["log_file"] = Path(coerced["log_file"]).expanduser()
    if "debug" in coerced and isinstance(coerced["debug"], str):
        coerced["debug"] = coerced["debug"].lower() in _TRUE_VALUES
    return coerced


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> SwitcherConfig:
    """Build the effective configuration.

    Args:
        path: Config file to read instead of the default location
        environ: Environment mapping to read instead of os.environ
        **overrides: Explicit values (e.g. CLI flags); None values are ignored

    Raises:
        ConfigurationError: If any merged value is invalid.
    """
    values: dict[str, Any] = {}
    values.update(load_config_file(path))
    values.update(read_env_overrides(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return SwitcherConfig(**_coerce(values))
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

