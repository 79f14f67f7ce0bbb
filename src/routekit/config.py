"""Transport configuration with precedence resolution.

:func:`load_transport_config` merges, from high to low precedence:

1. Explicit keyword overrides passed by the caller.
2. Environment variables (``ROUTEKIT_TIMEOUT``, ``ROUTEKIT_VERIFY_SSL``,
   ``ROUTEKIT_FOLLOW_REDIRECTS``, ``ROUTEKIT_MAX_WORKERS``,
   ``ROUTEKIT_USER_AGENT``).
3. A JSON config file named by ``ROUTEKIT_CONFIG``.
4. The defaults declared on :class:`~routekit.models.TransportConfig`.

Values are validated by Pydantic; any problem is reported as a
:class:`~routekit.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from routekit.exceptions import ConfigError
from routekit.models import TransportConfig

CONFIG_ENV_VAR = "ROUTEKIT_CONFIG"

_ENV_FIELDS = {
    "ROUTEKIT_TIMEOUT": "timeout",
    "ROUTEKIT_VERIFY_SSL": "verify_ssl",
    "ROUTEKIT_FOLLOW_REDIRECTS": "follow_redirects",
    "ROUTEKIT_MAX_WORKERS": "max_workers",
    "ROUTEKIT_USER_AGENT": "user_agent",
}


def load_config_file(path: Optional[str | Path] = None) -> dict[str, Any]:
    """Load the JSON config file.

    Args:
        path: Explicit file path. Defaults to the value of ``ROUTEKIT_CONFIG``.

    Returns:
        The parsed JSON object, or an empty dict when no file is configured.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or does not
            hold a JSON object.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return {}

    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def _env_values() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_var, field_name in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value:
            # Pydantic coerces "1"/"true"/"30.5" into the declared field types.
            values[field_name] = value
    return values


def load_transport_config(**overrides: Any) -> TransportConfig:
    """Resolve a :class:`TransportConfig` from overrides, environment, file and defaults.

    ``None``-valued overrides are ignored so callers can forward optional
    CLI flags directly.

    Raises:
        ConfigError: If the config file is unreadable or any resolved value
            fails validation.
    """
    data = load_config_file()
    data.update(_env_values())
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return TransportConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid transport configuration: {exc}") from exc
