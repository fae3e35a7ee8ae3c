"""Configuration management with XDG paths and precedence resolution.

This module handles persistent configuration for the ``openapi-ui``
command line:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openapi-ui/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global settings** -- A single :class:`~openapi_ui.models.Settings`
  JSON file storing defaults (spec location, cache TTL, retries, timeout).
* **Project settings** -- ``./openapi-ui.json`` in the working directory,
  so a repository can pin the spec it documents.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, project config, and global config into the
  effective :class:`~openapi_ui.models.Settings`.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars or files so they never appear in shell history.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from openapi_ui.exceptions import ConfigError
from openapi_ui.models import Settings

_APP_NAME = "openapi-ui"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "openapi-ui.json"

# Environment variable -> dotted Settings field.
ENV_VARS: dict[str, str] = {
    "OPENAPI_UI_SPEC": "spec",
    "OPENAPI_UI_BASE_URL": "base_url",
    "OPENAPI_UI_CACHE_TTL": "cache.ttl_seconds",
    "OPENAPI_UI_RETRIES": "retries",
    "OPENAPI_UI_RETRY_DELAY": "retry_delay",
    "OPENAPI_UI_TIMEOUT": "timeout",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on Linux and the BSDs."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/openapi-ui/`` (default
    ``~/.config/openapi-ui/``). On macOS/Windows: ``~/.openapi-ui/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Global settings ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json_file(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_global_settings() -> Settings:
    """Load the global settings from the config directory.

    Returns:
        The deserialised :class:`~openapi_ui.models.Settings`. If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = global_config_path()
    if not path.is_file():
        return Settings()
    data = _read_json_file(path, "global config")
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./openapi-ui.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json_file(path, "project config")


# --- Precedence resolution ---


def _set_dotted(target: dict[str, Any], dotted: str, value: Any) -> None:
    parts = dotted.split(".")
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_env_overrides() -> dict[str, Any]:
    """Collect settings from ``OPENAPI_UI_*`` environment variables.

    Empty variables are ignored. Values are left as strings; validation
    into numbers happens in :func:`resolve_settings`.
    """
    overrides: dict[str, Any] = {}
    for var, dotted in ENV_VARS.items():
        value = os.environ.get(var)
        if value:
            _set_dotted(overrides, dotted, value)
    return overrides


def resolve_settings(
    cli_spec: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_spec``, ``cli_base_url``, ``cli_format``)
        2. Environment variables (``OPENAPI_UI_*``)
        3. Project config (``./openapi-ui.json``)
        4. User config (``~/.config/openapi-ui/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~openapi_ui.models.Settings`.

    Raises:
        ConfigError: If any layer is malformed or the merged values fail
            validation (e.g. ``OPENAPI_UI_RETRIES=lots``).
    """
    data = load_global_settings().model_dump()

    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    data = _deep_merge(data, load_env_overrides())

    if cli_spec is not None:
        data["spec"] = cli_spec
    if cli_base_url is not None:
        data["base_url"] = cli_base_url
    if cli_format is not None:
        data["output_format"] = cli_format

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used literally

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the variable is unset or the file can't be read.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return source
