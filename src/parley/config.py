"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.parley/`` on macOS and Windows. See :func:`get_config_dir`.
* **User config** -- a single :class:`~parley.models.ClientConfig` JSON
  file. See :func:`load_config` and :func:`save_config`; edited from the
  command line with ``parley config``.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  arguments, environment variables, project-local config and user config.
* **Credential resolution** -- :func:`resolve_credential` reads the token
  from an env var or a file when it is given as a source descriptor.

File writes use a temp-file-then-rename strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from parley.exceptions import ConfigError
from parley.models import ClientConfig

_APP_NAME = "parley"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "parley.json"

ENV_TOKEN = "PARLEY_TOKEN"
ENV_BASE_URL = "PARLEY_BASE_URL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/parley/`` (default ``~/.config/parley/``).
    On macOS/Windows: ``~/.parley/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in a single rename.

    The data goes to a sibling temp file first, so readers see either the
    old or the new content and a failed write leaves *path* untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- User config ---


def config_path() -> Path:
    """Return the path of the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_config() -> ClientConfig:
    """Load the user configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~parley.models.ClientConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but is invalid JSON or fails
            validation.
    """
    path = config_path()
    if not path.is_file():
        return ClientConfig()
    data = _read_json(path, "config")
    try:
        return ClientConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ClientConfig) -> None:
    """Persist the user configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local overrides from ``./parley.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected an object")
    return data


# --- Precedence resolution ---


def resolve_config(
    token: Optional[str] = None,
    base_url: Optional[str] = None,
) -> ClientConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. Explicit arguments (``token``, ``base_url``)
        2. Environment variables (``PARLEY_TOKEN``, ``PARLEY_BASE_URL``)
        3. Project config (``./parley.json``)
        4. User config (``~/.config/parley/config.json``)
        5. Defaults

    The resolved ``token`` is passed through :func:`resolve_credential`,
    so any layer may hold a source descriptor instead of the raw token.
    """
    config = load_config()

    project = load_project_config()
    if project is not None:
        merged = config.model_dump()
        for key, value in project.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        try:
            config = ClientConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    env_token = os.environ.get(ENV_TOKEN)
    if env_token:
        config.token = env_token
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        config.base_url = env_base_url

    if token is not None:
        config.token = token
    if base_url is not None:
        config.base_url = base_url

    if config.token is not None:
        config.token = resolve_credential(config.token)
    return config


def resolve_credential(source: str) -> str:
    """Resolve a token that may be given as a source descriptor.

    ``env:NAME`` reads the environment variable ``NAME``; ``file:PATH``
    reads the file at ``PATH`` (``~`` expanded, whitespace stripped). Any
    other value is a literal token and is returned unchanged.

    Raises:
        ConfigError: If the variable is not set or the file is missing or
            unreadable.
    """
    scheme, _, target = source.partition(":")
    if scheme == "env" and target:
        value = os.environ.get(target)
        if value is None:
            raise ConfigError(f"Token source {source!r}: variable {target} is not set")
        return value
    if scheme == "file" and target:
        path = Path(target).expanduser()
        if not path.is_file():
            raise ConfigError(f"Token source {source!r}: {path} not found")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Token source {source!r}: cannot read {path}: {exc}") from exc
    return source
