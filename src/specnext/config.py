"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles the engine's persistent configuration:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specnext/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global config** -- A single :class:`~specnext.models.EngineConfig`
  JSON file storing user defaults.
* **Project config** -- An optional ``./specnext.json`` next to the
  document being translated.
* **Precedence resolution** -- :func:`resolve_config` merges explicit
  overrides, ``SPECNEXT_*`` environment variables, project-local config,
  and global config into the effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specnext.exceptions import ConfigError
from specnext.models import EngineConfig

logger = logging.getLogger(__name__)

_APP_NAME = "specnext"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specnext.json"
_ENV_PREFIX = "SPECNEXT_"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that follow the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specnext/`` (default ``~/.config/specnext/``).
    On macOS/Windows: ``~/.specnext/``.
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
    """Write *data* to *path* via a temp file in the same directory and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as fd:
            tmp_path = fd.name
            fd.write(data)
            fd.flush()
            os.fsync(fd.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Config files ---


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> EngineConfig:
    """Load the global configuration from the config directory.

    Returns:
        The stored :class:`~specnext.models.EngineConfig`, or defaults when
        no file exists.

    Raises:
        ConfigError: If the file exists but is not valid JSON or fails
            validation.
    """
    path = _global_config_path()
    data = _read_json_object(path, "global config")
    if data is None:
        return EngineConfig()
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: EngineConfig) -> Path:
    """Persist *config* atomically and return the path written."""
    path = _global_config_path()
    _atomic_write(path, json.dumps(config.model_dump(mode="json"), indent=2) + "\n")
    return path


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load ``specnext.json`` from *directory* (default: the working directory).

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    base = directory if directory is not None else Path.cwd()
    return _read_json_object(base / _PROJECT_CONFIG_FILENAME, "project config")


# --- Environment variables ---


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


# Variable suffix -> (dotted config path, parser)
_ENV_SETTINGS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "STRICT_REFERENCES": ("strict_references", _parse_bool),
    "INT64_TYPE": ("types.int64_type", str),
    "BINARY_TYPE": ("types.binary_type", str),
    "VALIDATION_STRICT": ("validation.strict", _parse_bool),
    "VALIDATION_COERCE": ("validation.coerce", _parse_bool),
    "VALIDATION_IMPORT_PATH": ("validation.import_path", str),
    "UI_EXTENSION": ("forms.ui_extension", str),
    "MULTILINE_THRESHOLD": ("forms.multiline_threshold", int),
    "MOCK_SEED": ("mock.seed", int),
    "MOCK_MAX_DEPTH": ("mock.max_depth", int),
}


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect ``SPECNEXT_*`` environment variables as a nested override dict.

    Raises:
        ConfigError: If a variable cannot be parsed.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for suffix, (dotted, parser) in _ENV_SETTINGS.items():
        name = _ENV_PREFIX + suffix
        raw = environ.get(name)
        if raw is None or raw == "":
            continue
        try:
            value = parser(raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid value for {name}: {exc}") from exc
        _set_dotted(overrides, dotted, value)
    return overrides


def _set_dotted(target: dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    for key in parents:
        target = target.setdefault(key, {})
    target[leaf] = value


def _deep_merge(base: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in layer.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    overrides: Optional[Mapping[str, Any]] = None,
    project_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineConfig:
    """Resolve the effective engine configuration.

    Precedence (high to low):
        1. *overrides* (nested dict, e.g. ``{"validation": {"strict": True}}``)
        2. Environment variables (``SPECNEXT_STRICT_REFERENCES``, ...)
        3. Project config (``./specnext.json``)
        4. User config (``~/.config/specnext/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is malformed or the merged result fails
            validation.
    """
    merged: dict[str, Any] = load_global_config().model_dump()

    project = load_project_config(project_dir)
    if project is not None:
        logger.debug("Applying project config from %s", project_dir or Path.cwd())
        merged = _deep_merge(merged, project)

    merged = _deep_merge(merged, env_overrides(environ))
    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        return EngineConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
