"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.packsmith/config.yaml)
  3. Project config   (packsmith.yaml in cwd or the nearest parent)
  4. Environment variables (OPENAI_API_KEY, OPENAI_BASE_URL, PACKSMITH_*)
  5. Runtime arguments

YAML files may group keys by section; ``cache: {memory_mb: 2}`` is read as
``cache_memory_mb: 2``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from packsmith.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".packsmith" / "config.yaml"
_PROJECT_CONFIG_NAME = "packsmith.yaml"

_ENV_PREFIX = "PACKSMITH_"
_OPENAI_ENV: dict[str, str] = {
    "OPENAI_API_KEY": "api_key",
    "OPENAI_BASE_URL": "base_url",
}

_NUMERIC_KEYS: dict[str, type] = {
    "max_tokens": int,
    "max_retries": int,
    "request_timeout": float,
    "cache_memory_mb": float,
    "cache_session_mb": float,
}
_PATH_KEYS = ("session_db", "prompt_dir")

_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Only keys known to the defaults (plus ``api_key`` and ``base_url``) are
    read from files and the environment. Returns the merged dict.
    """
    config = get_defaults()
    known = set(config) | set(_OPENAI_ENV.values())

    for path in (_GLOBAL_CONFIG_PATH, _find_project_config()):
        if path is None:
            continue
        for key, value in (_load_yaml_config(path) or {}).items():
            if key in known:
                _apply(config, key, value, str(path))
            else:
                logger.warning("Unknown config key '%s' in %s, ignoring", key, path)

    for key, value in _load_env_vars(known).items():
        _apply(config, key, value, "environment")

    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    for key in _PATH_KEYS:
        if config.get(key):
            config[key] = str(Path(config[key]).expanduser())
    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file and flatten one level of sections."""
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None

    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update({f"{key}_{sub}": v for sub, v in value.items()})
        else:
            flat[key] = value
    return flat


def _find_project_config() -> Path | None:
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _load_env_vars(known: set[str]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for env_key, config_key in _OPENAI_ENV.items():
        if env_key in os.environ:
            result[config_key] = os.environ[env_key]

    for env_key, value in os.environ.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        config_key = env_key[len(_ENV_PREFIX):].lower()
        if config_key in known:
            result[config_key] = value
    return result


def _apply(config: dict[str, Any], key: str, value: Any, source: str) -> None:
    """Set key from one source, keeping the earlier value when it is invalid."""
    try:
        config[key] = _coerce_value(key, value)
    except ValueError as e:
        logger.warning(
            "Invalid value for '%s' in %s (%s), keeping %r", key, source, e, config.get(key)
        )


def _coerce_value(key: str, value: Any) -> Any:
    """Coerce a config file or environment value to the type the key expects.

    Environment values arrive as strings, YAML values as parsed scalars.
    Raises ValueError when a numeric key gets something that is not a number.
    """
    if key.endswith("_disabled"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY

    target_type = _NUMERIC_KEYS.get(key)
    if target_type is None:
        return value
    if isinstance(value, bool):
        raise ValueError(f"expected {target_type.__name__}, got {value!r}")
    try:
        return target_type(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected {target_type.__name__}, got {value!r}") from e
