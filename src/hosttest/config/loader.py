#
# config/loader.py
#
"""
Loads `hosttest.toml` into HostTestConfig.
"""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from attrs import fields

from hosttest.config.models import GlobalConfig, HostTestConfig, RunSettings
from hosttest.exceptions import ConfigurationError
from hosttest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")

_RUN_KEYS = {
    "extension_development_path",
    "extension_tests_path",
    "executable_path",
    "version",
    "platform",
    "cache_root",
    "reuse_machine_install",
    "launch_args",
}


def _table(data: Mapping[str, Any], name: str, path: Path) -> Mapping[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'[{name}]' in '{path}' must be a table")
    return value


def _resolve_relative(value: Any, base_dir: Path) -> Any:
    """Paths in the file are relative to the file, not the working directory."""
    if value is None:
        return None
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else (base_dir / candidate).resolve()


def _build_run_settings(run_data: Mapping[str, Any], env_data: Mapping[str, Any], path: Path) -> RunSettings:
    unknown = set(run_data) - _RUN_KEYS
    if unknown:
        raise ConfigurationError(f"Unknown keys in '[run]' of '{path}': {sorted(unknown)}")

    kwargs = dict(run_data)
    for key in ("extension_development_path", "extension_tests_path", "executable_path", "cache_root"):
        if key in kwargs:
            kwargs[key] = _resolve_relative(kwargs[key], path.parent)

    launch_args = kwargs.get("launch_args", [])
    if not isinstance(launch_args, list) or not all(isinstance(a, str) for a in launch_args):
        raise ConfigurationError(f"'launch_args' in '{path}' must be a list of strings")
    if not isinstance(kwargs.get("reuse_machine_install", False), bool):
        raise ConfigurationError(f"'reuse_machine_install' in '{path}' must be a boolean")

    return RunSettings(env=dict(env_data), **kwargs)


def load_config(config_path: Path) -> HostTestConfig:
    """
    Reads and validates a hosttest TOML configuration file.

    Raises:
        ConfigurationError: if the file is missing, malformed or has invalid values.
    """
    load_log = log.bind(config_path=str(config_path))
    load_log.debug("Loading configuration")

    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: '{config_path}'", details=e) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in '{config_path}': {e}", details=e) from e

    # Top-level tables are HostTestConfig fields, named by their `toml_name` metadata, plus [env].
    table_names = {f.name: f.metadata.get("toml_name", f.name) for f in fields(HostTestConfig)}
    unknown = set(data) - set(table_names.values()) - {"env"}
    if unknown:
        raise ConfigurationError(f"Unknown tables in '{config_path}': {sorted(unknown)}")
    sections = {name: _table(data, toml_name, config_path) for name, toml_name in table_names.items()}

    try:
        run_settings = _build_run_settings(sections["run"], _table(data, "env", config_path), config_path)
        global_config = GlobalConfig(**sections["global_config"])
    except (TypeError, ValueError) as e:
        load_log.error("Configuration validation failed", error=str(e))
        raise ConfigurationError(f"Invalid configuration in '{config_path}': {e}", details=e) from e

    config = HostTestConfig(run=run_settings, global_config=global_config)
    load_log.debug("Configuration loaded", run=run_settings)
    return config


# 🔼⚙️
