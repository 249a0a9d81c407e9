#
# config/models.py
#
"""
Attrs-based data models for hosttest run and file configuration.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from attrs import define, field, validators

if TYPE_CHECKING:
    from hosttest.resolver.protocols import ProgressReporter

DEFAULT_CACHE_DIRNAME = ".hosttest"
DEFAULT_VERSION = "stable"


def default_cache_root() -> Path:
    return Path.cwd() / DEFAULT_CACHE_DIRNAME


# --- Validators and converters ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_env(inst: Any, attr: Any, value: Mapping[str, str | None]) -> None:
    for key, env_value in value.items():
        if not isinstance(key, str) or not key:
            raise ValueError(f"Environment variable names must be non-empty strings, got {key!r}")
        if env_value is not None and not isinstance(env_value, str):
            raise ValueError(f"Environment variable '{key}' must be a string or None, got {env_value!r}")


def _to_optional_path(value: str | Path | None) -> Path | None:
    return None if value is None else Path(value)


# --- Per-run configuration ---
@define(frozen=True, slots=True, kw_only=True)
class TestRunConfiguration:
    """
    Everything one host test run needs. Immutable for the duration of the run.

    The extension and test runner paths are kept as given (str or PathLike)
    and handed to the host verbatim, so callers should pass absolute paths.
    """

    __test__ = False

    extension_development_path: str = field(converter=os.fspath)
    extension_tests_path: str = field(converter=os.fspath)
    executable_path: Path | None = field(default=None, converter=_to_optional_path)
    version: str = field(default=DEFAULT_VERSION)
    platform: str | None = field(default=None)
    extension_tests_env: Mapping[str, str | None] = field(
        factory=dict, converter=dict, validator=_validate_env
    )
    launch_args: tuple[str, ...] = field(factory=tuple, converter=tuple)
    reuse_machine_install: bool = field(default=False)
    cache_root: Path = field(factory=default_cache_root, converter=Path)
    reporter: "ProgressReporter | None" = field(default=None, repr=False)


# --- File configuration ---
@define(frozen=True, slots=True)
class RunSettings:
    """Defaults for `hosttest run` read from the `[run]` and `[env]` tables."""

    extension_development_path: Path | None = field(default=None, converter=_to_optional_path)
    extension_tests_path: Path | None = field(default=None, converter=_to_optional_path)
    executable_path: Path | None = field(default=None, converter=_to_optional_path)
    version: str = field(default=DEFAULT_VERSION)
    platform: str | None = field(default=None)
    cache_root: Path | None = field(default=None, converter=_to_optional_path)
    reuse_machine_install: bool = field(default=False)
    launch_args: tuple[str, ...] = field(factory=tuple, converter=tuple)
    env: Mapping[str, str | None] = field(factory=dict, converter=dict, validator=_validate_env)


@define(frozen=True, slots=True)
class GlobalConfig:
    """The `[global]` table. An unset `log_level` defers to the command's default."""

    log_level: str | None = field(default=None, validator=validators.optional(_validate_log_level))

    @property
    def numeric_log_level(self) -> int | None:
        return None if self.log_level is None else logging.getLevelName(self.log_level.upper())


@define(frozen=True, slots=True)
class HostTestConfig:
    """Root configuration object loaded from `hosttest.toml`."""

    run: RunSettings = field(factory=RunSettings)
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})


# 🔼⚙️
