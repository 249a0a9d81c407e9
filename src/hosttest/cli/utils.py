# src/hosttest/cli/utils.py

import logging
from pathlib import Path

import click
import structlog
from attrs import define

from hosttest.telemetry import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


@define(slots=True)
class CliState:
    """Group-level options shared with every command through `ctx.obj`."""

    log_level: str | None = None
    log_file: str | None = None
    json_logs: bool = False
    cache_root: Path | None = None


def get_state(ctx: click.Context) -> CliState:
    return ctx.ensure_object(CliState)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="HOSTTEST_LOG_LEVEL",
        help="Set the logging level (overrides config file).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="HOSTTEST_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="HOSTTEST_JSON_LOGS",
        help="Output console logs as stderr JSON lines.",
    )(f)
    return f


def resolve_log_level(*candidates: str | None, default: str = "INFO") -> int:
    """The first level name given, in precedence order, as a numeric level."""
    name = next((c for c in candidates if c), default)
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    config_log_level: str | None = None,
    default_log_level: str = "INFO",
) -> None:
    """
    Configures logging for a command.

    Level precedence: the command's own option, the group option (both also
    read from HOSTTEST_LOG_LEVEL), the config file's `[global] log_level`,
    then `default_log_level`.
    """
    state = get_state(ctx)
    level = resolve_log_level(local_log_level, state.log_level, config_log_level, default=default_log_level)
    log_file_path = local_log_file or state.log_file
    use_json_logs = local_json_logs if local_json_logs is not None else state.json_logs

    core_setup_logging(level=level, json_logs=use_json_logs, log_file=log_file_path)
    log.debug(
        "CLI logging initialized",
        level=logging.getLevelName(level),
        file=log_file_path or "console",
        json=use_json_logs,
    )


def parse_env_assignments(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str | None]:
    """Click callback turning repeated `KEY=VALUE` options into a mapping.

    A bare `KEY` (no `=`) unsets the variable in the host's environment.
    """
    env: dict[str, str | None] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not key:
            raise click.BadParameter(f"'{item}' is not a KEY=VALUE assignment", ctx=ctx, param=param)
        env[key] = value if sep else None
    return env

# ⚙️🛠️
