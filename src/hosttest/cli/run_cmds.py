# src/hosttest/cli/run_cmds.py

import asyncio
import logging
import sys
from pathlib import Path

import click
import structlog

from hosttest.cli.utils import get_state, logging_options, parse_env_assignments, setup_logging_from_context
from hosttest.config import HostTestConfig, RunSettings, TestRunConfiguration, default_cache_root, load_config
from hosttest.exceptions import ConfigurationError, HostTestError, NonZeroExitError
from hosttest.launch.arguments import build_launch_args
from hosttest.resolver import ConsoleReporter, SilentReporter
from hosttest.runner import run_tests
from hosttest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")

DEFAULT_CONFIG_PATH = Path("hosttest.toml")


def run_options(f):
    """Options shared by `run` and `args`."""
    options = [
        click.option(
            "-c",
            "--config-path",
            type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
            default=DEFAULT_CONFIG_PATH,
            show_default=True,
            envvar="HOSTTEST_CONF",
            show_envvar=True,
            help="Optional TOML file with defaults for this command.",
        ),
        click.option(
            "--extension-development-path",
            type=click.Path(path_type=Path),
            help="Absolute path to the extension root.",
        ),
        click.option(
            "--extension-tests-path",
            type=click.Path(path_type=Path),
            help="Absolute path to the extension test runner.",
        ),
        click.option(
            "--executable",
            "executable_path",
            type=click.Path(dir_okay=False, path_type=Path),
            envvar="HOSTTEST_EXECUTABLE",
            show_envvar=True,
            help="Host executable to launch. Resolved from the cache root when omitted.",
        ),
        click.option("--host-version", default=None, help="Host version to resolve (stable, insiders, X.Y.Z)."),
        click.option("--platform", default=None, help="Host platform to resolve. Defaults to the current one."),
        click.option(
            "--cache-root",
            type=click.Path(file_okay=False, path_type=Path),
            help="Directory holding host installs and isolated profiles (overrides the group option).",
        ),
        click.option(
            "--reuse-machine-install/--isolated",
            default=None,
            help="Use this machine's extensions and user data instead of isolated ones.",
        ),
        click.option(
            "-e",
            "--env",
            "env",
            multiple=True,
            callback=parse_env_assignments,
            help="KEY=VALUE passed to the test environment (repeatable). A bare KEY unsets it.",
        ),
        click.argument("launch_args", nargs=-1, type=click.UNPROCESSED),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _load_file_config(ctx: click.Context, config_path: Path) -> HostTestConfig:
    """The config file, or defaults when the implicit `hosttest.toml` is absent."""
    explicit = ctx.get_parameter_source("config_path") not in (
        click.core.ParameterSource.DEFAULT,
        None,
    )
    if not explicit and not config_path.exists():
        return HostTestConfig()
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        raise click.UsageError(str(e), ctx=ctx) from e


def _prepare(ctx: click.Context, config_path: Path, kwargs: dict, default_log_level: str = "INFO") -> RunSettings:
    """Reads the config file, then configures logging with its `[global]` level as fallback."""
    file_config = _load_file_config(ctx, config_path)
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.pop("log_level", None),
        local_log_file=kwargs.pop("log_file", None),
        local_json_logs=kwargs.pop("json_logs", None),
        config_log_level=file_config.global_config.log_level,
        default_log_level=default_log_level,
    )
    log.debug("Configuration loaded", config_path=str(config_path), run=file_config.run)
    if kwargs.get("cache_root") is None:
        kwargs["cache_root"] = get_state(ctx).cache_root
    return file_config.run


def build_run_configuration(
    settings: RunSettings,
    *,
    extension_development_path: Path | None,
    extension_tests_path: Path | None,
    executable_path: Path | None,
    host_version: str | None,
    platform: str | None,
    cache_root: Path | None,
    reuse_machine_install: bool | None,
    env: dict[str, str | None],
    launch_args: tuple[str, ...],
    quiet: bool = False,
) -> TestRunConfiguration:
    """Merges command line values over file settings (command line wins)."""
    development_path = extension_development_path or settings.extension_development_path
    tests_path = extension_tests_path or settings.extension_tests_path
    if development_path is None or tests_path is None:
        raise ConfigurationError(
            "Both --extension-development-path and --extension-tests-path are required "
            "(on the command line or in the [run] table)."
        )

    return TestRunConfiguration(
        extension_development_path=development_path.absolute(),
        extension_tests_path=tests_path.absolute(),
        executable_path=executable_path or settings.executable_path,
        version=host_version or settings.version,
        platform=platform or settings.platform,
        cache_root=(cache_root or settings.cache_root or default_cache_root()).absolute(),
        reuse_machine_install=(
            reuse_machine_install if reuse_machine_install is not None else settings.reuse_machine_install
        ),
        extension_tests_env={**settings.env, **env},
        launch_args=launch_args or settings.launch_args,
        reporter=SilentReporter() if quiet else ConsoleReporter(),
    )


def _run(config: TestRunConfiguration) -> int:
    try:
        return asyncio.run(run_tests(config))
    except KeyboardInterrupt:
        log.warning("Test run interrupted by KeyboardInterrupt (CTRL-C).")
        return 130
    except NonZeroExitError as e:
        log.error("Host tests failed", exit_code=e.exit_code, emoji_key="fail")
        return e.exit_code
    except HostTestError as e:
        log.error("Host test run failed", error=str(e), error_type=type(e).__name__, emoji_key="fail")
        return 1
    finally:
        logging.shutdown()


@click.command(name="run", context_settings={"ignore_unknown_options": True})
@run_options
@click.option("-q", "--quiet", is_flag=True, help="Do not print resolver progress.")
@logging_options
@click.pass_context
def run_cli(ctx: click.Context, config_path: Path, quiet: bool, **kwargs):
    """Launch the host and run the extension tests.

    Arguments after `--` are passed to the host before the mandatory flags.
    """
    settings = _prepare(ctx, config_path, kwargs)
    try:
        config = build_run_configuration(settings, quiet=quiet, **kwargs)
    except ConfigurationError as e:
        log.error("Invalid configuration", error=str(e))
        raise click.UsageError(str(e), ctx=ctx) from e

    exit_code = _run(config)
    log.debug("'run' command finished.", exit_code=exit_code)
    if exit_code != 0:
        sys.exit(exit_code)


@click.command(name="args", context_settings={"ignore_unknown_options": True})
@run_options
@logging_options
@click.pass_context
def args_cli(ctx: click.Context, config_path: Path, **kwargs):
    """Print the host command line `run` would use, one token per line."""
    settings = _prepare(ctx, config_path, kwargs, default_log_level="WARNING")
    try:
        config = build_run_configuration(settings, quiet=True, **kwargs)
    except ConfigurationError as e:
        raise click.UsageError(str(e), ctx=ctx) from e

    for token in build_launch_args(config, config.cache_root):
        click.echo(token)

# 🔼⚙️
