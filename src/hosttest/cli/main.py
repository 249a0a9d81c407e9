# src/hosttest/cli/main.py

"""
Command line entry point: the `hosttest` click group and its shared options.
"""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
import structlog

from hosttest.cli.run_cmds import args_cli, run_cli
from hosttest.cli.utils import CliState, logging_options, setup_logging_from_context
from hosttest.telemetry import StructLogger

try:
    __version__ = version("hosttest")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="hosttest")
@click.option(
    "-C",
    "--cache-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="HOSTTEST_CACHE_ROOT",
    show_envvar=True,
    help="Directory holding host installs and isolated profiles, for every command.",
)
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    cache_root: Path | None,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    Run extension integration tests in a headless host editor.

    `run` launches the host with an isolated profile, relays its output and
    exits with its result; `args` prints the command line it would use.

    Precedence: CLI options > HOSTTEST_* variables > hosttest.toml > defaults.
    """
    ctx.obj = CliState(
        log_level=log_level,
        log_file=log_file,
        json_logs=bool(json_logs),
        cache_root=cache_root,
    )
    # Commands reconfigure once the config file is read; until then only warnings show.
    setup_logging_from_context(ctx, default_log_level="WARNING")
    log.debug("CLI group initialized", state=ctx.obj)


cli.add_command(run_cli)
cli.add_command(args_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
