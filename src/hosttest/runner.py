#
# src/hosttest/runner.py
#
"""
Public entry point: run an extension's tests inside a host instance.
"""
import asyncio
from pathlib import Path

import structlog

from hosttest.config.models import TestRunConfiguration
from hosttest.launch.arguments import build_launch_args
from hosttest.launch.supervisor import ProcessSupervisor
from hosttest.resolver.cached import CachedInstallResolver
from hosttest.resolver.protocols import ExecutableResolver
from hosttest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runner")


async def run_tests(
    config: TestRunConfiguration,
    resolver: ExecutableResolver | None = None,
    supervisor: ProcessSupervisor | None = None,
) -> int:
    """
    Runs the extension test suite described by `config`.

    If no executable path is configured, one is obtained from `resolver`
    (by default a CachedInstallResolver over `config.cache_root`). Resolver
    and supervisor errors propagate unchanged.

    Returns:
        The exit code of the host process (0 on success).
    """
    run_log = log.bind(
        extension_development_path=config.extension_development_path,
        extension_tests_path=config.extension_tests_path,
    )

    if config.executable_path is None:
        resolver = resolver or CachedInstallResolver(config.cache_root)
        run_log.debug("No executable configured, resolving", version=config.version, platform=config.platform)
        resolved = await resolver.resolve(config.version, config.platform, reporter=config.reporter)
        executable: Path = resolved.executable_path
        cache_root: Path = resolved.cache_root
    else:
        executable = config.executable_path
        cache_root = config.cache_root

    args = build_launch_args(config, cache_root)
    run_log.debug("Built launch arguments", args=args, cache_root=str(cache_root))

    supervisor = supervisor or ProcessSupervisor()
    return await supervisor.run(executable, args, config.extension_tests_env)


def run_tests_sync(
    config: TestRunConfiguration,
    resolver: ExecutableResolver | None = None,
) -> int:
    """Blocking wrapper around `run_tests` for callers without an event loop."""
    return asyncio.run(run_tests(config, resolver=resolver))

# 🔼⚙️
