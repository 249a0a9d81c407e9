#
# src/hosttest/resolver/cached.py
#
"""
Resolves a host executable from installs already unpacked under a cache root.

Layout expected under the cache root:

    <cache_root>/host-<platform>-<version>/<platform executable>

Nothing is downloaded; a missing install is a ResolutionError.
"""
import asyncio
import os
import re
import sys
from pathlib import Path

import structlog

from hosttest.exceptions import ResolutionError
from hosttest.resolver.protocols import (
    ProgressEvent,
    ProgressReporter,
    ProgressStage,
    ResolvedExecutable,
)
from hosttest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("resolver.cached")

STABLE = "stable"
INSIDERS = "insiders"
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(-insider)?$")

PLATFORMS = ("darwin", "darwin-arm64", "win32-archive", "win32-x64-archive", "linux-x64", "linux-arm64")

# (stable, insiders) executable paths relative to the install directory.
_EXECUTABLES: dict[str, tuple[str, str]] = {
    "darwin": (
        "Visual Studio Code.app/Contents/MacOS/Electron",
        "Visual Studio Code - Insiders.app/Contents/MacOS/Electron",
    ),
    "win32": ("Code.exe", "Code - Insiders.exe"),
    "linux": ("code", "code-insiders"),
}


def default_platform() -> str:
    """The platform to resolve when the caller did not ask for one."""
    if sys.platform == "win32":
        return "win32-x64-archive"
    if sys.platform == "darwin":
        return "darwin"
    return "linux-x64"


def _is_insiders(version: str) -> bool:
    return version == INSIDERS or version.endswith("-insider")


def executable_relpath(platform: str, version: str) -> str:
    family = platform.split("-", 1)[0]
    stable_name, insiders_name = _EXECUTABLES[family]
    return insiders_name if _is_insiders(version) else stable_name


class CachedInstallResolver:
    """
    Implements the ExecutableResolver protocol by locating an existing
    install directory under the cache root.
    """

    def __init__(self, cache_root: Path):
        self.cache_root = Path(cache_root)

    def install_dir(self, version: str, platform: str) -> Path:
        return self.cache_root / f"host-{platform}-{version}"

    async def resolve(
        self,
        version: str | None = None,
        platform: str | None = None,
        reporter: ProgressReporter | None = None,
    ) -> ResolvedExecutable:
        version = version or STABLE
        platform = platform or default_platform()
        resolve_log = log.bind(version=version, platform=platform, cache_root=str(self.cache_root))

        try:
            if reporter:
                reporter.report(ProgressEvent(ProgressStage.RESOLVING_VERSION, {"version": version}))
            self._validate(version, platform)
            if reporter:
                reporter.report(ProgressEvent(ProgressStage.RESOLVED_VERSION, {"version": version}))

            resolved = await asyncio.to_thread(self._locate, version, platform, reporter)
        except ResolutionError as e:
            resolve_log.error("Could not resolve host executable", error=str(e), emoji_key="fail")
            if reporter:
                reporter.error(e)
            raise

        resolve_log.info(
            "Resolved host executable",
            executable=str(resolved.executable_path),
            emoji_key="resolve",
        )
        return resolved

    def _validate(self, version: str, platform: str) -> None:
        if version not in (STABLE, INSIDERS) and not _VERSION_RE.match(version):
            raise ResolutionError(f"Invalid version '{version}'", version=version, platform=platform)
        if platform not in PLATFORMS:
            raise ResolutionError(
                f"Unsupported platform '{platform}'. Available platforms: {list(PLATFORMS)}",
                version=version,
                platform=platform,
            )

    def _locate(self, version: str, platform: str, reporter: ProgressReporter | None) -> ResolvedExecutable:
        install_dir = self.install_dir(version, platform)
        if reporter:
            reporter.report(ProgressEvent(ProgressStage.SEARCHING_INSTALL, {"install_dir": str(install_dir)}))

        if not install_dir.is_dir():
            raise ResolutionError(
                f"No host install found at '{install_dir}'", version=version, platform=platform
            )

        executable = install_dir / executable_relpath(platform, version)
        if not executable.is_file():
            raise ResolutionError(
                f"Host executable missing from install: '{executable}'", version=version, platform=platform
            )
        if not os.access(executable, os.X_OK):
            raise ResolutionError(
                f"Host executable is not executable: '{executable}'", version=version, platform=platform
            )

        if reporter:
            reporter.report(ProgressEvent(ProgressStage.FOUND_MATCHING_INSTALL, {"install_dir": str(install_dir)}))
        return ResolvedExecutable(executable_path=executable, cache_root=self.cache_root)

# 🔼⚙️
