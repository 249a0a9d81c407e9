#
# tests/unit/test_resolver.py
#
"""
Tests for the cache-based executable resolver and progress reporters.
"""

import io
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from hosttest.exceptions import ResolutionError
from hosttest.resolver import (
    CachedInstallResolver,
    ConsoleReporter,
    ExecutableResolver,
    ProgressEvent,
    ProgressReporter,
    ProgressStage,
    SilentReporter,
    default_platform,
)
from hosttest.resolver.cached import executable_relpath

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="relies on POSIX executable bits")


def _install(cache_root: Path, make_fake_host, platform: str = "linux-x64", version: str = "stable") -> Path:
    install_dir = cache_root / f"host-{platform}-{version}"
    return make_fake_host(install_dir / executable_relpath(platform, version))


class TestExecutableRelpath:
    @pytest.mark.parametrize(
        ("platform", "version", "expected"),
        [
            ("linux-x64", "stable", "code"),
            ("linux-x64", "insiders", "code-insiders"),
            ("linux-arm64", "1.90.0-insider", "code-insiders"),
            ("win32-x64-archive", "1.90.0", "Code.exe"),
            ("darwin-arm64", "stable", "Visual Studio Code.app/Contents/MacOS/Electron"),
        ],
    )
    def test_per_platform_names(self, platform: str, version: str, expected: str) -> None:
        assert executable_relpath(platform, version) == expected

    def test_default_platform_is_known(self) -> None:
        assert default_platform() in ("linux-x64", "darwin", "win32-x64-archive")


@pytest.mark.asyncio
class TestCachedInstallResolver:
    """Locating host installs under a cache root."""

    async def test_satisfies_protocol(self, tmp_path: Path):
        assert isinstance(CachedInstallResolver(tmp_path), ExecutableResolver)

    @posix_only
    async def test_resolves_existing_install(self, tmp_path: Path, make_fake_host):
        executable = _install(tmp_path, make_fake_host, version="1.90.0")

        resolved = await CachedInstallResolver(tmp_path).resolve("1.90.0", "linux-x64")

        assert resolved.executable_path == executable
        assert resolved.cache_root == tmp_path

    @posix_only
    async def test_defaults_to_stable(self, tmp_path: Path, make_fake_host):
        executable = _install(tmp_path, make_fake_host, platform="linux-x64")

        resolved = await CachedInstallResolver(tmp_path).resolve(None, "linux-x64")

        assert resolved.executable_path == executable

    @posix_only
    async def test_reports_progress_in_order(self, tmp_path: Path, make_fake_host):
        _install(tmp_path, make_fake_host)
        reporter = MagicMock()

        await CachedInstallResolver(tmp_path).resolve("stable", "linux-x64", reporter=reporter)

        stages = [c.args[0].stage for c in reporter.report.call_args_list]
        assert stages == [
            ProgressStage.RESOLVING_VERSION,
            ProgressStage.RESOLVED_VERSION,
            ProgressStage.SEARCHING_INSTALL,
            ProgressStage.FOUND_MATCHING_INSTALL,
        ]
        reporter.error.assert_not_called()

    @pytest.mark.parametrize("version", ["latest", "1.90", "v1.90.0", "1..0"])
    async def test_invalid_version(self, tmp_path: Path, version: str):
        reporter = MagicMock()

        with pytest.raises(ResolutionError, match="Invalid version"):
            await CachedInstallResolver(tmp_path).resolve(version, "linux-x64", reporter=reporter)

        reporter.error.assert_called_once()

    async def test_unsupported_platform(self, tmp_path: Path):
        with pytest.raises(ResolutionError, match="Unsupported platform"):
            await CachedInstallResolver(tmp_path).resolve("stable", "amiga")

    async def test_missing_install(self, tmp_path: Path):
        with pytest.raises(ResolutionError, match="No host install found") as exc_info:
            await CachedInstallResolver(tmp_path).resolve("stable", "linux-x64")

        assert exc_info.value.version == "stable"
        assert exc_info.value.platform == "linux-x64"

    async def test_missing_executable_in_install(self, tmp_path: Path):
        (tmp_path / "host-linux-x64-stable").mkdir()

        with pytest.raises(ResolutionError, match="missing from install"):
            await CachedInstallResolver(tmp_path).resolve("stable", "linux-x64")

    @posix_only
    async def test_non_executable_file(self, tmp_path: Path):
        executable = tmp_path / "host-linux-x64-stable" / "code"
        executable.parent.mkdir()
        executable.write_text("")
        executable.chmod(0o644)

        with pytest.raises(ResolutionError, match="not executable"):
            await CachedInstallResolver(tmp_path).resolve("stable", "linux-x64")


class TestReporters:
    def test_reporters_satisfy_protocol(self) -> None:
        assert isinstance(SilentReporter(), ProgressReporter)
        assert isinstance(ConsoleReporter(), ProgressReporter)

    def test_console_reporter_prints_stage_message(self) -> None:
        buffer = io.StringIO()
        reporter = ConsoleReporter(console=Console(file=buffer, width=200))

        reporter.report(ProgressEvent(ProgressStage.FOUND_MATCHING_INSTALL, {"install_dir": "/cache/[x]"}))
        reporter.error(ValueError("boom"))

        output = buffer.getvalue()
        assert "Found existing install in /cache/[x]" in output
        assert "boom" in output

    def test_console_reporter_tolerates_missing_details(self) -> None:
        buffer = io.StringIO()
        reporter = ConsoleReporter(console=Console(file=buffer, width=200))

        reporter.report(ProgressEvent(ProgressStage.RESOLVING_VERSION))

        assert "Resolving version" in buffer.getvalue()
