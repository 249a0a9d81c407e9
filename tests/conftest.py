import logging
import stat
import sys
import textwrap
from pathlib import Path

import pytest
import structlog

from hosttest.config import TestRunConfiguration

FAKE_HOST_SOURCE = textwrap.dedent(
    """\
    import json
    import os
    import signal
    import sys

    print(json.dumps({"argv": sys.argv[1:], "env": dict(os.environ)}))
    sys.stdout.flush()
    sys.stderr.write("fake host stderr\\n")
    sys.stderr.flush()

    if os.environ.get("FAKE_HOST_SIGNAL"):
        os.kill(os.getpid(), getattr(signal, os.environ["FAKE_HOST_SIGNAL"]))
    sys.exit(int(os.environ.get("FAKE_HOST_EXIT", "0")))
    """
)


def write_fake_host(path: Path) -> Path:
    """Writes an executable script that reports its argv/env as JSON on stdout."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{FAKE_HOST_SOURCE}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests point logging at CliRunner streams; undo that after each test."""
    yield
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)


@pytest.fixture
def make_fake_host():
    return write_fake_host


@pytest.fixture
def fake_host(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for key in ("FAKE_HOST_EXIT", "FAKE_HOST_SIGNAL"):
        monkeypatch.delenv(key, raising=False)
    return write_fake_host(tmp_path / "bin" / "fake-host")


@pytest.fixture
def extension_paths(tmp_path: Path) -> tuple[Path, Path]:
    development_path = tmp_path / "extension"
    tests_path = development_path / "out" / "test" / "suite"
    tests_path.mkdir(parents=True)
    (development_path / "package.json").write_text("{}")
    return development_path, tests_path


@pytest.fixture
def run_config(extension_paths: tuple[Path, Path], tmp_path: Path) -> TestRunConfiguration:
    development_path, tests_path = extension_paths
    return TestRunConfiguration(
        extension_development_path=development_path,
        extension_tests_path=tests_path,
        cache_root=tmp_path / "cache",
    )
