#
# src/hosttest/launch/arguments.py
#
"""
Builds the command line handed to the host executable.
"""
import os
from collections.abc import Sequence
from pathlib import Path

from hosttest.config.models import TestRunConfiguration

# Always present, in this order, after any caller supplied arguments.
MANDATORY_FLAGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-updates",
    "--skip-welcome",
    "--skip-release-notes",
    "--disable-workspace-trust",
)

# Isolation flag name -> directory name under the cache root.
PROFILE_DIRS: tuple[tuple[str, str], ...] = (
    ("extensions-dir", "extensions"),
    ("user-data-dir", "user-data"),
)


def has_arg(arg_name: str, args: Sequence[str]) -> bool:
    """True if `--<arg_name>` or `--<arg_name>=...` appears as a token in `args`.

    Plain token match only: quoting, response files and flags folded into a
    single combined string are not recognised.
    """
    flag = f"--{arg_name}"
    prefix = f"{flag}="
    return any(a == flag or a.startswith(prefix) for a in args)


def get_profile_arguments(args: Sequence[str], cache_root: Path | str) -> list[str]:
    """Isolation flags pointing under `cache_root` that `args` does not already set."""
    out: list[str] = []
    for arg_name, dir_name in PROFILE_DIRS:
        if not has_arg(arg_name, args):
            out.append(f"--{arg_name}={os.path.join(cache_root, dir_name)}")
    return out


def build_launch_args(config: TestRunConfiguration, cache_root: Path | str) -> list[str]:
    """The full, ordered argument vector for one run."""
    args = [
        *config.launch_args,
        *MANDATORY_FLAGS,
        f"--extensionDevelopmentPath={config.extension_development_path}",
        f"--extensionTestsPath={config.extension_tests_path}",
    ]

    if not config.reuse_machine_install:
        args.extend(get_profile_arguments(args, cache_root))

    return args

# 🔼⚙️
