#
# src/hosttest/__init__.py
#
"""
hosttest: run extension integration tests inside a headless host editor.
"""
from hosttest.config.models import TestRunConfiguration
from hosttest.exceptions import (
    ConfigurationError,
    HostTestError,
    NonZeroExitError,
    ResolutionError,
    SignalTerminationError,
    SpawnError,
    TestRunFailedError,
)
from hosttest.launch.arguments import get_profile_arguments
from hosttest.resolver import ConsoleReporter, ProgressReporter, SilentReporter
from hosttest.runner import run_tests, run_tests_sync

__all__ = [
    "ConfigurationError",
    "ConsoleReporter",
    "HostTestError",
    "NonZeroExitError",
    "ProgressReporter",
    "ResolutionError",
    "SignalTerminationError",
    "SilentReporter",
    "SpawnError",
    "TestRunConfiguration",
    "TestRunFailedError",
    "get_profile_arguments",
    "run_tests",
    "run_tests_sync",
]

# 🔼⚙️
