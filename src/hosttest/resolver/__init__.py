#
# src/hosttest/resolver/__init__.py
#
"""
Executable resolution sub-package for hosttest.
"""
from .cached import CachedInstallResolver, default_platform
from .protocols import (
    ExecutableResolver,
    ProgressEvent,
    ProgressReporter,
    ProgressStage,
    ResolvedExecutable,
)
from .reporters import ConsoleReporter, SilentReporter

__all__ = [
    "CachedInstallResolver",
    "ConsoleReporter",
    "ExecutableResolver",
    "ProgressEvent",
    "ProgressReporter",
    "ProgressStage",
    "ResolvedExecutable",
    "SilentReporter",
    "default_platform",
]

# 🔼⚙️
