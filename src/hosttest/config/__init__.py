#
# config/__init__.py
#
"""
Configuration handling sub-package for hosttest.

Exports the loading function and the configuration models.
"""

from .loader import load_config
from .models import (
    DEFAULT_CACHE_DIRNAME,
    DEFAULT_VERSION,
    GlobalConfig,
    HostTestConfig,
    RunSettings,
    TestRunConfiguration,
    default_cache_root,
)

__all__ = [
    "DEFAULT_CACHE_DIRNAME",
    "DEFAULT_VERSION",
    "GlobalConfig",
    "HostTestConfig",
    "RunSettings",
    "TestRunConfiguration",
    "default_cache_root",
    "load_config",
]

# 🔼⚙️
