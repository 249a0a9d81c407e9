#
# src/hosttest/telemetry/__init__.py
#
"""
Logging setup for hosttest.
"""
from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
