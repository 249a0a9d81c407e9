#
# src/hosttest/launch/__init__.py
#
"""
Command line construction and process supervision for host test runs.
"""
from .arguments import MANDATORY_FLAGS, build_launch_args, get_profile_arguments, has_arg
from .supervisor import (
    HostProcessProtocol,
    ProcessOutcome,
    ProcessSupervisor,
    TerminationLatch,
    build_environment,
    resolve_outcome,
)

__all__ = [
    "HostProcessProtocol",
    "MANDATORY_FLAGS",
    "ProcessOutcome",
    "ProcessSupervisor",
    "TerminationLatch",
    "build_environment",
    "build_launch_args",
    "get_profile_arguments",
    "has_arg",
    "resolve_outcome",
]

# 🔼⚙️
