#
# src/hosttest/resolver/protocols.py
#
"""
Defines the protocols and data structures at the executable resolver boundary.
"""
from enum import Enum, auto
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from attrs import define, field


class ProgressStage(Enum):
    """Stages a resolver may report while obtaining a host executable."""

    RESOLVING_VERSION = auto()
    RESOLVED_VERSION = auto()
    SEARCHING_INSTALL = auto()
    FOUND_MATCHING_INSTALL = auto()


@define(frozen=True, slots=True)
class ProgressEvent:
    """A single progress notification emitted by a resolver."""

    stage: ProgressStage
    details: dict[str, Any] = field(factory=dict)


@define(frozen=True, slots=True)
class ResolvedExecutable:
    """
    A ready-to-run host executable and the cache root its isolated
    profile directories belong under.
    """

    executable_path: Path = field(converter=Path)
    cache_root: Path = field(converter=Path)


@runtime_checkable
class ProgressReporter(Protocol):
    """Receives progress from a resolver. The launch core never calls it."""

    def report(self, event: ProgressEvent) -> None: ...

    def error(self, err: BaseException) -> None: ...


@runtime_checkable
class ExecutableResolver(Protocol):
    """
    Protocol for anything that can supply a local host executable for a
    requested version and platform.
    """

    async def resolve(
        self,
        version: str | None = None,
        platform: str | None = None,
        reporter: ProgressReporter | None = None,
    ) -> ResolvedExecutable:
        """
        Obtains a runnable host executable.

        Args:
            version: Requested host version ("stable", "insiders" or "X.Y.Z").
            platform: Requested platform; defaults to the current one.
            reporter: Optional progress sink.

        Returns:
            The executable path together with its cache root.

        Raises:
            ResolutionError: the version or platform is invalid, or no
                usable install exists.
        """
        ...

# 🔼⚙️
