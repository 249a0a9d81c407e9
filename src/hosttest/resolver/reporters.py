#
# src/hosttest/resolver/reporters.py
#
"""
Progress reporters handed to executable resolvers.
"""
import sys

import structlog
from rich.console import Console
from rich.markup import escape

from hosttest.resolver.protocols import ProgressEvent, ProgressStage
from hosttest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("resolver.reporters")

_STAGE_MESSAGES: dict[ProgressStage, str] = {
    ProgressStage.RESOLVING_VERSION: "Resolving host version {version}",
    ProgressStage.RESOLVED_VERSION: "Resolved host version {version}",
    ProgressStage.SEARCHING_INSTALL: "Looking for a host install in {install_dir}",
    ProgressStage.FOUND_MATCHING_INSTALL: "Found existing install in {install_dir}",
}


class SilentReporter:
    """Discards every progress event."""

    def report(self, event: ProgressEvent) -> None:
        pass

    def error(self, err: BaseException) -> None:
        pass


class ConsoleReporter:
    """Prints progress to stderr using rich."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(file=sys.stderr, highlight=False)

    def report(self, event: ProgressEvent) -> None:
        template = _STAGE_MESSAGES.get(event.stage, event.stage.name)
        try:
            message = template.format(**event.details)
        except KeyError:
            message = f"{event.stage.name.replace('_', ' ').capitalize()} {event.details}"
        self.console.print(f"[dim]✔[/dim] {escape(message)}")

    def error(self, err: BaseException) -> None:
        log.debug("Reporting resolver error", error=str(err))
        self.console.print(f"[bold red]Error resolving host executable:[/bold red] {escape(str(err))}")

# 🔼⚙️
