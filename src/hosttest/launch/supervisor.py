#
# src/hosttest/launch/supervisor.py
#
"""
Runs the host executable to completion on an asyncio subprocess transport.

The child's stdout and stderr are relayed verbatim to our own streams while it
runs. Termination is observed through two independent notifications (the
process exiting, and its pipes closing); whichever arrives first settles the
run and the other is ignored.
"""
import asyncio
import os
import signal as signal_module
import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO, Protocol

import structlog
from attrs import define

from hosttest.exceptions import NonZeroExitError, SignalTerminationError, SpawnError
from hosttest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("launch.supervisor")

DEFAULT_DRAIN_TIMEOUT = 5.0


class BinarySink(Protocol):
    def write(self, data: bytes, /) -> object: ...

    def flush(self) -> object: ...


class _TextSink:
    """Adapts a text stream without a `.buffer` to accept bytes."""

    def __init__(self, stream: IO[str]):
        self._stream = stream

    def write(self, data: bytes) -> None:
        self._stream.write(data.decode(getattr(self._stream, "encoding", None) or "utf-8", errors="replace"))

    def flush(self) -> None:
        self._stream.flush()


def _binary_stream(text_stream: IO[str]) -> BinarySink:
    buffer = getattr(text_stream, "buffer", None)
    return buffer if buffer is not None else _TextSink(text_stream)


def build_environment(
    overlay: Mapping[str, str | None] | None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    The inherited environment with `overlay` applied on top.

    Overlay keys win on collision, a `None` value removes the key, and keys
    the overlay does not mention are left untouched.
    """
    env = dict(os.environ if base is None else base)
    for key, value in (overlay or {}).items():
        if value is None:
            env.pop(key, None)
        else:
            env[key] = value
    return env


def split_returncode(returncode: int) -> tuple[int | None, str | None]:
    """Maps an asyncio return code onto an (exit code, signal name) pair."""
    if returncode >= 0:
        return returncode, None
    try:
        return None, signal_module.Signals(-returncode).name
    except ValueError:
        return None, f"SIG{-returncode}"


@define(frozen=True, slots=True)
class ProcessOutcome:
    """The (code, signal) pair reported by the authoritative notification."""

    exit_code: int | None
    signal: str | None


class TerminationLatch:
    """
    One-shot latch settled by the first termination notification of a run.

    Check and set happen with no await in between, so on a single event
    loop the first caller of `settle` always wins.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._outcome: ProcessOutcome | None = None
        self.settled_by: str | None = None

    @property
    def settled(self) -> bool:
        return self._outcome is not None

    def settle(self, source: str, exit_code: int | None, signal: str | None) -> bool:
        """Records the outcome if nothing has yet. Returns True if this call settled it."""
        if self._outcome is not None:
            log.debug(
                "Ignoring duplicate termination notification",
                source=source,
                exit_code=exit_code,
                signal=signal,
                settled_by=self.settled_by,
            )
            return False
        self._outcome = ProcessOutcome(exit_code=exit_code, signal=signal)
        self.settled_by = source
        self._event.set()
        return True

    async def wait(self) -> ProcessOutcome:
        await self._event.wait()
        assert self._outcome is not None
        return self._outcome


def resolve_outcome(outcome: ProcessOutcome) -> int:
    """
    Converts the settled outcome into an exit code or raises.

    The cause is always logged first so it is visible even though the
    raised error is coarse.
    """
    log.info(
        f"Exit code:   {outcome.exit_code if outcome.exit_code is not None else outcome.signal}",
        emoji_key="exit",
    )

    if outcome.exit_code is None:
        raise SignalTerminationError(outcome.signal or "UNKNOWN")
    if outcome.exit_code != 0:
        raise NonZeroExitError(outcome.exit_code)

    log.info("Done", emoji_key="success")
    return outcome.exit_code


class HostProcessProtocol(asyncio.SubprocessProtocol):
    """
    Relays the child's pipes and turns transport callbacks into termination
    notifications.

    `process_exited` fires as soon as the child has been reaped, even if a
    process it started still holds the inherited pipes. `connection_lost`
    fires only once the child has exited and every pipe has closed. Both
    settle the same latch with the transport's return code.
    """

    def __init__(
        self,
        stdout: BinarySink,
        stderr: BinarySink,
        latch: TerminationLatch | None = None,
    ):
        self.latch = latch if latch is not None else TerminationLatch()
        self.closed: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self.transport: asyncio.SubprocessTransport | None = None
        self._sinks: dict[int, BinarySink] = {1: stdout, 2: stderr}

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def pipe_data_received(self, fd: int, data: bytes) -> None:
        sink = self._sinks.get(fd)
        if sink is None:
            return
        try:
            sink.write(data)
            sink.flush()
        except (OSError, ValueError) as e:
            log.warning("Output relay failed, dropping further output", fd=fd, error=str(e))
            del self._sinks[fd]

    def process_exited(self) -> None:
        self._notify("exit")

    def connection_lost(self, exc: Exception | None) -> None:
        self._notify("close")
        if not self.closed.done():
            self.closed.set_result(None)

    def _notify(self, source: str) -> None:
        returncode = self.transport.get_returncode() if self.transport is not None else None
        if returncode is None:
            log.debug("Termination notification without a return code", source=source)
            return
        self.latch.settle(source, *split_returncode(returncode))


class ProcessSupervisor:
    """
    Supervises exactly one host process per `run` call.
    """

    def __init__(
        self,
        stdout: BinarySink | None = None,
        stderr: BinarySink | None = None,
        base_env: Mapping[str, str] | None = None,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ):
        self._stdout = stdout
        self._stderr = stderr
        self.base_env = base_env
        self.drain_timeout = drain_timeout

    @property
    def stdout(self) -> BinarySink:
        return self._stdout if self._stdout is not None else _binary_stream(sys.stdout)

    @property
    def stderr(self) -> BinarySink:
        return self._stderr if self._stderr is not None else _binary_stream(sys.stderr)

    async def run(
        self,
        executable: str | Path,
        args: Sequence[str],
        env_overlay: Mapping[str, str | None] | None = None,
    ) -> int:
        """
        Launches `executable` with `args` and waits for it to terminate.

        Returns:
            The exit code (0).

        Raises:
            SpawnError: the executable could not be launched.
            SignalTerminationError: the process was killed by a signal.
            NonZeroExitError: the process exited with a non-zero code.
        """
        run_log = log.bind(executable=str(executable))
        env = build_environment(env_overlay, base=self.base_env)
        run_log.info("Launching host executable", args=list(args), emoji_key="launch")

        loop = asyncio.get_running_loop()
        protocol = HostProcessProtocol(self.stdout, self.stderr)
        try:
            transport, _ = await loop.subprocess_exec(
                lambda: protocol,
                str(executable),
                *args,
                stdin=None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            run_log.error("Test error: " + str(e), emoji_key="fail")
            raise SpawnError(str(executable), details=e) from e

        run_log.debug("Host process started", pid=transport.get_pid())
        outcome = await self.supervise(transport, protocol)
        return resolve_outcome(outcome)

    async def supervise(
        self,
        transport: asyncio.SubprocessTransport,
        protocol: HostProcessProtocol,
    ) -> ProcessOutcome:
        """Waits for the first termination notification of a started process, then for its pipes to drain."""
        pid = transport.get_pid()
        try:
            outcome = await protocol.latch.wait()
            log.debug("Host process terminated", settled_by=protocol.latch.settled_by, pid=pid)
            # Output written just before exit may still be in flight.
            done, _ = await asyncio.wait([protocol.closed], timeout=self.drain_timeout)
            if not done:
                log.warning(
                    "Host output still open after exit, closing pipes",
                    pid=pid,
                    drain_timeout=self.drain_timeout,
                )
        finally:
            if transport.get_returncode() is None:
                log.warning("Killing host process left running", pid=pid)
            # Kills a process still running and closes any pipe left open.
            transport.close()

        return outcome

# 🔼⚙️
