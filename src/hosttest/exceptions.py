#
# src/hosttest/exceptions.py
#
"""
Exception hierarchy for hosttest.

Every failure a caller of `run_tests` can observe derives from HostTestError.
"""


class HostTestError(Exception):
    """Base class for all hosttest errors."""

    def __init__(self, message: str, details: Exception | None = None):
        self.details = details
        super().__init__(message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ConfigurationError(HostTestError):
    """Raised when a configuration file or option value is invalid."""

    pass


class ResolutionError(HostTestError):
    """Raised when no runnable host executable could be obtained."""

    def __init__(
        self,
        message: str,
        version: str | None = None,
        platform: str | None = None,
        details: Exception | None = None,
    ):
        self.version = version
        self.platform = platform
        full_message = f"[Resolver] {message}"
        if version or platform:
            full_message += f" (version: '{version}', platform: '{platform}')"
        super().__init__(full_message, details=details)


class SpawnError(HostTestError):
    """Raised when the host executable could not be launched at all."""

    def __init__(self, executable: str, details: Exception | None = None):
        self.executable = executable
        super().__init__(f"Failed to launch host executable '{executable}'", details=details)


class TestRunFailedError(HostTestError):
    """Base class for a host process that launched but did not succeed."""

    __test__ = False


class SignalTerminationError(TestRunFailedError):
    """The host process was terminated by a signal."""

    def __init__(self, signal: str):
        self.signal = signal
        super().__init__(signal)


class NonZeroExitError(TestRunFailedError):
    """The host process exited with a non-zero code.

    The code is kept for information only; the message stays generic.
    """

    def __init__(self, exit_code: int):
        self.exit_code = exit_code
        super().__init__("Failed")


# 🔼⚙️
