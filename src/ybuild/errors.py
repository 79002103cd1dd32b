"""Error types raised by the build pipeline.

Every error carries the exit code the process should terminate with, so the
CLI can map any failure to a status without knowing which stage raised it.
"""

EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


class YBuildError(Exception):
    """Base class for all pipeline errors."""

    exit_code = 1

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UsageError(YBuildError):
    """Unrecognized option or malformed command line. Raised before any side effect."""


class GateAbort(YBuildError):
    """The user declined the clean build confirmation."""


class DelegatedStageFailure(YBuildError):
    """An external tool (git, cmake, make, ctest, mvn, a test binary) exited nonzero.

    The exit code of the tool is propagated as the exit code of the pipeline.
    """

    def __init__(self, stage: str, exit_code: int, message: str | None = None):
        super().__init__(
            message or f"{stage} failed with exit code {exit_code}",
            exit_code=exit_code,
        )
        self.stage = stage


class ValidationFailure(YBuildError):
    """A test binary referenced by the build files is missing after a successful build."""


class BuildLockError(YBuildError):
    """Another live invocation holds the lock on the same build root."""


class InvalidBuildTypeError(YBuildError, ValueError):
    """Build type outside the supported enumeration."""
