"""Project-native typed exceptions for probe, apply and retry failures."""

from __future__ import annotations


class HostwardenError(Exception):
    """Base exception for hostwarden runtime failures.

    Attributes:
        error_code: Optional platform or adapter error code.
    """

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class HostwardenRetryableError(HostwardenError):
    """Transient failure the retry controller may retry within its budget."""


class ProbeUnavailableError(HostwardenRetryableError, ConnectionError):
    """Platform query could not be completed, e.g. no connectivity to evaluate trust."""


class ProbeNotSettledError(ProbeUnavailableError):
    """Probe completed but reported a state that has not settled yet."""


class ApplyFailedError(HostwardenRetryableError, RuntimeError):
    """Corrective mutation did not take effect."""


class CredentialInvalidError(HostwardenError, ValueError):
    """Repair credential is malformed or rejected; never retried."""


class RetryExhaustedError(HostwardenError, TimeoutError):
    """Retry budget reached zero without a successful attempt.

    Attributes:
        attempts: Number of attempts performed.
        last_error: Error raised by the final attempt.
    """

    def __init__(self, message: str, attempts: int, last_error: Exception | None = None):
        super().__init__(message=message, error_code="RETRY_EXHAUSTED")
        self.attempts = attempts
        self.last_error = last_error


class PowerShellCommandError(HostwardenError, RuntimeError):
    """PowerShell invocation failed to start, timed out or exited non-zero.

    Attributes:
        exit_code: Process exit code; None when the process did not complete.
        stderr: Captured error stream text.
    """

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message=message, error_code=None if exit_code is None else str(exit_code))
        self.exit_code = exit_code
        self.stderr = stderr
