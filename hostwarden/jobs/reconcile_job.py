"""Job-layer reconcile orchestrator shared by the concrete maintenance jobs."""

from __future__ import annotations

import traceback

from hostwarden.adapters import (
    ApplyFailedError,
    CredentialInvalidError,
    HostwardenError,
    ProbeUnavailableError,
    RetryExhaustedError,
)
from hostwarden.config import RunOptions
from hostwarden.domain import AppliedState, CycleOutcome, ProbeResult, RetryAttempt

from .interfaces import (
    EXIT_CODE_FAILURE,
    EXIT_CODE_INVALID_INPUT,
    EXIT_CODE_SUCCESS,
    JobExecutionResult,
    JobOrchestratorPort,
)
from .poll_driver import PollDriver
from .prober import StateProberPort
from .reconciler import StateReconciler
from .retry import RetryController
from .transcript import TranscriptSink


class ReconcileJobOrchestrator(JobOrchestratorPort):
    """Run probe/reconcile cycles under the retry controller and poll driver.

    Subclasses set the job name and may reject a probe result on a given
    attempt through `_job_check_probe`.
    """

    _JOB_NAME = "reconcile"

    def __init__(
        self,
        prober: StateProberPort,
        reconciler: StateReconciler,
        options: RunOptions,
        transcript: TranscriptSink,
        retry_controller: RetryController | None = None,
        poll_driver: PollDriver | None = None,
    ):
        """Initialize reconcile orchestrator dependencies.

        Args:
            prober: Read-only state prober.
            reconciler: Reconciler applying corrective actions.
            options: Per-run options.
            transcript: Transcript receiving run stage events.
            retry_controller: Optional retry controller; built on the transcript when omitted.
            poll_driver: Optional poll driver; built on the transcript when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if prober is None:
            raise ValueError("prober must not be None")
        if reconciler is None:
            raise ValueError("reconciler must not be None")
        if options is None:
            raise ValueError("options must not be None")
        if transcript is None:
            raise ValueError("transcript must not be None")

        self._prober = prober
        self._reconciler = reconciler
        self._options = options
        self._transcript = transcript
        self._retry_controller = retry_controller or RetryController(transcript=transcript)
        self._poll_driver = poll_driver or PollDriver(transcript=transcript)
        self._applied_state: AppliedState | None = None
        self._cycle_count = 0

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Returns:
            tuple[str, ...]: Supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute the reconcile workflow until the single cycle or poll loop ends.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Final execution status payload with exit code.

        Raises:
            ValueError: Raised when job name is unsupported.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        self._applied_state = None
        self._cycle_count = 0
        self._transcript.transcript_record(
            stage="run",
            status="started",
            details={
                "job_name": normalized_job_name,
                "target": self._options.target,
                "max_attempts": self._options.retries,
                "retry_delay_seconds": self._options.retry_delay_seconds,
                "interval_seconds": self._options.interval_seconds,
                "dry_run": self._options.dry_run,
            },
        )

        try:
            poll_result = self._poll_driver.poll_run(
                interval_seconds=self._options.interval_seconds,
                cycle_fn=self._job_run_cycle,
            )
        except (TimeoutError, ConnectionError, ValueError, RuntimeError) as error:
            error_code = self._job_error_code_for_exception(error)
            exit_code = self._job_exit_code_for_exception(error)
            self._transcript.transcript_record(
                stage="run",
                status="failed",
                details={
                    "error_code": error_code,
                    "error_type": type(error).__name__,
                    "error_message": str(error),
                    "cycle_count": self._cycle_count,
                    "traceback": traceback.format_exc(),
                },
            )
            return JobExecutionResult(
                job_name=normalized_job_name,
                status="failed",
                exit_code=exit_code,
                error_code=error_code,
                error_message=str(error),
                applied_state=self._applied_state,
                cycle_count=self._cycle_count,
            )

        self._transcript.transcript_record(
            stage="run",
            status="success",
            details={
                "cycle_count": poll_result.cycle_count,
                "applied_state": poll_result.applied_state.state if poll_result.applied_state else None,
                "cancelled": poll_result.cancelled,
            },
        )
        return JobExecutionResult(
            job_name=normalized_job_name,
            status="success",
            exit_code=EXIT_CODE_SUCCESS,
            applied_state=poll_result.applied_state,
            cycle_count=poll_result.cycle_count,
        )

    def _job_run_cycle(self, previous: AppliedState | None) -> AppliedState | None:
        """Run one retried probe/reconcile cycle and remember its applied state.

        Args:
            previous: Applied state carried by the poll driver.

        Returns:
            AppliedState | None: Applied state after the cycle.

        Raises:
            RetryExhaustedError: Raised when every attempt failed with a retryable error.
            CredentialInvalidError: Raised when the repair credential is invalid.
        """

        retry_result = self._retry_controller.retry_execute(
            operation=lambda attempt: self._job_attempt(attempt, previous),
            max_attempts=self._options.retries,
            delay_seconds=self._options.retry_delay_seconds,
            label=self._JOB_NAME,
        )
        outcome = retry_result.value
        self._applied_state = outcome.applied_state
        self._cycle_count += 1
        self._transcript.transcript_record(
            stage="cycle",
            status="completed",
            details={
                "action": outcome.action.kind,
                "attempts": retry_result.attempts,
                "dry_run": outcome.dry_run,
            },
        )
        return outcome.applied_state

    def _job_attempt(self, attempt: RetryAttempt, previous: AppliedState | None) -> CycleOutcome:
        current = self._prober.prober_probe(self._options.target)
        self._transcript.transcript_record(
            stage="probe",
            status="completed",
            details={"attempt": attempt.attempt_number, "state": current.state, **current.detail},
        )
        self._job_check_probe(current, attempt, previous)
        return self._reconciler.reconciler_cycle(current, previous, dry_run=self._options.dry_run)

    def _job_check_probe(
        self,
        current: ProbeResult,
        attempt: RetryAttempt,
        previous: AppliedState | None,
    ) -> None:
        """Reject a probe result before reconciliation; accepts every result by default."""

    def _job_error_code_for_exception(self, error: Exception) -> str:
        """Map runtime exception type to deterministic run failure code.

        Args:
            error: Caught workflow exception.

        Returns:
            str: Deterministic error code.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if isinstance(error, RetryExhaustedError):
            return "RUN_RETRY_EXHAUSTED"
        if isinstance(error, CredentialInvalidError):
            return "RUN_CREDENTIAL_INVALID"
        if isinstance(error, ProbeUnavailableError):
            return "RUN_PROBE_UNAVAILABLE"
        if isinstance(error, ApplyFailedError):
            return "RUN_APPLY_FAILED"
        if isinstance(error, ValueError):
            return "RUN_CONTRACT_ERROR"
        return "RUN_UNEXPECTED_ERROR"

    def _job_exit_code_for_exception(self, error: Exception) -> int:
        """Map runtime exception type to process exit code.

        Args:
            error: Caught workflow exception.

        Returns:
            int: `2` for invalid input or credential, `1` otherwise.
        """

        if isinstance(error, HostwardenError) and not isinstance(error, CredentialInvalidError):
            return EXIT_CODE_FAILURE
        if isinstance(error, ValueError):
            return EXIT_CODE_INVALID_INPUT
        return EXIT_CODE_FAILURE
