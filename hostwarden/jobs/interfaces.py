"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass
from typing import Protocol

from hostwarden.domain import AppliedState

EXIT_CODE_SUCCESS = 0
EXIT_CODE_FAILURE = 1
EXIT_CODE_INVALID_INPUT = 2


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one reconcile job run.

    Attributes:
        job_name: Job identifier.
        status: Final execution state (`success` or `failed`).
        exit_code: Process exit code for the run.
        error_code: Deterministic failure code when failed.
        error_message: Human-readable failure message when failed.
        applied_state: Last successfully applied state, if any.
        cycle_count: Completed probe/reconcile cycles.
    """

    job_name: str
    status: str
    exit_code: int = EXIT_CODE_SUCCESS
    error_code: str | None = None
    error_message: str | None = None
    applied_state: AppliedState | None = None
    cycle_count: int = 0


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating reconcile jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.

        Raises:
            RuntimeError: Raised when supported job metadata is unavailable.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow in the job layer.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when the job name is unsupported.
        """
