"""Bounded fixed-delay retry controller for probe/reconcile attempts."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Callable, Generic, TypeVar

from hostwarden.adapters import HostwardenRetryableError, RetryExhaustedError
from hostwarden.domain import RetryAttempt, RetryBudget

from .transcript import TranscriptSink

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


@dataclass(frozen=True)
class RetryResult(Generic[ResultT]):
    """Successful retry execution outcome.

    Attributes:
        value: Value returned by the successful attempt.
        attempts: Attempts performed, including the successful one.
    """

    value: ResultT
    attempts: int


class RetryController:
    """Run an operation until it succeeds, fails fatally or the budget runs out.

    Only `HostwardenRetryableError` failures are retried. Every other exception
    propagates immediately without consuming further attempts. The controller
    sleeps `delay_seconds` between attempts and never after the final one.
    """

    def __init__(self, transcript: TranscriptSink | None = None):
        self._transcript = transcript

    def retry_execute(
        self,
        operation: Callable[[RetryAttempt], ResultT],
        max_attempts: int,
        delay_seconds: float,
        label: str = "attempt",
    ) -> RetryResult[ResultT]:
        """Execute an operation under a bounded retry budget.

        Args:
            operation: Callable receiving the current attempt context.
            max_attempts: Total attempts allowed, at least one.
            delay_seconds: Fixed delay between attempts.
            label: Operation label carried in transcript events.

        Returns:
            RetryResult[ResultT]: Value of the first successful attempt.

        Raises:
            ValueError: Raised when budget values are invalid.
            RetryExhaustedError: Raised when every attempt failed with a retryable error.
            Exception: Any non-retryable error raised by the operation.
        """

        budget = RetryBudget(max_attempts=max_attempts, delay_seconds=delay_seconds)
        attempt_number = 0
        last_error: HostwardenRetryableError | None = None

        while not budget.budget_is_exhausted():
            attempt_number += 1
            attempt = RetryAttempt(attempt_number=attempt_number, max_attempts=budget.max_attempts)
            self._retry_record(status="started", details={"label": label, "attempt": attempt_number})
            try:
                value = operation(attempt)
            except HostwardenRetryableError as error:
                last_error = error
                remaining = budget.budget_consume()
                if remaining == 0:
                    break
                self._retry_record(
                    status="retrying",
                    details={
                        "label": label,
                        "attempt": attempt_number,
                        "max_attempts": budget.max_attempts,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                        "retry_after_seconds": budget.delay_seconds,
                    },
                )
                if budget.delay_seconds > 0:
                    time.sleep(budget.delay_seconds)
                continue
            except Exception as error:
                self._retry_record(
                    status="fatal",
                    details={
                        "label": label,
                        "attempt": attempt_number,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    },
                )
                raise

            self._retry_record(status="succeeded", details={"label": label, "attempts": attempt_number})
            return RetryResult(value=value, attempts=attempt_number)

        self._retry_record(
            status="exhausted",
            details={
                "label": label,
                "attempts": attempt_number,
                "error_type": type(last_error).__name__,
                "error_message": str(last_error),
            },
        )
        raise RetryExhaustedError(
            f"{label} failed after {attempt_number} attempts: {last_error}",
            attempts=attempt_number,
            last_error=last_error,
        ) from last_error

    def _retry_record(self, status: str, details: dict[str, object]) -> None:
        if self._transcript is None:
            logger.debug("retry %s %s", status, details)
            return
        self._transcript.transcript_record(stage="retry", status=status, details=details)
