"""Interval poll driver owning the in-memory applied state."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable

from hostwarden.domain import AppliedState

from .transcript import TranscriptSink


@dataclass(frozen=True)
class PollRunResult:
    """Final poll driver state.

    Attributes:
        applied_state: Last applied state when the loop ended.
        cycle_count: Number of completed cycles.
        cancelled: Whether the loop ended because of a cancellation request.
    """

    applied_state: AppliedState | None
    cycle_count: int
    cancelled: bool = False


class PollDriver:
    """Run reconcile cycles once, or repeatedly at a fixed interval.

    The first cycle runs immediately. With no interval the driver returns after
    that cycle. With an interval it sleeps between cycles until a stop is
    requested, checked at each interval boundary, or the sleep is interrupted.
    A cycle that raises ends the run with that error.
    """

    def __init__(
        self,
        transcript: TranscriptSink | None = None,
        stop_requested: Callable[[], bool] | None = None,
    ):
        self._transcript = transcript
        self._stop_requested = stop_requested or (lambda: False)

    def poll_run(
        self,
        interval_seconds: float | None,
        cycle_fn: Callable[[AppliedState | None], AppliedState | None],
        initial_state: AppliedState | None = None,
    ) -> PollRunResult:
        """Drive reconcile cycles and carry the applied state between them.

        Args:
            interval_seconds: Delay between cycles; None or 0 runs a single cycle.
            cycle_fn: One probe/reconcile cycle mapping previous to next applied state.
            initial_state: Applied state before the first cycle.

        Returns:
            PollRunResult: Applied state and cycle count at loop end.

        Raises:
            ValueError: Raised when interval_seconds is negative.
            Exception: Any error raised by `cycle_fn`.
        """

        if interval_seconds is not None and interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")

        applied_state = initial_state
        cycle_count = 0
        while True:
            self._poll_record(status="cycle_started", details={"cycle": cycle_count + 1})
            applied_state = cycle_fn(applied_state)
            cycle_count += 1
            self._poll_record(
                status="cycle_completed",
                details={
                    "cycle": cycle_count,
                    "applied_state": applied_state.state if applied_state else None,
                },
            )

            if not interval_seconds:
                return PollRunResult(applied_state=applied_state, cycle_count=cycle_count)
            if self._stop_requested():
                self._poll_record(status="cancelled", details={"cycle": cycle_count, "reason": "stop_requested"})
                return PollRunResult(applied_state=applied_state, cycle_count=cycle_count, cancelled=True)
            try:
                time.sleep(interval_seconds)
            except KeyboardInterrupt:
                self._poll_record(status="cancelled", details={"cycle": cycle_count, "reason": "interrupted"})
                return PollRunResult(applied_state=applied_state, cycle_count=cycle_count, cancelled=True)
            if self._stop_requested():
                self._poll_record(status="cancelled", details={"cycle": cycle_count, "reason": "stop_requested"})
                return PollRunResult(applied_state=applied_state, cycle_count=cycle_count, cancelled=True)

    def _poll_record(self, status: str, details: dict[str, object]) -> None:
        if self._transcript is not None:
            self._transcript.transcript_record(stage="poll", status=status, details=details)
