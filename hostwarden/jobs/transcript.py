"""Run transcript sink backed by the `hostwarden` logger."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TextIO

from hostwarden.domain import domain_build_stage_event, domain_render_stage_event

TRANSCRIPT_LOGGER_NAME = "hostwarden"
TRANSCRIPT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_WARNING_STATUSES = frozenset({"retrying", "failed", "exhausted", "fatal", "cancelled"})


class TranscriptSink:
    """Process-local transcript opened for the duration of one run.

    On enter, handlers for the optional log file and stream are attached to the
    `hostwarden` logger. Every recorded stage event is logged as one JSON line
    and kept in memory. On exit the handlers are flushed, detached and closed,
    also when the run raised.
    """

    def __init__(
        self,
        log_file: str | None = None,
        stream: TextIO | None = None,
        level: int = logging.INFO,
    ):
        """Initialize transcript sink.

        Args:
            log_file: Optional transcript file path, opened in append mode.
            stream: Optional console stream, e.g. `sys.stderr`.
            level: Minimum level emitted by attached handlers.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when log_file is blank.
        """

        if log_file is not None and not log_file.strip():
            raise ValueError("log_file must not be blank")

        self._log_file = log_file.strip() if log_file else None
        self._stream = stream
        self._level = level
        self._logger = logging.getLogger(TRANSCRIPT_LOGGER_NAME)
        self._handlers: list[logging.Handler] = []
        self._previous_level = self._logger.level
        self._events: list[dict[str, object]] = []

    def __enter__(self) -> TranscriptSink:
        formatter = logging.Formatter(TRANSCRIPT_FORMAT)
        if self._log_file is not None:
            file_handler = logging.FileHandler(self._log_file, mode="a", encoding="utf-8")
            self._handlers.append(file_handler)
        if self._stream is not None:
            self._handlers.append(logging.StreamHandler(self._stream))

        for handler in self._handlers:
            handler.setLevel(self._level)
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)
        self._previous_level = self._logger.level
        self._logger.setLevel(min(self._level, self._previous_level or self._level))

        self.transcript_record(stage="transcript", status="opened", details={"log_file": self._log_file})
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.transcript_record(stage="transcript", status="closed")
        else:
            self.transcript_record(
                stage="transcript",
                status="failed",
                details={"error_type": exc_type.__name__, "error_message": str(exc_value)},
            )

        for handler in self._handlers:
            handler.flush()
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers = []
        self._logger.setLevel(self._previous_level)

    def transcript_record(
        self,
        stage: str,
        status: str,
        details: dict[str, Any] | None = None,
    ) -> dict[str, object]:
        """Record and log one stage event.

        Args:
            stage: Stage name.
            status: Stage status marker.
            details: Optional structured details.

        Returns:
            dict[str, object]: Recorded stage event.

        Raises:
            ValueError: Raised when stage or status is blank.
        """

        event = domain_build_stage_event(stage=stage, status=status, details=details)
        self._events.append(event)
        level = logging.WARNING if status in _WARNING_STATUSES else logging.INFO
        self._logger.log(level, domain_render_stage_event(event))
        return event

    def transcript_events(self) -> list[dict[str, object]]:
        """Return a copy of the events recorded so far."""

        return list(self._events)
