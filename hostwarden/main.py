"""Main module entrypoint for host maintenance commands.

This module validates startup configuration, opens the run transcript and
executes one reconcile job, exiting with the job's exit code.
"""

import argparse
import contextlib
import signal
import sys
import threading
from typing import Callable

from hostwarden.bootstrap import bootstrap_create_job_orchestrator
from hostwarden.config import (
    CREDENTIAL_SOURCES,
    AppSettings,
    RunOptions,
    SettingsLoadError,
    config_build_run_options,
    config_load_settings,
)
from hostwarden.jobs import (
    EXIT_CODE_FAILURE,
    EXIT_CODE_INVALID_INPUT,
    NETWORK_ACTIONER_JOB_NAME,
    SECURE_CHANNEL_JOB_NAME,
    JobExecutionResult,
    TranscriptSink,
)


def main(argv: list[str] | None = None) -> None:
    """Run selected maintenance command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to `sys.argv[1:]`.

    Returns:
        None: Returns normally only when the job succeeded.

    Raises:
        SystemExit: Raised with exit code `1` or `2` when the job fails.
    """

    argument_parser = argparse.ArgumentParser(description="Host maintenance reconcile jobs")
    argument_parser.add_argument(
        "command",
        choices=(SECURE_CHANNEL_JOB_NAME, NETWORK_ACTIONER_JOB_NAME),
        help="Job to run: `repair-channel` verifies and repairs domain trust, "
        "`network-actioner` records the home/away network location",
        type=str,
    )
    argument_parser.add_argument(
        "--target",
        dest="target",
        type=str,
        help="Optional domain controller to evaluate against",
    )
    argument_parser.add_argument(
        "--credentialSource",
        dest="credential_source",
        choices=CREDENTIAL_SOURCES,
        type=str,
        help="Where the repair credential comes from (default `inline`)",
    )
    argument_parser.add_argument("--credentialFile", dest="credential_file", type=str, help="JSON credential file")
    argument_parser.add_argument("--username", dest="username", type=str, help="Repair account as DOMAIN\\user or UPN")
    argument_parser.add_argument("--retries", dest="retries", type=int, help="Attempts per cycle")
    argument_parser.add_argument(
        "--retryDelaySeconds",
        dest="retry_delay_seconds",
        type=float,
        help="Delay between attempts",
    )
    argument_parser.add_argument(
        "--intervalSeconds",
        dest="interval_seconds",
        type=float,
        help="Poll interval; omit or 0 to run one cycle",
    )
    argument_parser.add_argument("--logFile", dest="log_file", type=str, help="Append the run transcript to this file")
    argument_parser.add_argument(
        "--dryRun",
        dest="dry_run",
        action="store_true",
        help="Describe corrective actions without performing them",
    )
    parsed_arguments = argument_parser.parse_args(argv)

    try:
        settings = config_load_settings()
        options = config_build_run_options(
            settings=settings,
            target=parsed_arguments.target,
            credential_source=parsed_arguments.credential_source,
            credential_file=parsed_arguments.credential_file,
            username=parsed_arguments.username,
            retries=parsed_arguments.retries,
            retry_delay_seconds=parsed_arguments.retry_delay_seconds,
            interval_seconds=parsed_arguments.interval_seconds,
            log_file=parsed_arguments.log_file,
            dry_run=parsed_arguments.dry_run,
        )
    except (SettingsLoadError, ValueError) as error:
        print(f"{parsed_arguments.command}: invalid configuration: {error}", file=sys.stderr)
        raise SystemExit(EXIT_CODE_INVALID_INPUT) from error

    stop_event = threading.Event()
    previous_handlers = main_install_stop_handlers(stop_event)
    try:
        with contextlib.ExitStack() as exit_stack:
            try:
                transcript = exit_stack.enter_context(TranscriptSink(log_file=options.log_file, stream=sys.stderr))
            except OSError as error:
                print(f"{parsed_arguments.command}: cannot open transcript: {error}", file=sys.stderr)
                raise SystemExit(EXIT_CODE_INVALID_INPUT) from error
            execution_result = main_run_job(
                parsed_arguments.command,
                settings,
                options,
                transcript,
                stop_requested=stop_event.is_set,
            )
    finally:
        main_restore_stop_handlers(previous_handlers)

    if execution_result.status != "success":
        print(
            f"{execution_result.job_name} failed [{execution_result.error_code}]: {execution_result.error_message}",
            file=sys.stderr,
        )
        raise SystemExit(execution_result.exit_code)


def main_install_stop_handlers(stop_event: threading.Event) -> dict[int, object]:
    """Set `stop_event` on a service stop request instead of terminating mid-cycle.

    SIGTERM is handled everywhere; SIGBREAK only exists on Windows consoles.

    Args:
        stop_event: Event the poll driver checks at interval boundaries.

    Returns:
        dict[int, object]: Previous handlers keyed by signal number.
    """

    def _request_stop(signal_number, frame) -> None:
        _ = frame
        print(f"stop requested by signal {signal_number}; finishing current cycle", file=sys.stderr)
        stop_event.set()

    previous_handlers: dict[int, object] = {}
    for signal_name in ("SIGTERM", "SIGBREAK"):
        signal_number = getattr(signal, signal_name, None)
        if signal_number is None:
            continue
        previous_handlers[signal_number] = signal.signal(signal_number, _request_stop)
    return previous_handlers


def main_restore_stop_handlers(previous_handlers: dict[int, object]) -> None:
    for signal_number, handler in previous_handlers.items():
        if handler is None:
            continue
        signal.signal(signal_number, handler)


def main_run_job(
    job_name: str,
    settings: AppSettings,
    options: RunOptions,
    transcript: TranscriptSink,
    stop_requested: Callable[[], bool] | None = None,
) -> JobExecutionResult:
    """Wire and execute one job, turning wiring failures into a failed result.

    Args:
        job_name: Selected command.
        settings: Validated runtime settings.
        options: Resolved run options.
        transcript: Open run transcript.
        stop_requested: Optional cancellation flag for poll mode.

    Returns:
        JobExecutionResult: Job outcome.
    """

    try:
        orchestrator = bootstrap_create_job_orchestrator(
            job_name=job_name,
            settings=settings,
            options=options,
            transcript=transcript,
            stop_requested=stop_requested,
        )
    except (ValueError, RuntimeError) as error:
        transcript.transcript_record(
            stage="bootstrap",
            status="failed",
            details={"error_type": type(error).__name__, "error_message": str(error)},
        )
        return JobExecutionResult(
            job_name=job_name,
            status="failed",
            exit_code=EXIT_CODE_INVALID_INPUT if isinstance(error, ValueError) else EXIT_CODE_FAILURE,
            error_code="RUN_BOOTSTRAP_ERROR",
            error_message=str(error),
        )
    return orchestrator.job_execute(job_name=job_name)


if __name__ == "__main__":
    main()
