"""Regression tests for the secure channel repair job lifecycle."""

from __future__ import annotations

import pytest

from hostwarden.adapters import CredentialInvalidError, ProbeUnavailableError, credential_build
from hostwarden.config import RunOptions
from hostwarden.domain import CHANNEL_STATE_HEALTHY, CHANNEL_STATE_UNHEALTHY
from hostwarden.jobs import (
    EXIT_CODE_FAILURE,
    EXIT_CODE_INVALID_INPUT,
    EXIT_CODE_SUCCESS,
    SECURE_CHANNEL_JOB_NAME,
    SecureChannelRepairJob,
    TranscriptSink,
)


class _TrustVerifierStub:
    """Trust verifier stub with scripted verification results."""

    def __init__(self, verify_results: list[bool | Exception], repair_result: bool = True):
        """Initialize verifier stub.

        Args:
            verify_results: Results, or exceptions to raise, per verify call; the last repeats.
            repair_result: Result returned by every repair call.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self._verify_results = list(verify_results)
        self._repair_result = repair_result
        self.verify_calls = 0
        self.repair_targets: list[str | None] = []

    def trust_verify(self, target: str | None) -> bool:
        """Return the next scripted result."""

        _ = target
        result = self._verify_results[min(self.verify_calls, len(self._verify_results) - 1)]
        self.verify_calls += 1
        if isinstance(result, Exception):
            raise result
        return result

    def trust_repair(self, credential, target: str | None) -> bool:
        """Capture target and return fixed result."""

        _ = credential
        self.repair_targets.append(target)
        return self._repair_result


def _valid_credential():
    return credential_build(username="CORP\\svc-repair", password="s3cret")


def test_jobs_secure_channel_healthy_records_baseline_without_repair() -> None:
    """Verify a healthy channel succeeds with no repair and no credential lookup."""

    verifier = _TrustVerifierStub([True])

    def _credential_provider():
        raise AssertionError("credential must not be requested for a healthy channel")

    result = SecureChannelRepairJob(
        trust_verifier=verifier,
        credential_provider=_credential_provider,
        options=RunOptions(retries=3, retry_delay_seconds=0),
        transcript=TranscriptSink(),
    ).job_execute(SECURE_CHANNEL_JOB_NAME)

    assert result.status == "success"
    assert result.exit_code == EXIT_CODE_SUCCESS
    assert result.applied_state.state == CHANNEL_STATE_HEALTHY
    assert verifier.repair_targets == []


def test_jobs_secure_channel_unhealthy_repairs_against_target() -> None:
    """Verify an unhealthy channel is repaired once against the configured target.

    Returns:
        None: Assertions validate repair behavior.

    Raises:
        AssertionError: Raised when repair behavior differs.
    """

    verifier = _TrustVerifierStub([False, True])

    result = SecureChannelRepairJob(
        trust_verifier=verifier,
        credential_provider=_valid_credential,
        options=RunOptions(target="dc01.corp.example", retries=3, retry_delay_seconds=0),
        transcript=TranscriptSink(),
    ).job_execute(SECURE_CHANNEL_JOB_NAME)

    assert result.status == "success"
    assert result.applied_state.state == CHANNEL_STATE_UNHEALTHY
    assert result.applied_state.applied_value == "repaired"
    assert verifier.repair_targets == ["dc01.corp.example"]


def test_jobs_secure_channel_invalid_credential_fails_fast_with_exit_two() -> None:
    """Verify a credential failure on the first attempt is fatal with zero retries.

    Returns:
        None: Assertions validate fatal mapping.

    Raises:
        AssertionError: Raised when retries are consumed or mapping differs.
    """

    verifier = _TrustVerifierStub([False])
    transcript = TranscriptSink()

    def _credential_provider():
        raise CredentialInvalidError("repair credential requires both a username and a password")

    result = SecureChannelRepairJob(
        trust_verifier=verifier,
        credential_provider=_credential_provider,
        options=RunOptions(retries=5, retry_delay_seconds=0),
        transcript=transcript,
    ).job_execute(SECURE_CHANNEL_JOB_NAME)

    assert result.status == "failed"
    assert result.exit_code == EXIT_CODE_INVALID_INPUT
    assert result.error_code == "RUN_CREDENTIAL_INVALID"
    assert verifier.verify_calls == 1
    retry_statuses = [event["status"] for event in transcript.transcript_events() if event["stage"] == "retry"]
    assert "retrying" not in retry_statuses
    assert retry_statuses[-1] == "fatal"


def test_jobs_secure_channel_unreachable_domain_exhausts_retries() -> None:
    """Verify a persistently unavailable trust check exhausts retries with exit 1."""

    verifier = _TrustVerifierStub([ProbeUnavailableError("no logon servers available")])

    result = SecureChannelRepairJob(
        trust_verifier=verifier,
        credential_provider=_valid_credential,
        options=RunOptions(retries=3, retry_delay_seconds=0),
        transcript=TranscriptSink(),
    ).job_execute(SECURE_CHANNEL_JOB_NAME)

    assert result.exit_code == EXIT_CODE_FAILURE
    assert result.error_code == "RUN_RETRY_EXHAUSTED"
    assert verifier.verify_calls == 3
    assert "no logon servers available" in result.error_message


def test_jobs_secure_channel_failed_repair_is_retried() -> None:
    """Verify a repair that does not stick is retried within the budget."""

    verifier = _TrustVerifierStub([False])

    result = SecureChannelRepairJob(
        trust_verifier=verifier,
        credential_provider=_valid_credential,
        options=RunOptions(retries=2, retry_delay_seconds=0),
        transcript=TranscriptSink(),
    ).job_execute(SECURE_CHANNEL_JOB_NAME)

    assert result.error_code == "RUN_RETRY_EXHAUSTED"
    assert len(verifier.repair_targets) == 2


def test_jobs_secure_channel_dry_run_skips_repair() -> None:
    """Verify dry run neither repairs nor records an applied state."""

    verifier = _TrustVerifierStub([False])

    result = SecureChannelRepairJob(
        trust_verifier=verifier,
        credential_provider=_valid_credential,
        options=RunOptions(retries=1, retry_delay_seconds=0, dry_run=True),
        transcript=TranscriptSink(),
    ).job_execute(SECURE_CHANNEL_JOB_NAME)

    assert result.status == "success"
    assert result.applied_state is None
    assert verifier.repair_targets == []


@pytest.mark.parametrize("job_name", ["network-actioner", "", "repair"])
def test_jobs_secure_channel_rejects_unsupported_job_name(job_name: str) -> None:
    """Verify unsupported job names are rejected."""

    job = SecureChannelRepairJob(
        trust_verifier=_TrustVerifierStub([True]),
        credential_provider=_valid_credential,
        options=RunOptions(),
        transcript=TranscriptSink(),
    )

    with pytest.raises(ValueError):
        job.job_execute(job_name)
