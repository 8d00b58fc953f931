"""Unit tests for reconcile decisions, appliers and the state reconciler."""

from __future__ import annotations

import pytest

from hostwarden.adapters import ApplyFailedError, CredentialInvalidError, credential_build
from hostwarden.db import ConfigurationStoreError
from hostwarden.domain import (
    CHANNEL_STATE_HEALTHY,
    CHANNEL_STATE_UNHEALTHY,
    NETWORK_STATE_AWAY,
    NETWORK_STATE_HOME,
    PROBE_KIND_NETWORK_LOCATION,
    PROBE_KIND_SECURE_CHANNEL,
    AppliedState,
    ProbeResult,
)
from hostwarden.jobs import (
    RegistryValueApplier,
    SecureChannelApplier,
    StateReconciler,
    TranscriptSink,
    reconcile_decide,
)


class _MemoryStoreStub:
    """Configuration store stub keeping values in a dict."""

    def __init__(self, read_override: object | None = None, fail_writes: bool = False):
        self.values: dict[tuple[str, str], object] = {}
        self.write_calls: list[tuple[str, str, object]] = []
        self._read_override = read_override
        self._fail_writes = fail_writes

    def store_label(self) -> str:
        """Return fixed label."""

        return "memory"

    def store_read_value(self, key_path: str, value_name: str):
        """Return stored value, or the override when configured."""

        if self._read_override is not None:
            return self._read_override
        return self.values.get((key_path, value_name))

    def store_write_value(self, key_path: str, value_name: str, value) -> None:
        """Store value or raise a store error."""

        if self._fail_writes:
            raise ConfigurationStoreError("registry write failed")
        self.write_calls.append((key_path, value_name, value))
        self.values[(key_path, value_name)] = value


class _TrustVerifierStub:
    """Trust verifier stub with scripted repair and verify results."""

    def __init__(self, repair_results: list[bool | Exception], verify_results: list[bool] | None = None):
        self._repair_results = list(repair_results)
        self._verify_results = list(verify_results or [True] * len(repair_results))
        self.repair_calls = 0

    def trust_verify(self, target: str | None) -> bool:
        """Return the next scripted verification result."""

        _ = target
        return self._verify_results.pop(0)

    def trust_repair(self, credential, target: str | None) -> bool:
        """Return the next scripted repair result or raise it."""

        _ = (credential, target)
        self.repair_calls += 1
        result = self._repair_results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _network_probe(state: str) -> ProbeResult:
    return ProbeResult(kind=PROBE_KIND_NETWORK_LOCATION, state=state)


def _channel_probe(state: str) -> ProbeResult:
    return ProbeResult(
        kind=PROBE_KIND_SECURE_CHANNEL,
        state=state,
        requires_correction=state == CHANNEL_STATE_UNHEALTHY,
    )


def _registry_applier(store: _MemoryStoreStub) -> RegistryValueApplier:
    return RegistryValueApplier(
        store=store,
        key_path=r"HKLM\SOFTWARE\HostWarden",
        value_name="NetworkLocation",
        values_by_state={NETWORK_STATE_HOME: 1, NETWORK_STATE_AWAY: 0},
    )


def test_jobs_reconcile_decide_first_observation_applies() -> None:
    """Verify the first observation always yields apply."""

    action = reconcile_decide(_network_probe(NETWORK_STATE_AWAY), None)

    assert action.action_is_apply()
    assert action.target.state == NETWORK_STATE_AWAY


def test_jobs_reconcile_decide_unchanged_state_is_noop() -> None:
    """Verify an unchanged observation yields noop and a change yields apply.

    Returns:
        None: Assertions validate decisions.

    Raises:
        AssertionError: Raised when decisions differ.
    """

    previous = AppliedState(kind=PROBE_KIND_NETWORK_LOCATION, state=NETWORK_STATE_AWAY, applied_value=0)

    assert not reconcile_decide(_network_probe(NETWORK_STATE_AWAY), previous).action_is_apply()
    assert reconcile_decide(_network_probe(NETWORK_STATE_HOME), previous).action_is_apply()


def test_jobs_reconcile_decide_persistent_fault_is_reapplied() -> None:
    """Verify an unhealthy channel is repaired again even when previously recorded unhealthy."""

    previous = AppliedState(kind=PROBE_KIND_SECURE_CHANNEL, state=CHANNEL_STATE_UNHEALTHY, applied_value="repaired")

    assert reconcile_decide(_channel_probe(CHANNEL_STATE_UNHEALTHY), previous).action_is_apply()
    healthy_previous = AppliedState(kind=PROBE_KIND_SECURE_CHANNEL, state=CHANNEL_STATE_HEALTHY)
    assert not reconcile_decide(_channel_probe(CHANNEL_STATE_HEALTHY), healthy_previous).action_is_apply()


def test_jobs_reconciler_applied_state_tracks_latest_apply() -> None:
    """Verify the applied state equals the most recent probe result that triggered an apply.

    Returns:
        None: Assertions validate applied-state progression and mutation count.

    Raises:
        AssertionError: Raised when progression differs.
    """

    store = _MemoryStoreStub()
    reconciler = StateReconciler(applier=_registry_applier(store), transcript=TranscriptSink())

    applied_state = None
    for state in [NETWORK_STATE_AWAY, NETWORK_STATE_AWAY, NETWORK_STATE_HOME, NETWORK_STATE_HOME, NETWORK_STATE_AWAY]:
        applied_state = reconciler.reconciler_cycle(_network_probe(state), applied_state).applied_state

    assert applied_state.state == NETWORK_STATE_AWAY
    assert applied_state.applied_value == 0
    assert [call[2] for call in store.write_calls] == [0, 1, 0]


def test_jobs_registry_applier_is_idempotent() -> None:
    """Verify applying the same target twice yields the same end state."""

    store = _MemoryStoreStub()
    applier = _registry_applier(store)

    first_state = applier.applier_apply(_network_probe(NETWORK_STATE_HOME))
    second_state = applier.applier_apply(_network_probe(NETWORK_STATE_HOME))

    assert first_state.state == second_state.state == NETWORK_STATE_HOME
    assert first_state.applied_value == second_state.applied_value == 1
    assert store.values == {(r"HKLM\SOFTWARE\HostWarden", "NetworkLocation"): 1}


def test_jobs_registry_applier_failures_are_apply_failed() -> None:
    """Verify read-back mismatch and store errors raise `ApplyFailedError`."""

    with pytest.raises(ApplyFailedError, match="reads back"):
        _registry_applier(_MemoryStoreStub(read_override=5)).applier_apply(_network_probe(NETWORK_STATE_HOME))
    with pytest.raises(ApplyFailedError):
        _registry_applier(_MemoryStoreStub(fail_writes=True)).applier_apply(_network_probe(NETWORK_STATE_AWAY))


def test_jobs_reconciler_dry_run_performs_no_mutation() -> None:
    """Verify dry-run describes the pending write and keeps the previous state.

    Returns:
        None: Assertions validate dry-run behavior.

    Raises:
        AssertionError: Raised when a mutation is performed.
    """

    store = _MemoryStoreStub()
    store.values[(r"HKLM\SOFTWARE\HostWarden", "NetworkLocation")] = 0
    transcript = TranscriptSink()
    reconciler = StateReconciler(applier=_registry_applier(store), transcript=transcript)

    outcome = reconciler.reconciler_cycle(_network_probe(NETWORK_STATE_HOME), None, dry_run=True)

    assert outcome.action.action_is_apply()
    assert outcome.applied_state is None
    assert outcome.dry_run
    assert store.write_calls == []
    dry_run_event = [event for event in transcript.transcript_events() if event["status"] == "dry_run"][0]
    assert dry_run_event["details"]["would_apply"]["current_value"] == 0
    assert dry_run_event["details"]["would_apply"]["desired_value"] == 1


def test_jobs_secure_channel_applier_repairs_once_and_reverifies() -> None:
    """Verify an unhealthy channel triggers one repair with a credential fetched on demand."""

    verifier = _TrustVerifierStub(repair_results=[True], verify_results=[True])
    credential_requests: list[int] = []

    def _credential_provider():
        credential_requests.append(1)
        return credential_build(username="CORP\\svc-repair", password="s3cret")

    applier = SecureChannelApplier(trust_verifier=verifier, credential_provider=_credential_provider)

    healthy_state = applier.applier_apply(_channel_probe(CHANNEL_STATE_HEALTHY))
    repaired_state = applier.applier_apply(_channel_probe(CHANNEL_STATE_UNHEALTHY))

    assert healthy_state.applied_value == "verified"
    assert repaired_state.applied_value == "repaired"
    assert verifier.repair_calls == 1
    assert len(credential_requests) == 1


@pytest.mark.parametrize(
    ("repair_results", "verify_results", "expected_error"),
    [
        ([False], [True], ApplyFailedError),
        ([True], [False], ApplyFailedError),
        ([CredentialInvalidError("repair credential rejected")], [], CredentialInvalidError),
    ],
)
def test_jobs_secure_channel_applier_failures(
    repair_results: list[bool | Exception],
    verify_results: list[bool],
    expected_error: type[Exception],
) -> None:
    """Verify failed repairs, unconfirmed repairs and rejected credentials raise typed errors."""

    applier = SecureChannelApplier(
        trust_verifier=_TrustVerifierStub(repair_results=repair_results, verify_results=verify_results),
        credential_provider=lambda: credential_build(username="CORP\\svc-repair", password="s3cret"),
    )

    with pytest.raises(expected_error):
        applier.applier_apply(_channel_probe(CHANNEL_STATE_UNHEALTHY))
