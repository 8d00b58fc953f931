"""State reconciler deciding and applying at most one corrective action per change."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from hostwarden.adapters import ApplyFailedError, RepairCredential, TrustVerifierPort
from hostwarden.db import ConfigurationStoreError, ConfigurationStorePort, ConfigurationValue
from hostwarden.domain import (
    CHANNEL_STATE_HEALTHY,
    AppliedState,
    CycleOutcome,
    ProbeResult,
    ReconcileAction,
)

from .transcript import TranscriptSink

logger = logging.getLogger(__name__)


def reconcile_decide(current: ProbeResult, previous: AppliedState | None) -> ReconcileAction:
    """Decide whether the current observation needs a corrective action.

    A change from the previously applied state, including the very first
    observation, yields `apply`. An unchanged observation yields `noop` unless
    the observed state is a fault that persists until corrected.

    Args:
        current: Fresh probe result.
        previous: Last successfully applied state; None on the first cycle.

    Returns:
        ReconcileAction: `noop` or `apply(current)`.
    """

    if previous is not None and previous.applied_reflects(current) and not current.requires_correction:
        return ReconcileAction.action_noop()
    return ReconcileAction.action_apply(current)


class StateApplierPort(Protocol):
    """Port definition for performing one corrective mutation."""

    def applier_describe(self, target: ProbeResult) -> dict[str, Any]:
        """Describe the mutation `applier_apply` would perform, without performing it.

        Args:
            target: Probe result to apply.

        Returns:
            dict[str, Any]: Structured description for the transcript.

        Raises:
            ApplyFailedError: Raised when current values cannot be read.
        """

    def applier_apply(self, target: ProbeResult) -> AppliedState:
        """Perform exactly one external mutation for the target state.

        Args:
            target: Probe result to apply.

        Returns:
            AppliedState: Applied state after success.

        Raises:
            ApplyFailedError: Raised when the mutation did not take effect.
            CredentialInvalidError: Raised when a required credential is rejected.
        """


class SecureChannelApplier(StateApplierPort):
    """Repair a broken secure channel with one credential-based repair call.

    A healthy channel needs no repair; applying it records the healthy baseline.
    """

    def __init__(
        self,
        trust_verifier: TrustVerifierPort,
        credential_provider: Callable[[], RepairCredential],
        target: str | None = None,
    ):
        """Initialize secure channel applier.

        Args:
            trust_verifier: Platform trust verification and repair capability.
            credential_provider: Callable returning the repair credential on demand.
            target: Optional domain controller to repair against.

        Raises:
            ValueError: Raised when a dependency is None.
        """

        if trust_verifier is None:
            raise ValueError("trust_verifier must not be None")
        if credential_provider is None:
            raise ValueError("credential_provider must not be None")
        self._trust_verifier = trust_verifier
        self._credential_provider = credential_provider
        self._target = target

    def applier_describe(self, target: ProbeResult) -> dict[str, Any]:
        """Describe the repair that would run for an unhealthy channel."""

        operation = "repair" if target.state != CHANNEL_STATE_HEALTHY else "none"
        return {"operation": operation, "target": self._target or "default"}

    def applier_apply(self, target: ProbeResult) -> AppliedState:
        """Repair the channel when unhealthy and confirm the repair took effect.

        Args:
            target: Secure channel probe result.

        Returns:
            AppliedState: Applied state with `repaired` or `verified` as value.

        Raises:
            CredentialInvalidError: Raised when the credential is malformed or rejected.
            ApplyFailedError: Raised when the repair fails or the channel is still broken.
            ProbeUnavailableError: Raised when the confirming check cannot complete.
        """

        if target.state == CHANNEL_STATE_HEALTHY:
            return AppliedState(kind=target.kind, state=target.state, applied_value="verified")

        credential = self._credential_provider()
        if not self._trust_verifier.trust_repair(credential, self._target):
            raise ApplyFailedError("secure channel repair reported failure")
        if not self._trust_verifier.trust_verify(self._target):
            raise ApplyFailedError("secure channel still unhealthy after repair")
        return AppliedState(kind=target.kind, state=target.state, applied_value="repaired")


class RegistryValueApplier(StateApplierPort):
    """Write the configured value for the observed state into a configuration store."""

    def __init__(
        self,
        store: ConfigurationStorePort,
        key_path: str,
        value_name: str,
        values_by_state: dict[str, ConfigurationValue],
    ):
        """Initialize registry value applier.

        Args:
            store: Configuration store receiving the value.
            key_path: Key path written to.
            value_name: Value name written to.
            values_by_state: Value to write for each probe state label.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if store is None:
            raise ValueError("store must not be None")
        if not key_path.strip():
            raise ValueError("key_path must not be blank")
        if not value_name.strip():
            raise ValueError("value_name must not be blank")
        if not values_by_state:
            raise ValueError("values_by_state must not be empty")
        self._store = store
        self._key_path = key_path.strip()
        self._value_name = value_name.strip()
        self._values_by_state = dict(values_by_state)

    def applier_describe(self, target: ProbeResult) -> dict[str, Any]:
        """Describe the pending write, including the currently stored value."""

        try:
            current_value = self._store.store_read_value(self._key_path, self._value_name)
        except ConfigurationStoreError as error:
            raise ApplyFailedError(f"configuration store read failed: {error}") from error
        return {
            "store": self._store.store_label(),
            "key_path": self._key_path,
            "value_name": self._value_name,
            "current_value": current_value,
            "desired_value": self._applier_value_for(target),
        }

    def applier_apply(self, target: ProbeResult) -> AppliedState:
        """Write the value for the target state and confirm it by reading it back.

        Args:
            target: Probe result to apply.

        Returns:
            AppliedState: Applied state carrying the written value.

        Raises:
            ValueError: Raised when no value is configured for the target state.
            ApplyFailedError: Raised when the write fails or the read-back differs.
        """

        desired_value = self._applier_value_for(target)
        try:
            self._store.store_write_value(self._key_path, self._value_name, desired_value)
            stored_value = self._store.store_read_value(self._key_path, self._value_name)
        except ConfigurationStoreError as error:
            raise ApplyFailedError(f"configuration store write failed: {error}") from error

        if stored_value != desired_value:
            raise ApplyFailedError(
                f"configuration value {self._key_path}\\{self._value_name} reads back {stored_value!r}, "
                f"expected {desired_value!r}"
            )
        return AppliedState(kind=target.kind, state=target.state, applied_value=desired_value)

    def _applier_value_for(self, target: ProbeResult) -> ConfigurationValue:
        if target.state not in self._values_by_state:
            raise ValueError(f"no configuration value for state={target.state}")
        return self._values_by_state[target.state]


class StateReconciler:
    """Decide on one probe result and apply it through a state applier."""

    def __init__(self, applier: StateApplierPort, transcript: TranscriptSink):
        """Initialize state reconciler.

        Args:
            applier: Applier performing the corrective mutation.
            transcript: Transcript receiving reconcile stage events.

        Raises:
            ValueError: Raised when a dependency is None.
        """

        if applier is None:
            raise ValueError("applier must not be None")
        if transcript is None:
            raise ValueError("transcript must not be None")
        self._applier = applier
        self._transcript = transcript

    def reconciler_cycle(
        self,
        current: ProbeResult,
        previous: AppliedState | None,
        dry_run: bool = False,
    ) -> CycleOutcome:
        """Reconcile one observation against the previously applied state.

        The applied state changes only after a successful apply; a dry run or a
        failed apply leaves `previous` in place.

        Args:
            current: Fresh probe result.
            previous: Last successfully applied state.
            dry_run: Describe instead of performing the mutation.

        Returns:
            CycleOutcome: Decision and resulting applied state.

        Raises:
            ApplyFailedError: Raised when the mutation did not take effect.
            CredentialInvalidError: Raised when a required credential is rejected.
        """

        action = reconcile_decide(current, previous)
        if not action.action_is_apply():
            self._transcript.transcript_record(
                stage="reconcile",
                status="noop",
                details={"kind": current.kind, "state": current.state},
            )
            return CycleOutcome(action=action, applied_state=previous, dry_run=dry_run)

        if dry_run:
            self._transcript.transcript_record(
                stage="reconcile",
                status="dry_run",
                details={
                    "kind": current.kind,
                    "state": current.state,
                    "previous_state": previous.state if previous else None,
                    "would_apply": self._applier.applier_describe(current),
                },
            )
            return CycleOutcome(action=action, applied_state=previous, dry_run=True)

        self._transcript.transcript_record(
            stage="reconcile",
            status="applying",
            details={
                "kind": current.kind,
                "state": current.state,
                "previous_state": previous.state if previous else None,
            },
        )
        applied_state = self._applier.applier_apply(current)
        self._transcript.transcript_record(
            stage="reconcile",
            status="applied",
            details={"state": applied_state.state, "applied_value": applied_state.applied_value},
        )
        logger.info("applied %s state %s", applied_state.kind, applied_state.state)
        return CycleOutcome(action=action, applied_state=applied_state)
