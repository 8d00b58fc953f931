"""Typed domain models shared across runtime layers.

This module provides the data contracts passed between probers, the
reconciler, the retry controller and the poll driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

PROBE_KIND_SECURE_CHANNEL = "secure_channel"
PROBE_KIND_NETWORK_LOCATION = "network_location"

CHANNEL_STATE_HEALTHY = "healthy"
CHANNEL_STATE_UNHEALTHY = "unhealthy"
NETWORK_STATE_HOME = "home"
NETWORK_STATE_AWAY = "away"

REGISTRY_DWORD_MAX = 0xFFFFFFFF

ACTION_KIND_NOOP = "noop"
ACTION_KIND_APPLY = "apply"


def domain_utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp.

    Returns:
        datetime: Current UTC time.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProbeResult:
    """One freshly observed platform condition.

    Attributes:
        kind: Probe family (`secure_channel` or `network_location`).
        state: Observed state label (`healthy`/`unhealthy` or `home`/`away`).
        detail: Diagnostic facts gathered by the probe.
        requires_correction: Whether the state is a fault that persists until corrected.
        observed_at_utc: Observation timestamp.
    """

    kind: str
    state: str
    detail: dict[str, Any] = field(default_factory=dict)
    requires_correction: bool = False
    observed_at_utc: datetime = field(default_factory=domain_utc_now)


@dataclass(frozen=True)
class AppliedState:
    """Outcome of the last successfully applied reconciliation.

    Held in process memory only and owned by the poll driver.

    Attributes:
        kind: Probe family the state belongs to.
        state: State label that was applied.
        applied_value: Value written or corrective operation performed.
        applied_at_utc: Time the reconciliation completed.
    """

    kind: str
    state: str
    applied_value: Any = None
    applied_at_utc: datetime = field(default_factory=domain_utc_now)

    def applied_reflects(self, result: ProbeResult) -> bool:
        """Return whether this applied state already matches a probe result.

        Args:
            result: Freshly probed condition.

        Returns:
            bool: True when kind and state label are equal.
        """

        return self.kind == result.kind and self.state == result.state


@dataclass(frozen=True)
class ReconcileAction:
    """Reconciler decision for one probe result.

    Attributes:
        kind: `noop` or `apply`.
        target: Probe result to apply; None for `noop`.
    """

    kind: str
    target: ProbeResult | None = None

    @classmethod
    def action_noop(cls) -> ReconcileAction:
        """Build a no-op action."""

        return cls(kind=ACTION_KIND_NOOP)

    @classmethod
    def action_apply(cls, target: ProbeResult) -> ReconcileAction:
        """Build an apply action for the given probe result."""

        return cls(kind=ACTION_KIND_APPLY, target=target)

    def action_is_apply(self) -> bool:
        """Return whether the action requires an external mutation."""

        return self.kind == ACTION_KIND_APPLY


@dataclass
class RetryBudget:
    """Mutable retry budget consumed once per failed attempt.

    Attributes:
        max_attempts: Total attempts allowed, at least one.
        delay_seconds: Sleep between consecutive attempts.
        remaining: Attempts not yet consumed.
    """

    max_attempts: int
    delay_seconds: float
    remaining: int = field(init=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.remaining = self.max_attempts

    def budget_consume(self) -> int:
        """Consume one unit of budget and return the remaining count.

        Returns:
            int: Remaining attempts after consumption.

        Raises:
            RuntimeError: Raised when the budget is already exhausted.
        """

        if self.remaining <= 0:
            raise RuntimeError("retry budget already exhausted")
        self.remaining -= 1
        return self.remaining

    def budget_is_exhausted(self) -> bool:
        """Return whether no attempts remain."""

        return self.remaining == 0


@dataclass(frozen=True)
class RetryAttempt:
    """Attempt context handed to an operation run under the retry controller.

    Attributes:
        attempt_number: One-based attempt counter.
        max_attempts: Total attempts allowed for this execution.
    """

    attempt_number: int
    max_attempts: int

    def attempt_is_final(self) -> bool:
        """Return whether no further attempt will follow a failure of this one."""

        return self.attempt_number >= self.max_attempts


@dataclass(frozen=True)
class CycleOutcome:
    """Result of one probe/reconcile cycle.

    Attributes:
        action: Reconciler decision taken for the cycle.
        applied_state: Applied state after the cycle.
        dry_run: Whether mutations were suppressed.
    """

    action: ReconcileAction
    applied_state: AppliedState | None
    dry_run: bool = False


@dataclass(frozen=True)
class NetworkProfileEntry:
    """One network connection profile as reported by the platform.

    Attributes:
        name: Profile (network) name.
        category: Normalized category label, e.g. `Public` or `Private`.
        ipv4_connectivity: Normalized IPv4 connectivity label.
        ipv6_connectivity: Normalized IPv6 connectivity label.
        interface_alias: Adapter alias the profile is bound to.
    """

    name: str
    category: str
    ipv4_connectivity: str = "Disconnected"
    ipv6_connectivity: str = "Disconnected"
    interface_alias: str = ""

    _CONNECTED_LEVELS = frozenset({"LocalNetwork", "Internet"})

    def profile_is_connected(self) -> bool:
        """Return whether either address family reports usable connectivity.

        Returns:
            bool: True when IPv4 or IPv6 connectivity is `LocalNetwork` or `Internet`.
        """

        return (
            self.ipv4_connectivity in self._CONNECTED_LEVELS
            or self.ipv6_connectivity in self._CONNECTED_LEVELS
        )
