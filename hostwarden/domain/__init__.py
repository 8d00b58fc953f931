"""Domain models used across application layer boundaries."""

from .models import (
	ACTION_KIND_APPLY,
	ACTION_KIND_NOOP,
	CHANNEL_STATE_HEALTHY,
	CHANNEL_STATE_UNHEALTHY,
	NETWORK_STATE_AWAY,
	NETWORK_STATE_HOME,
	PROBE_KIND_NETWORK_LOCATION,
	PROBE_KIND_SECURE_CHANNEL,
	REGISTRY_DWORD_MAX,
	AppliedState,
	CycleOutcome,
	NetworkProfileEntry,
	ProbeResult,
	ReconcileAction,
	RetryAttempt,
	RetryBudget,
	domain_utc_now,
)
from .timeline import domain_build_stage_event, domain_render_stage_event

__all__ = [
	"ACTION_KIND_APPLY",
	"ACTION_KIND_NOOP",
	"CHANNEL_STATE_HEALTHY",
	"CHANNEL_STATE_UNHEALTHY",
	"NETWORK_STATE_AWAY",
	"NETWORK_STATE_HOME",
	"PROBE_KIND_NETWORK_LOCATION",
	"PROBE_KIND_SECURE_CHANNEL",
	"REGISTRY_DWORD_MAX",
	"AppliedState",
	"CycleOutcome",
	"NetworkProfileEntry",
	"ProbeResult",
	"ReconcileAction",
	"RetryAttempt",
	"RetryBudget",
	"domain_build_stage_event",
	"domain_render_stage_event",
	"domain_utc_now",
]
