"""Job layer package for probe, reconcile, retry and poll orchestration."""

from .interfaces import (
	EXIT_CODE_FAILURE,
	EXIT_CODE_INVALID_INPUT,
	EXIT_CODE_SUCCESS,
	JobExecutionResult,
	JobOrchestratorPort,
)
from .network_actioner_job import NETWORK_ACTIONER_JOB_NAME, NetworkActionerConfig, NetworkProfileActionerJob
from .poll_driver import PollDriver, PollRunResult
from .prober import NetworkLocationProber, SecureChannelProber, StateProberPort
from .reconcile_job import ReconcileJobOrchestrator
from .reconciler import (
	RegistryValueApplier,
	SecureChannelApplier,
	StateApplierPort,
	StateReconciler,
	reconcile_decide,
)
from .retry import RetryController, RetryResult
from .secure_channel_job import SECURE_CHANNEL_JOB_NAME, SecureChannelRepairJob
from .transcript import TRANSCRIPT_LOGGER_NAME, TranscriptSink

__all__ = [
	"EXIT_CODE_FAILURE",
	"EXIT_CODE_INVALID_INPUT",
	"EXIT_CODE_SUCCESS",
	"NETWORK_ACTIONER_JOB_NAME",
	"SECURE_CHANNEL_JOB_NAME",
	"TRANSCRIPT_LOGGER_NAME",
	"JobExecutionResult",
	"JobOrchestratorPort",
	"NetworkActionerConfig",
	"NetworkLocationProber",
	"NetworkProfileActionerJob",
	"PollDriver",
	"PollRunResult",
	"ReconcileJobOrchestrator",
	"RegistryValueApplier",
	"RetryController",
	"RetryResult",
	"SecureChannelApplier",
	"SecureChannelProber",
	"SecureChannelRepairJob",
	"StateApplierPort",
	"StateProberPort",
	"StateReconciler",
	"TranscriptSink",
	"reconcile_decide",
]
