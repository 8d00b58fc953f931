"""Secure channel repair job."""

from __future__ import annotations

from typing import Callable

from hostwarden.adapters import RepairCredential, TrustVerifierPort
from hostwarden.config import RunOptions

from .poll_driver import PollDriver
from .prober import SecureChannelProber
from .reconcile_job import ReconcileJobOrchestrator
from .reconciler import SecureChannelApplier, StateReconciler
from .retry import RetryController
from .transcript import TranscriptSink

SECURE_CHANNEL_JOB_NAME = "repair-channel"


class SecureChannelRepairJob(ReconcileJobOrchestrator):
    """Verify the machine's domain trust and repair it when broken.

    The credential provider is called only when a repair is needed, so a
    healthy channel never prompts or reads a credential file.
    """

    _JOB_NAME = SECURE_CHANNEL_JOB_NAME

    def __init__(
        self,
        trust_verifier: TrustVerifierPort,
        credential_provider: Callable[[], RepairCredential],
        options: RunOptions,
        transcript: TranscriptSink,
        retry_controller: RetryController | None = None,
        poll_driver: PollDriver | None = None,
    ):
        super().__init__(
            prober=SecureChannelProber(trust_verifier),
            reconciler=StateReconciler(
                applier=SecureChannelApplier(
                    trust_verifier=trust_verifier,
                    credential_provider=credential_provider,
                    target=options.target,
                ),
                transcript=transcript,
            ),
            options=options,
            transcript=transcript,
            retry_controller=retry_controller,
            poll_driver=poll_driver,
        )
