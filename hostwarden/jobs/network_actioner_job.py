"""Network location actioner job."""

from __future__ import annotations

from dataclasses import dataclass

from hostwarden.adapters import NetworkProfilePort, ProbeNotSettledError
from hostwarden.config import RunOptions
from hostwarden.db import ConfigurationStorePort, ConfigurationValue
from hostwarden.domain import (
    NETWORK_STATE_AWAY,
    NETWORK_STATE_HOME,
    AppliedState,
    ProbeResult,
    RetryAttempt,
)

from .poll_driver import PollDriver
from .prober import NetworkLocationProber
from .reconcile_job import ReconcileJobOrchestrator
from .reconciler import RegistryValueApplier, StateReconciler
from .retry import RetryController
from .transcript import TranscriptSink

NETWORK_ACTIONER_JOB_NAME = "network-actioner"


@dataclass(frozen=True)
class NetworkActionerConfig:
    """Configuration values for network location actioning.

    Attributes:
        home_category_pattern: Regex for profile categories that count as home.
        home_name_pattern: Optional regex a home profile name must also match.
        registry_path: Key path of the value written on change.
        registry_value_name: Value name written on change.
        home_value: Value written when the machine is home.
        away_value: Value written when the machine is away.
    """

    home_category_pattern: str = r"^(Private|DomainAuthenticated)$"
    home_name_pattern: str | None = None
    registry_path: str = r"HKLM\SOFTWARE\Policies\Microsoft\Windows\NetworkProvider\HostWarden"
    registry_value_name: str = "NetworkLocation"
    home_value: ConfigurationValue = 1
    away_value: ConfigurationValue = 0


class NetworkProfileActionerJob(ReconcileJobOrchestrator):
    """Classify the active network as home or away and record it in one value.

    Network profiles are still being identified shortly after logon, so on the
    first cycle an `away` result is accepted only on the final attempt.
    """

    _JOB_NAME = NETWORK_ACTIONER_JOB_NAME

    def __init__(
        self,
        network_adapter: NetworkProfilePort,
        store: ConfigurationStorePort,
        config: NetworkActionerConfig,
        options: RunOptions,
        transcript: TranscriptSink,
        retry_controller: RetryController | None = None,
        poll_driver: PollDriver | None = None,
    ):
        super().__init__(
            prober=NetworkLocationProber(
                network_adapter=network_adapter,
                home_category_pattern=config.home_category_pattern,
                home_name_pattern=config.home_name_pattern,
            ),
            reconciler=StateReconciler(
                applier=RegistryValueApplier(
                    store=store,
                    key_path=config.registry_path,
                    value_name=config.registry_value_name,
                    values_by_state={
                        NETWORK_STATE_HOME: config.home_value,
                        NETWORK_STATE_AWAY: config.away_value,
                    },
                ),
                transcript=transcript,
            ),
            options=options,
            transcript=transcript,
            retry_controller=retry_controller,
            poll_driver=poll_driver,
        )

    def _job_check_probe(
        self,
        current: ProbeResult,
        attempt: RetryAttempt,
        previous: AppliedState | None,
    ) -> None:
        """Treat an early `away` on the first cycle as not yet settled.

        Raises:
            ProbeNotSettledError: Raised for `away` on a non-final first-cycle attempt.
        """

        if previous is not None or current.state != NETWORK_STATE_AWAY or attempt.attempt_is_final():
            return
        raise ProbeNotSettledError(
            f"network location not settled on attempt {attempt.attempt_number} of {attempt.max_attempts}"
        )
