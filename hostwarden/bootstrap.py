"""Application bootstrap wiring for adapters, stores and job orchestrators."""

import functools
import sys
from typing import Callable

from hostwarden.adapters import (
    PowerShellNetworkProfileAdapter,
    PowerShellRunner,
    PowerShellTrustVerifier,
    RepairCredential,
    credential_resolve,
)
from hostwarden.config import AppSettings, RunOptions
from hostwarden.db import (
    ConfigurationStorePort,
    SQLAlchemyConfigurationStore,
    WindowsRegistryStore,
    db_configuration_store_ensure_schema,
    db_create_engine,
)
from hostwarden.jobs import (
    NETWORK_ACTIONER_JOB_NAME,
    SECURE_CHANNEL_JOB_NAME,
    NetworkActionerConfig,
    NetworkProfileActionerJob,
    PollDriver,
    ReconcileJobOrchestrator,
    SecureChannelRepairJob,
    TranscriptSink,
)


def bootstrap_create_powershell_runner(settings: AppSettings) -> PowerShellRunner:
    """Build the PowerShell runner shared by platform adapters."""

    return PowerShellRunner(
        executable=settings.powershell_executable,
        timeout_seconds=settings.powershell_timeout_seconds,
    )


def bootstrap_create_configuration_store(settings: AppSettings) -> ConfigurationStorePort:
    """Build the configuration store selected by settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        ConfigurationStorePort: Registry store, or SQL store with its schema ensured.

    Raises:
        ValueError: Raised when the registry backend is selected on a non-Windows host.
        ConfigurationStoreError: Raised when the SQL schema cannot be created.
    """

    if settings.configuration_store_backend == "sql":
        engine = db_create_engine(database_url=settings.configuration_store_url)
        db_configuration_store_ensure_schema(engine)
        return SQLAlchemyConfigurationStore(engine=engine)

    if sys.platform != "win32":
        raise ValueError(
            "configuration_store_backend `registry` requires Windows; set CONFIGURATION_STORE_BACKEND=sql"
        )
    return WindowsRegistryStore()


def bootstrap_create_credential_provider(
    settings: AppSettings,
    options: RunOptions,
) -> Callable[[], RepairCredential]:
    """Build a credential provider resolved on first use and reused afterwards.

    Args:
        settings: Validated runtime settings holding the inline password.
        options: Per-run options naming the credential source.

    Returns:
        Callable[[], RepairCredential]: Memoized credential provider.
    """

    @functools.lru_cache(maxsize=1)
    def provide_credential() -> RepairCredential:
        return credential_resolve(
            source=options.credential_source,
            username=options.username,
            password=settings.channel_repair_password,
            credential_file=options.credential_file,
        )

    return provide_credential


def bootstrap_create_job_orchestrator(
    job_name: str,
    settings: AppSettings,
    options: RunOptions,
    transcript: TranscriptSink,
    stop_requested: Callable[[], bool] | None = None,
) -> ReconcileJobOrchestrator:
    """Build the job orchestrator for one CLI command.

    Args:
        job_name: `repair-channel` or `network-actioner`.
        settings: Validated runtime settings.
        options: Per-run options.
        transcript: Open transcript for the run.
        stop_requested: Optional cancellation flag checked by the poll driver at interval boundaries.

    Returns:
        ReconcileJobOrchestrator: Fully wired job orchestrator instance.

    Raises:
        ValueError: Raised when the job name is unsupported or wiring values are invalid.
    """

    runner = bootstrap_create_powershell_runner(settings)
    poll_driver = PollDriver(transcript=transcript, stop_requested=stop_requested)
    if job_name == SECURE_CHANNEL_JOB_NAME:
        return SecureChannelRepairJob(
            trust_verifier=PowerShellTrustVerifier(runner=runner),
            credential_provider=bootstrap_create_credential_provider(settings, options),
            options=options,
            transcript=transcript,
            poll_driver=poll_driver,
        )
    if job_name == NETWORK_ACTIONER_JOB_NAME:
        return NetworkProfileActionerJob(
            network_adapter=PowerShellNetworkProfileAdapter(runner=runner),
            store=bootstrap_create_configuration_store(settings),
            config=NetworkActionerConfig(
                home_category_pattern=settings.network_home_category_pattern,
                home_name_pattern=settings.network_home_name_pattern,
                registry_path=settings.network_registry_path,
                registry_value_name=settings.network_registry_value_name,
                home_value=settings.network_home_value,
                away_value=settings.network_away_value,
            ),
            options=options,
            transcript=transcript,
            poll_driver=poll_driver,
        )
    raise ValueError(f"unsupported job_name={job_name}")
