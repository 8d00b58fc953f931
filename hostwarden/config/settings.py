"""Typed runtime settings with dotenv support and startup validation."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostwarden.domain import REGISTRY_DWORD_MAX

CREDENTIAL_SOURCES = ("inline", "file", "interactive")
CONFIGURATION_STORE_BACKENDS = ("registry", "sql")


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Settings for probe, reconcile, retry and polling behavior.

    Environment variable names map directly to field names in uppercase.
    Example: `retry_attempts` reads from `RETRY_ATTEMPTS`.

    Attributes:
        retry_attempts: Attempts allowed per cycle by the retry controller.
        retry_delay_seconds: Delay between consecutive attempts.
        poll_interval_seconds: Poll interval; zero runs exactly one cycle.
        log_file: Optional transcript file path.
        powershell_executable: PowerShell binary used by platform adapters.
        powershell_timeout_seconds: Timeout for one PowerShell invocation.
        channel_repair_target: Optional domain controller used for trust checks.
        channel_repair_username: Inline repair credential user name.
        channel_repair_password: Inline repair credential password.
        network_home_category_pattern: Regex matched against connected profile categories.
        network_home_name_pattern: Optional regex matched against connected profile names.
        network_registry_path: Registry key written by the network actioner.
        network_registry_value_name: Registry value name written by the network actioner.
        network_home_value: Value written when the machine is home.
        network_away_value: Value written when the machine is away.
        configuration_store_backend: `registry` on Windows, `sql` elsewhere.
        configuration_store_url: SQLAlchemy URL for the `sql` store backend.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=10.0, ge=0)
    poll_interval_seconds: float = Field(default=0.0, ge=0)
    log_file: str | None = Field(default=None)
    powershell_executable: str = Field(default="powershell", min_length=1)
    powershell_timeout_seconds: float = Field(default=120.0, gt=0)
    channel_repair_target: str | None = Field(default=None)
    channel_repair_username: str | None = Field(default=None)
    channel_repair_password: SecretStr | None = Field(default=None)
    network_home_category_pattern: str = Field(default=r"^(Private|DomainAuthenticated)$")
    network_home_name_pattern: str | None = Field(default=None)
    network_registry_path: str = Field(
        default=r"HKLM\SOFTWARE\Policies\Microsoft\Windows\NetworkProvider\HostWarden",
        min_length=1,
    )
    network_registry_value_name: str = Field(default="NetworkLocation", min_length=1)
    network_home_value: int | str = Field(default=1)
    network_away_value: int | str = Field(default=0)
    configuration_store_backend: str = Field(default="registry")
    configuration_store_url: str = Field(default="sqlite:///hostwarden.db", min_length=1)

    @field_validator("network_home_category_pattern", "network_home_name_pattern")
    @classmethod
    def _validate_regex(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            re.compile(value)
        except re.error as error:
            raise ValueError(f"invalid regular expression: {error}") from error
        return value

    @field_validator("channel_repair_target", "log_file", "channel_repair_username")
    @classmethod
    def _validate_optional_string(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    @field_validator("network_home_value", "network_away_value")
    @classmethod
    def _validate_registry_value(cls, value: int | str) -> int | str:
        # Environment values arrive as text; integral text is written as a DWORD.
        if isinstance(value, str) and re.fullmatch(r"\s*[+-]?\d+\s*", value):
            value = int(value)
        if isinstance(value, int) and not 0 <= value <= REGISTRY_DWORD_MAX:
            raise ValueError(f"registry DWORD value must be within 0..{REGISTRY_DWORD_MAX:#x}")
        return value

    @field_validator("configuration_store_backend")
    @classmethod
    def _validate_store_backend(cls, value: str) -> str:
        normalized_value = value.strip().lower()
        if normalized_value not in CONFIGURATION_STORE_BACKENDS:
            raise ValueError(f"configuration_store_backend must be one of {CONFIGURATION_STORE_BACKENDS}")
        return normalized_value


@dataclass(frozen=True)
class RunOptions:
    """Explicit per-run configuration combining CLI overrides and settings.

    Attributes:
        target: Optional target endpoint (domain controller for trust checks).
        credential_source: `inline`, `file` or `interactive`.
        credential_file: JSON credential file for the `file` source.
        username: Optional user name override for the `inline` source.
        retries: Attempts allowed per cycle.
        retry_delay_seconds: Delay between consecutive attempts.
        interval_seconds: Poll interval; zero or None runs once.
        log_file: Optional transcript file path.
        dry_run: Suppress every external mutation.
    """

    target: str | None = None
    credential_source: str = "inline"
    credential_file: str | None = None
    username: str | None = None
    retries: int = 3
    retry_delay_seconds: float = 10.0
    interval_seconds: float | None = None
    log_file: str | None = None
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.credential_source not in CREDENTIAL_SOURCES:
            raise ValueError(f"credential_source must be one of {CREDENTIAL_SOURCES}")
        if self.retries < 1:
            raise ValueError("retries must be >= 1")
        if self.retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be >= 0")
        if self.interval_seconds is not None and self.interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if self.credential_source == "file" and not (self.credential_file or "").strip():
            raise ValueError("credential_file is required when credential_source is `file`")


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error


def config_build_run_options(
    settings: AppSettings,
    target: str | None = None,
    credential_source: str | None = None,
    credential_file: str | None = None,
    username: str | None = None,
    retries: int | None = None,
    retry_delay_seconds: float | None = None,
    interval_seconds: float | None = None,
    log_file: str | None = None,
    dry_run: bool = False,
) -> RunOptions:
    """Resolve per-run options, preferring explicit overrides over settings.

    Args:
        settings: Validated runtime settings.
        target: Optional target override.
        credential_source: Optional credential source override.
        credential_file: Optional credential file path.
        username: Optional user name override.
        retries: Optional attempts override.
        retry_delay_seconds: Optional delay override.
        interval_seconds: Optional poll interval override.
        log_file: Optional transcript path override.
        dry_run: Whether mutations are suppressed.

    Returns:
        RunOptions: Immutable resolved run options.

    Raises:
        ValueError: Raised when resolved values are invalid.
    """

    return RunOptions(
        target=target if target is not None else settings.channel_repair_target,
        credential_source=(credential_source or "inline").strip().lower(),
        credential_file=credential_file,
        username=username if username is not None else settings.channel_repair_username,
        retries=retries if retries is not None else settings.retry_attempts,
        retry_delay_seconds=(
            retry_delay_seconds if retry_delay_seconds is not None else settings.retry_delay_seconds
        ),
        interval_seconds=interval_seconds if interval_seconds is not None else settings.poll_interval_seconds,
        log_file=log_file if log_file is not None else settings.log_file,
        dry_run=dry_run,
    )
