"""PowerShell-backed trust verifier for the machine's domain secure channel."""

from __future__ import annotations

import logging
from typing import Final

from .credentials import RepairCredential
from .errors import (
    ApplyFailedError,
    CredentialInvalidError,
    PowerShellCommandError,
    ProbeUnavailableError,
)
from .interfaces import TrustVerifierPort
from .powershell import PowerShellRunner

logger = logging.getLogger(__name__)


class PowerShellTrustVerifier(TrustVerifierPort):
    """Trust verifier built on `Test-ComputerSecureChannel`.

    Target and credential values travel through the child environment so they
    are never interpolated into script text or visible on the command line.
    """

    _TARGET_VARIABLE: Final[str] = "HOSTWARDEN_TRUST_TARGET"
    _USERNAME_VARIABLE: Final[str] = "HOSTWARDEN_REPAIR_USERNAME"
    _PASSWORD_VARIABLE: Final[str] = "HOSTWARDEN_REPAIR_PASSWORD"

    _VERIFY_SCRIPT: Final[str] = (
        "$ErrorActionPreference = 'Stop'; "
        "$channelParameters = @{}; "
        "if ($env:HOSTWARDEN_TRUST_TARGET) { $channelParameters.Server = $env:HOSTWARDEN_TRUST_TARGET }; "
        "Test-ComputerSecureChannel @channelParameters | ConvertTo-Json -Compress"
    )
    _REPAIR_SCRIPT: Final[str] = (
        "$ErrorActionPreference = 'Stop'; "
        "$securePassword = ConvertTo-SecureString -String $env:HOSTWARDEN_REPAIR_PASSWORD -AsPlainText -Force; "
        "$repairCredential = New-Object System.Management.Automation.PSCredential("
        "$env:HOSTWARDEN_REPAIR_USERNAME, $securePassword); "
        "$channelParameters = @{ Repair = $true; Credential = $repairCredential }; "
        "if ($env:HOSTWARDEN_TRUST_TARGET) { $channelParameters.Server = $env:HOSTWARDEN_TRUST_TARGET }; "
        "Test-ComputerSecureChannel @channelParameters | ConvertTo-Json -Compress"
    )
    _CREDENTIAL_REJECTION_MARKERS: Final[tuple[str, ...]] = (
        "user name or password is incorrect",
        "unknown user name or bad password",
        "logon failure",
        "access is denied",
        "account is disabled",
        "account has expired",
    )

    def __init__(self, runner: PowerShellRunner):
        """Initialize trust verifier.

        Args:
            runner: PowerShell runner used for platform calls.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when runner is None.
        """

        if runner is None:
            raise ValueError("runner must not be None")
        self._runner = runner

    def trust_verify(self, target: str | None) -> bool:
        """Evaluate the secure channel without changing it.

        Args:
            target: Optional domain controller name.

        Returns:
            bool: True when the trust relationship is healthy.

        Raises:
            ProbeUnavailableError: Raised when the check cannot complete or returns no boolean.
        """

        try:
            output = self._runner.powershell_run_json(
                script=self._VERIFY_SCRIPT,
                environment=self._trust_environment(target=target),
            )
        except PowerShellCommandError as error:
            raise ProbeUnavailableError(
                f"secure channel check failed: {error}",
                error_code=error.error_code,
            ) from error

        if not isinstance(output, bool):
            raise ProbeUnavailableError(f"secure channel check returned non-boolean output: {output!r}")
        return output

    def trust_repair(self, credential: RepairCredential, target: str | None) -> bool:
        """Reset the machine account password against the directory service.

        Args:
            credential: Privileged domain credential.
            target: Optional domain controller name.

        Returns:
            bool: True when the platform reports a successful repair.

        Raises:
            CredentialInvalidError: Raised when the platform rejects the credential.
            ApplyFailedError: Raised when the repair call fails for another reason.
        """

        environment = self._trust_environment(target=target)
        environment[self._USERNAME_VARIABLE] = credential.username
        environment[self._PASSWORD_VARIABLE] = credential.password.get_secret_value()
        try:
            output = self._runner.powershell_run_json(script=self._REPAIR_SCRIPT, environment=environment)
        except PowerShellCommandError as error:
            if self._trust_is_credential_rejection(error.stderr or str(error)):
                raise CredentialInvalidError(
                    f"repair credential rejected for {credential.username}",
                    error_code=error.error_code,
                ) from error
            raise ApplyFailedError(f"secure channel repair failed: {error}", error_code=error.error_code) from error

        if not isinstance(output, bool):
            raise ApplyFailedError(f"secure channel repair returned non-boolean output: {output!r}")
        logger.info("secure channel repair reported %s for %s", output, target or "default domain controller")
        return output

    def _trust_environment(self, target: str | None) -> dict[str, str]:
        environment = {self._TARGET_VARIABLE: ""}
        if target and target.strip():
            environment[self._TARGET_VARIABLE] = target.strip()
        return environment

    def _trust_is_credential_rejection(self, message: str) -> bool:
        normalized_message = message.lower()
        return any(marker in normalized_message for marker in self._CREDENTIAL_REJECTION_MARKERS)
