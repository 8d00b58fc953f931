"""Typed interfaces for platform capabilities consumed by probers and appliers."""

from typing import Protocol

from hostwarden.domain import NetworkProfileEntry

from .credentials import RepairCredential


class TrustVerifierPort(Protocol):
    """Port for verifying and repairing the machine's domain secure channel."""

    def trust_verify(self, target: str | None) -> bool:
        """Return whether the secure channel to the directory service is healthy.

        Args:
            target: Optional domain controller to evaluate against.

        Returns:
            bool: True when the trust relationship is healthy.

        Raises:
            ProbeUnavailableError: Raised when trust cannot be evaluated.
        """

    def trust_repair(self, credential: RepairCredential, target: str | None) -> bool:
        """Repair the secure channel with a privileged credential.

        Args:
            credential: Domain credential allowed to reset the machine account.
            target: Optional domain controller to repair against.

        Returns:
            bool: True when the platform reports a successful repair.

        Raises:
            CredentialInvalidError: Raised when the credential is rejected.
            ApplyFailedError: Raised when the repair call fails.
        """


class NetworkProfilePort(Protocol):
    """Port for enumerating network connection profiles."""

    def network_list_profiles(self) -> list[NetworkProfileEntry]:
        """Return zero or more connection profiles.

        Returns:
            list[NetworkProfileEntry]: Normalized profile entries.

        Raises:
            ProbeUnavailableError: Raised when profiles cannot be enumerated.
        """
