"""State probers turning read-only platform queries into probe results."""

from __future__ import annotations

import re
from typing import Protocol

from hostwarden.adapters import NetworkProfilePort, TrustVerifierPort
from hostwarden.domain import (
    CHANNEL_STATE_HEALTHY,
    CHANNEL_STATE_UNHEALTHY,
    NETWORK_STATE_AWAY,
    NETWORK_STATE_HOME,
    PROBE_KIND_NETWORK_LOCATION,
    PROBE_KIND_SECURE_CHANNEL,
    NetworkProfileEntry,
    ProbeResult,
)


class StateProberPort(Protocol):
    """Port definition for read-only state probes."""

    def prober_probe(self, target: str | None = None) -> ProbeResult:
        """Observe the current condition without mutating system state.

        Args:
            target: Optional probe target, e.g. a domain controller.

        Returns:
            ProbeResult: Fresh observation.

        Raises:
            ProbeUnavailableError: Raised when the platform query cannot be completed.
        """


class SecureChannelProber(StateProberPort):
    """Probe the machine's trust relationship with its directory service."""

    def __init__(self, trust_verifier: TrustVerifierPort):
        """Initialize secure channel prober.

        Args:
            trust_verifier: Platform trust verification capability.

        Raises:
            ValueError: Raised when trust_verifier is None.
        """

        if trust_verifier is None:
            raise ValueError("trust_verifier must not be None")
        self._trust_verifier = trust_verifier

    def prober_probe(self, target: str | None = None) -> ProbeResult:
        """Return `healthy` or `unhealthy` for the secure channel.

        Args:
            target: Optional domain controller to evaluate against.

        Returns:
            ProbeResult: Secure channel observation.

        Raises:
            ProbeUnavailableError: Raised when trust cannot be evaluated.
        """

        is_healthy = self._trust_verifier.trust_verify(target)
        return ProbeResult(
            kind=PROBE_KIND_SECURE_CHANNEL,
            state=CHANNEL_STATE_HEALTHY if is_healthy else CHANNEL_STATE_UNHEALTHY,
            detail={"target": target or "default"},
            requires_correction=not is_healthy,
        )


class NetworkLocationProber(StateProberPort):
    """Classify the machine as `home` or `away` from its connection profiles.

    A machine is home when at least one connected profile has a category
    matching the home category pattern and, when configured, a name matching
    the home name pattern. No profiles, or no connected profiles, classify as
    away, the same as when every connected profile is public.
    """

    def __init__(
        self,
        network_adapter: NetworkProfilePort,
        home_category_pattern: str = r"^(Private|DomainAuthenticated)$",
        home_name_pattern: str | None = None,
    ):
        """Initialize network location prober.

        Args:
            network_adapter: Platform profile enumeration capability.
            home_category_pattern: Regex matched case-insensitively against profile categories.
            home_name_pattern: Optional regex matched case-insensitively against profile names.

        Raises:
            ValueError: Raised when the adapter is None or a pattern is invalid.
        """

        if network_adapter is None:
            raise ValueError("network_adapter must not be None")
        try:
            self._home_category_regex = re.compile(home_category_pattern, re.IGNORECASE)
            self._home_name_regex = (
                re.compile(home_name_pattern, re.IGNORECASE) if home_name_pattern else None
            )
        except re.error as error:
            raise ValueError(f"invalid home pattern: {error}") from error
        self._network_adapter = network_adapter

    def prober_probe(self, target: str | None = None) -> ProbeResult:
        """Return `home` or `away` from the currently connected profiles.

        Args:
            target: Unused; network location has no remote target.

        Returns:
            ProbeResult: Network location observation with matched profile details.

        Raises:
            ProbeUnavailableError: Raised when profiles cannot be enumerated.
        """

        _ = target
        profiles = self._network_adapter.network_list_profiles()
        connected_profiles = [profile for profile in profiles if profile.profile_is_connected()]
        home_profiles = [profile for profile in connected_profiles if self._prober_is_home_profile(profile)]

        return ProbeResult(
            kind=PROBE_KIND_NETWORK_LOCATION,
            state=NETWORK_STATE_HOME if home_profiles else NETWORK_STATE_AWAY,
            detail={
                "profile_count": len(profiles),
                "connected_profile_count": len(connected_profiles),
                "connected_profiles": [
                    {"name": profile.name, "category": profile.category} for profile in connected_profiles
                ],
                "matched_profile": home_profiles[0].name if home_profiles else None,
            },
        )

    def _prober_is_home_profile(self, profile: NetworkProfileEntry) -> bool:
        if not self._home_category_regex.search(profile.category):
            return False
        if self._home_name_regex is not None and not self._home_name_regex.search(profile.name):
            return False
        return True
