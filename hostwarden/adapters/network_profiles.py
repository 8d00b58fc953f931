"""PowerShell-backed enumeration of network connection profiles."""

from __future__ import annotations

from typing import Any, Final

from hostwarden.domain import NetworkProfileEntry

from .errors import PowerShellCommandError, ProbeUnavailableError
from .interfaces import NetworkProfilePort
from .powershell import PowerShellRunner


class PowerShellNetworkProfileAdapter(NetworkProfilePort):
    """Network profile adapter built on `Get-NetConnectionProfile`."""

    _LIST_SCRIPT: Final[str] = (
        "$ErrorActionPreference = 'Stop'; "
        "@(Get-NetConnectionProfile | Select-Object "
        "Name, InterfaceAlias, "
        "@{ Name = 'NetworkCategory'; Expression = { $_.NetworkCategory.ToString() } }, "
        "@{ Name = 'IPv4Connectivity'; Expression = { $_.IPv4Connectivity.ToString() } }, "
        "@{ Name = 'IPv6Connectivity'; Expression = { $_.IPv6Connectivity.ToString() } }"
        ") | ConvertTo-Json -Compress"
    )
    _CATEGORY_BY_NUMBER: Final[dict[int, str]] = {
        0: "Public",
        1: "Private",
        2: "DomainAuthenticated",
    }
    _CONNECTIVITY_BY_NUMBER: Final[dict[int, str]] = {
        0: "Disconnected",
        1: "NoTraffic",
        2: "Subnet",
        3: "LocalNetwork",
        4: "Internet",
    }

    def __init__(self, runner: PowerShellRunner):
        """Initialize network profile adapter.

        Args:
            runner: PowerShell runner used for platform calls.

        Raises:
            ValueError: Raised when runner is None.
        """

        if runner is None:
            raise ValueError("runner must not be None")
        self._runner = runner

    def network_list_profiles(self) -> list[NetworkProfileEntry]:
        """Enumerate connection profiles.

        Returns:
            list[NetworkProfileEntry]: Normalized entries; empty when no profile exists.

        Raises:
            ProbeUnavailableError: Raised when enumeration fails or output has an unexpected shape.
        """

        try:
            output = self._runner.powershell_run_json(script=self._LIST_SCRIPT)
        except PowerShellCommandError as error:
            raise ProbeUnavailableError(
                f"network profiles cannot be enumerated: {error}",
                error_code=error.error_code,
            ) from error

        return network_parse_profiles(output)


def network_parse_profiles(output: Any) -> list[NetworkProfileEntry]:
    """Normalize `Get-NetConnectionProfile` JSON into profile entries.

    `ConvertTo-Json` emits a bare object for one profile and may emit numeric
    enum values on older hosts; both shapes are accepted.

    Args:
        output: Decoded JSON output.

    Returns:
        list[NetworkProfileEntry]: Normalized entries.

    Raises:
        ProbeUnavailableError: Raised when output is neither an object nor a list of objects.
    """

    if output is None:
        return []
    rows = [output] if isinstance(output, dict) else output
    if not isinstance(rows, list):
        raise ProbeUnavailableError(f"unexpected network profile output: {output!r}")

    entries: list[NetworkProfileEntry] = []
    for row in rows:
        if not isinstance(row, dict):
            raise ProbeUnavailableError(f"unexpected network profile row: {row!r}")
        entries.append(
            NetworkProfileEntry(
                name=str(row.get("Name") or ""),
                category=_network_normalize_label(
                    row.get("NetworkCategory"),
                    PowerShellNetworkProfileAdapter._CATEGORY_BY_NUMBER,
                    default="Public",
                ),
                ipv4_connectivity=_network_normalize_label(
                    row.get("IPv4Connectivity"),
                    PowerShellNetworkProfileAdapter._CONNECTIVITY_BY_NUMBER,
                    default="Disconnected",
                ),
                ipv6_connectivity=_network_normalize_label(
                    row.get("IPv6Connectivity"),
                    PowerShellNetworkProfileAdapter._CONNECTIVITY_BY_NUMBER,
                    default="Disconnected",
                ),
                interface_alias=str(row.get("InterfaceAlias") or ""),
            )
        )
    return entries


def _network_normalize_label(value: Any, labels_by_number: dict[int, str], default: str) -> str:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return labels_by_number.get(value, default)
    text_value = str(value).strip()
    if text_value.isdigit():
        return labels_by_number.get(int(text_value), default)
    return text_value
