"""Unit tests for network profile enumeration and normalization."""

from __future__ import annotations

from typing import Any

import pytest

from hostwarden.adapters import (
    PowerShellCommandError,
    PowerShellNetworkProfileAdapter,
    ProbeUnavailableError,
    network_parse_profiles,
)


class _RunnerStub:
    """PowerShell runner stub returning one fixed output."""

    def __init__(self, output: Any):
        self._output = output

    def powershell_run_json(self, script: str, environment: dict[str, str] | None = None) -> Any:
        """Return fixed output or raise it when it is an exception."""

        _ = (script, environment)
        if isinstance(self._output, Exception):
            raise self._output
        return self._output


def test_adapters_network_parse_single_object_and_list() -> None:
    """Verify a bare object and a list of objects both parse.

    Returns:
        None: Assertions validate parsed entries.

    Raises:
        AssertionError: Raised when parsing differs.
    """

    single_row = {
        "Name": "corp.example",
        "InterfaceAlias": "Ethernet",
        "NetworkCategory": "DomainAuthenticated",
        "IPv4Connectivity": "Internet",
        "IPv6Connectivity": "NoTraffic",
    }

    assert network_parse_profiles(single_row)[0].category == "DomainAuthenticated"
    assert network_parse_profiles(single_row)[0].interface_alias == "Ethernet"
    assert len(network_parse_profiles([single_row, {**single_row, "Name": "guest"}])) == 2
    assert network_parse_profiles(None) == []
    assert network_parse_profiles([]) == []


def test_adapters_network_parse_normalizes_numeric_enums() -> None:
    """Verify numeric category and connectivity values map to their labels."""

    entries = network_parse_profiles(
        [
            {"Name": "cafe", "NetworkCategory": 0, "IPv4Connectivity": 4, "IPv6Connectivity": 0},
            {"Name": "home", "NetworkCategory": "1", "IPv4Connectivity": "3"},
            {"Name": "corp", "NetworkCategory": 2},
        ]
    )

    assert [entry.category for entry in entries] == ["Public", "Private", "DomainAuthenticated"]
    assert entries[0].ipv4_connectivity == "Internet"
    assert entries[1].ipv4_connectivity == "LocalNetwork"
    assert entries[1].ipv6_connectivity == "Disconnected"
    assert not entries[2].profile_is_connected()


@pytest.mark.parametrize("output", ["Ethernet", 3, ["Ethernet"]])
def test_adapters_network_parse_rejects_unexpected_shapes(output: Any) -> None:
    """Verify unexpected output shapes raise `ProbeUnavailableError`."""

    with pytest.raises(ProbeUnavailableError):
        network_parse_profiles(output)


def test_adapters_network_list_profiles_translates_command_failure() -> None:
    """Verify enumeration failure raises `ProbeUnavailableError`."""

    adapter = PowerShellNetworkProfileAdapter(
        runner=_RunnerStub(PowerShellCommandError("Get-NetConnectionProfile failed", exit_code=1))
    )

    with pytest.raises(ProbeUnavailableError):
        adapter.network_list_profiles()


def test_adapters_network_list_profiles_parses_runner_output() -> None:
    """Verify the adapter parses runner output into entries."""

    adapter = PowerShellNetworkProfileAdapter(
        runner=_RunnerStub({"Name": "home-wifi", "NetworkCategory": "Private", "IPv4Connectivity": "Internet"})
    )

    entries = adapter.network_list_profiles()

    assert [entry.name for entry in entries] == ["home-wifi"]
    assert entries[0].profile_is_connected()
