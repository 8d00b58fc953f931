"""Unit tests for the PowerShell process runner."""

from __future__ import annotations

import subprocess

import pytest

import hostwarden.adapters.powershell as powershell_module
from hostwarden.adapters import PowerShellCommandError, PowerShellRunner


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["powershell"], returncode=returncode, stdout=stdout, stderr=stderr)


def test_adapters_powershell_run_json_builds_noninteractive_command(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify the runner invokes PowerShell non-interactively and decodes JSON output.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate command and decoded output.

    Raises:
        AssertionError: Raised when invocation differs.
    """

    captured: dict[str, object] = {}

    def _fake_run(command, **kwargs):
        captured["command"] = command
        captured.update(kwargs)
        return _completed(stdout='{"Name":"corp"}\r\n')

    monkeypatch.setattr(powershell_module.subprocess, "run", _fake_run)
    runner = PowerShellRunner(executable="pwsh", timeout_seconds=30)

    output = runner.powershell_run_json("Get-Thing | ConvertTo-Json -Compress", environment={"HOSTWARDEN_X": "1"})

    assert output == {"Name": "corp"}
    assert captured["command"][:5] == ["pwsh", "-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass"]
    assert captured["command"][-1] == "Get-Thing | ConvertTo-Json -Compress"
    assert captured["timeout"] == 30
    assert captured["env"]["HOSTWARDEN_X"] == "1"
    assert captured["check"] is False


def test_adapters_powershell_run_json_empty_output_is_none(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify empty output decodes to None."""

    monkeypatch.setattr(powershell_module.subprocess, "run", lambda command, **kwargs: _completed(stdout="  "))

    assert PowerShellRunner().powershell_run_json("Get-Nothing") is None


def test_adapters_powershell_nonzero_exit_raises_with_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify a non-zero exit raises `PowerShellCommandError` carrying stderr and exit code."""

    monkeypatch.setattr(
        powershell_module.subprocess,
        "run",
        lambda command, **kwargs: _completed(returncode=1, stderr="Access is denied."),
    )

    with pytest.raises(PowerShellCommandError) as error_info:
        PowerShellRunner().powershell_run("Do-Thing")

    assert error_info.value.exit_code == 1
    assert error_info.value.stderr == "Access is denied."
    assert error_info.value.error_code == "1"


def test_adapters_powershell_missing_executable_and_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify missing binaries and timeouts raise `PowerShellCommandError`.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate translated errors.

    Raises:
        AssertionError: Raised when errors are not translated.
    """

    def _raise_missing(command, **kwargs):
        raise FileNotFoundError(command[0])

    def _raise_timeout(command, **kwargs):
        raise subprocess.TimeoutExpired(cmd=command, timeout=kwargs["timeout"])

    monkeypatch.setattr(powershell_module.subprocess, "run", _raise_missing)
    with pytest.raises(PowerShellCommandError, match="not found"):
        PowerShellRunner().powershell_run("Get-Thing")

    monkeypatch.setattr(powershell_module.subprocess, "run", _raise_timeout)
    with pytest.raises(PowerShellCommandError, match="timed out") as error_info:
        PowerShellRunner(timeout_seconds=5).powershell_run("Get-Thing")
    assert error_info.value.exit_code is None


def test_adapters_powershell_invalid_json_and_blank_script(monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify non-JSON output and blank scripts are rejected."""

    monkeypatch.setattr(powershell_module.subprocess, "run", lambda command, **kwargs: _completed(stdout="True-ish"))

    with pytest.raises(PowerShellCommandError, match="not valid JSON"):
        PowerShellRunner().powershell_run_json("Get-Thing")
    with pytest.raises(ValueError):
        PowerShellRunner().powershell_run("   ")
    with pytest.raises(ValueError):
        PowerShellRunner(executable=" ")
