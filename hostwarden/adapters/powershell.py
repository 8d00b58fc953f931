"""PowerShell process runner returning parsed JSON output."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from typing import Any, Final

from .errors import PowerShellCommandError

logger = logging.getLogger(__name__)


class PowerShellRunner:
    """Run one PowerShell script per call and decode its JSON output."""

    _BASE_ARGUMENTS: Final[tuple[str, ...]] = (
        "-NoProfile",
        "-NonInteractive",
        "-ExecutionPolicy",
        "Bypass",
        "-Command",
    )

    def __init__(self, executable: str = "powershell", timeout_seconds: float = 120.0):
        """Initialize PowerShell runner.

        Args:
            executable: PowerShell binary name or path (`powershell` or `pwsh`).
            timeout_seconds: Per-invocation timeout.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_executable = executable.strip()
        if not normalized_executable:
            raise ValueError("executable must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._executable = normalized_executable
        self._timeout_seconds = timeout_seconds

    def powershell_run_json(self, script: str, environment: dict[str, str] | None = None) -> Any:
        """Run a script whose output is produced by `ConvertTo-Json`.

        Args:
            script: PowerShell script text.
            environment: Extra environment variables for the child process.

        Returns:
            Any: Decoded JSON value; None when the script printed nothing.

        Raises:
            PowerShellCommandError: Raised when the process fails or output is not JSON.
        """

        output_text = self.powershell_run(script=script, environment=environment)
        if not output_text:
            return None
        try:
            return json.loads(output_text)
        except json.JSONDecodeError as error:
            raise PowerShellCommandError(f"PowerShell output is not valid JSON: {output_text[:200]}") from error

    def powershell_run(self, script: str, environment: dict[str, str] | None = None) -> str:
        """Run a script and return its stripped standard output.

        Args:
            script: PowerShell script text.
            environment: Extra environment variables for the child process.

        Returns:
            str: Captured standard output.

        Raises:
            ValueError: Raised when the script is blank.
            PowerShellCommandError: Raised when the process cannot start, times out or exits non-zero.
        """

        if not script.strip():
            raise ValueError("script must not be blank")

        child_environment = None
        if environment:
            child_environment = {**os.environ, **environment}

        command = [self._executable, *self._BASE_ARGUMENTS, script]
        logger.debug("running PowerShell script: %s", script.strip().splitlines()[0][:120])
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                env=child_environment,
                check=False,
            )
        except FileNotFoundError as error:
            raise PowerShellCommandError(f"PowerShell executable not found: {self._executable}") from error
        except subprocess.TimeoutExpired as error:
            raise PowerShellCommandError(
                f"PowerShell timed out after {self._timeout_seconds:g} seconds"
            ) from error

        standard_output = (completed.stdout or "").strip()
        standard_error = (completed.stderr or "").strip()
        if completed.returncode != 0:
            raise PowerShellCommandError(
                f"PowerShell exited with code {completed.returncode}: {standard_error or standard_output}",
                exit_code=completed.returncode,
                stderr=standard_error or standard_output,
            )
        return standard_output
