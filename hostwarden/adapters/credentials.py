"""Repair credential model and credential source resolution."""

from __future__ import annotations

import getpass
import json
import re
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError, field_validator

from .errors import CredentialInvalidError

_DOWN_LEVEL_LOGON_PATTERN = re.compile(r"^[^\\/@\s]+\\[^\\/@\s]+$")
_USER_PRINCIPAL_PATTERN = re.compile(r"^[^\\/@\s]+@[^\\/@\s]+\.[^\\/@\s]+$")


class RepairCredential(BaseModel):
    """Domain credential used to reset the machine account password.

    Attributes:
        username: `DOMAIN\\user` or `user@domain.tld` logon name.
        password: Secret password; never rendered in logs.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str
    password: SecretStr

    @field_validator("username")
    @classmethod
    def _validate_username(cls, value: str) -> str:
        normalized_value = value.strip()
        if not (_DOWN_LEVEL_LOGON_PATTERN.match(normalized_value) or _USER_PRINCIPAL_PATTERN.match(normalized_value)):
            raise ValueError("username must be DOMAIN\\user or user@domain")
        return normalized_value

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value


def credential_build(username: str | None, password: str | SecretStr | None) -> RepairCredential:
    """Validate raw credential parts into a repair credential.

    Args:
        username: Logon name.
        password: Plain or secret password.

    Returns:
        RepairCredential: Validated credential.

    Raises:
        CredentialInvalidError: Raised when either part is missing or malformed.
    """

    if not username or password is None:
        raise CredentialInvalidError("repair credential requires both a username and a password")
    try:
        return RepairCredential(username=username, password=password)
    except ValidationError as error:
        reasons = "; ".join(str(detail.get("msg", "")) for detail in error.errors())
        raise CredentialInvalidError(f"repair credential is malformed: {reasons}") from error


def credential_load_file(credential_file: str) -> RepairCredential:
    """Load a credential from a JSON document `{"username": ..., "password": ...}`.

    Args:
        credential_file: Path to the credential document.

    Returns:
        RepairCredential: Validated credential.

    Raises:
        CredentialInvalidError: Raised when the file is unreadable or malformed.
    """

    credential_path = Path(credential_file)
    try:
        payload = json.loads(credential_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise CredentialInvalidError(f"credential file cannot be read: {credential_path}") from error
    except json.JSONDecodeError as error:
        raise CredentialInvalidError(f"credential file is not valid JSON: {credential_path}") from error

    if not isinstance(payload, dict):
        raise CredentialInvalidError("credential file must contain a JSON object")
    return credential_build(username=payload.get("username"), password=payload.get("password"))


def credential_prompt(
    username: str | None = None,
    input_provider: Callable[[str], str] = input,
    password_provider: Callable[[str], str] = getpass.getpass,
) -> RepairCredential:
    """Prompt the operator for a credential on the terminal.

    Args:
        username: Optional pre-filled logon name; prompted for when absent.
        input_provider: Line reader used for the user name.
        password_provider: Echo-free reader used for the password.

    Returns:
        RepairCredential: Validated credential.

    Raises:
        CredentialInvalidError: Raised when input is aborted or malformed.
    """

    try:
        resolved_username = username or input_provider("Domain user (DOMAIN\\user): ")
        password = password_provider(f"Password for {resolved_username}: ")
    except EOFError as error:
        raise CredentialInvalidError("credential prompt aborted") from error
    return credential_build(username=resolved_username, password=password)


def credential_resolve(
    source: str,
    username: str | None = None,
    password: SecretStr | None = None,
    credential_file: str | None = None,
) -> RepairCredential:
    """Resolve a repair credential from the configured source.

    Args:
        source: `inline`, `file` or `interactive`.
        username: Inline or pre-filled logon name.
        password: Inline password from settings.
        credential_file: JSON credential document for the `file` source.

    Returns:
        RepairCredential: Validated credential.

    Raises:
        CredentialInvalidError: Raised when the source yields no valid credential.
    """

    normalized_source = source.strip().lower()
    if normalized_source == "inline":
        return credential_build(username=username, password=password)
    if normalized_source == "file":
        if not credential_file:
            raise CredentialInvalidError("credential source `file` requires a credential file path")
        return credential_load_file(credential_file)
    if normalized_source == "interactive":
        return credential_prompt(username=username)
    raise CredentialInvalidError(f"unsupported credential source={normalized_source}")
