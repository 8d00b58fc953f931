"""Adapter layer package for platform capability boundaries."""

from .credentials import (
	RepairCredential,
	credential_build,
	credential_load_file,
	credential_prompt,
	credential_resolve,
)
from .errors import (
	ApplyFailedError,
	CredentialInvalidError,
	HostwardenError,
	HostwardenRetryableError,
	PowerShellCommandError,
	ProbeNotSettledError,
	ProbeUnavailableError,
	RetryExhaustedError,
)
from .interfaces import NetworkProfilePort, TrustVerifierPort
from .network_profiles import PowerShellNetworkProfileAdapter, network_parse_profiles
from .powershell import PowerShellRunner
from .secure_channel import PowerShellTrustVerifier

__all__ = [
	"ApplyFailedError",
	"CredentialInvalidError",
	"HostwardenError",
	"HostwardenRetryableError",
	"NetworkProfilePort",
	"PowerShellCommandError",
	"PowerShellNetworkProfileAdapter",
	"PowerShellRunner",
	"PowerShellTrustVerifier",
	"ProbeNotSettledError",
	"ProbeUnavailableError",
	"RepairCredential",
	"RetryExhaustedError",
	"TrustVerifierPort",
	"credential_build",
	"credential_load_file",
	"credential_prompt",
	"credential_resolve",
	"network_parse_profiles",
]
