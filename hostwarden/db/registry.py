"""Windows registry implementation of the configuration store port."""

from __future__ import annotations

import logging
from typing import Final

from hostwarden.domain import REGISTRY_DWORD_MAX

from .interfaces import ConfigurationStoreError, ConfigurationStorePort, ConfigurationValue

logger = logging.getLogger(__name__)

REGISTRY_HIVE_ALIASES: Final[dict[str, str]] = {
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKEY_CLASSES_ROOT": "HKEY_CLASSES_ROOT",
    "HKU": "HKEY_USERS",
    "HKEY_USERS": "HKEY_USERS",
    "HKCC": "HKEY_CURRENT_CONFIG",
    "HKEY_CURRENT_CONFIG": "HKEY_CURRENT_CONFIG",
}


def registry_split_path(key_path: str) -> tuple[str, str]:
    """Split a registry path into its canonical hive name and subkey.

    Accepts short (`HKLM`) and long (`HKEY_LOCAL_MACHINE`) hive names, an
    optional PowerShell drive suffix (`HKLM:`) and forward slashes.

    Args:
        key_path: Registry path such as `HKLM\\SOFTWARE\\Vendor\\Product`.

    Returns:
        tuple[str, str]: Canonical hive name and backslash-joined subkey.

    Raises:
        ValueError: Raised when the path is blank, has no subkey or names an unknown hive.
    """

    parts = [part for part in key_path.strip().replace("/", "\\").split("\\") if part]
    if not parts:
        raise ValueError("key_path must not be blank")

    hive_token = parts[0].rstrip(":").upper()
    hive_name = REGISTRY_HIVE_ALIASES.get(hive_token)
    if hive_name is None:
        raise ValueError(f"unknown registry hive in key_path={key_path}")
    if len(parts) < 2:
        raise ValueError(f"key_path must name a subkey below the hive: {key_path}")
    return hive_name, "\\".join(parts[1:])


class WindowsRegistryStore(ConfigurationStorePort):
    """Configuration store backed by the Windows registry through `winreg`.

    Integers are written as `REG_DWORD` and strings as `REG_SZ`.
    """

    def store_label(self) -> str:
        """Return stable store label."""

        return "windows_registry"

    def store_read_value(self, key_path: str, value_name: str) -> ConfigurationValue | None:
        """Read one registry value if both key and value exist.

        Args:
            key_path: Registry key path.
            value_name: Registry value name.

        Returns:
            ConfigurationValue | None: DWORD as int, string types as str; None when absent.

        Raises:
            ConfigurationStoreError: Raised for access failures other than absence.
        """

        import winreg

        hive_name, subkey = registry_split_path(key_path)
        try:
            with winreg.OpenKey(getattr(winreg, hive_name), subkey, 0, winreg.KEY_READ) as key:
                value, value_type = winreg.QueryValueEx(key, value_name)
        except FileNotFoundError:
            return None
        except OSError as error:
            raise ConfigurationStoreError(f"registry read failed for {key_path}\\{value_name}") from error

        if value_type in (winreg.REG_DWORD, winreg.REG_QWORD):
            return int(value)
        if value_type in (winreg.REG_SZ, winreg.REG_EXPAND_SZ):
            return str(value)
        raise ConfigurationStoreError(
            f"registry value {key_path}\\{value_name} has unsupported type {value_type}"
        )

    def store_write_value(self, key_path: str, value_name: str, value: ConfigurationValue) -> None:
        """Create the key when needed and set one registry value.

        Args:
            key_path: Registry key path.
            value_name: Registry value name.
            value: Integer or string value.

        Returns:
            None: Registry is updated as side effect.

        Raises:
            ValueError: Raised when the value type is unsupported.
            ConfigurationStoreError: Raised when the registry write fails.
        """

        import winreg

        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"unsupported registry value type: {type(value).__name__}")
        if isinstance(value, int) and not 0 <= value <= REGISTRY_DWORD_MAX:
            raise ValueError(f"registry DWORD value out of range: {value}")
        value_type = winreg.REG_DWORD if isinstance(value, int) else winreg.REG_SZ

        hive_name, subkey = registry_split_path(key_path)
        try:
            with winreg.CreateKeyEx(getattr(winreg, hive_name), subkey, 0, winreg.KEY_WRITE) as key:
                winreg.SetValueEx(key, value_name, 0, value_type, value)
        except OSError as error:
            raise ConfigurationStoreError(f"registry write failed for {key_path}\\{value_name}") from error
        logger.info("registry value %s\\%s set to %r", key_path, value_name, value)
