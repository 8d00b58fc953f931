"""Typed interfaces for persistent configuration stores.

All registry and SQL access must remain in the db package and its submodules.
"""

from typing import Protocol, Union

ConfigurationValue = Union[int, str]


class ConfigurationStoreError(RuntimeError):
    """Raised when a configuration store read or write cannot be completed."""


class ConfigurationStorePort(Protocol):
    """Port definition for a hierarchical key-value configuration store."""

    def store_label(self) -> str:
        """Return a stable label for the active store target.

        Returns:
            str: Store target label for diagnostics.

        Raises:
            RuntimeError: Raised when store metadata is unavailable.
        """

    def store_read_value(self, key_path: str, value_name: str) -> ConfigurationValue | None:
        """Read one named value if it exists.

        Args:
            key_path: Hierarchical key path, e.g. `HKLM\\SOFTWARE\\Vendor`.
            value_name: Value name under the key.

        Returns:
            ConfigurationValue | None: Stored value, or None when key or value is absent.

        Raises:
            ConfigurationStoreError: Raised when the store cannot be read.
        """

    def store_write_value(self, key_path: str, value_name: str, value: ConfigurationValue) -> None:
        """Create or overwrite one named value, creating the key when needed.

        Args:
            key_path: Hierarchical key path.
            value_name: Value name under the key.
            value: Integer (DWORD) or string value.

        Returns:
            None: Store is updated as side effect.

        Raises:
            ConfigurationStoreError: Raised when the store cannot be written.
        """
