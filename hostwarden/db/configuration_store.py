"""SQL-backed configuration store for hosts without a Windows registry."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from .interfaces import ConfigurationStoreError, ConfigurationStorePort, ConfigurationValue
from .registry import registry_split_path

_VALUE_KIND_DWORD = "dword"
_VALUE_KIND_STRING = "string"


def db_configuration_store_ensure_schema(engine: Engine) -> None:
    """Create the configuration value table when it does not exist.

    Args:
        engine: SQLAlchemy engine bound to the store database.

    Returns:
        None: Schema is created as side effect.

    Raises:
        ConfigurationStoreError: Raised when DDL execution fails.
    """

    try:
        with engine.begin() as connection:
            connection.execute(
                text(
                    "CREATE TABLE IF NOT EXISTS configuration_value ("
                    "key_path VARCHAR(512) NOT NULL, "
                    "value_name VARCHAR(255) NOT NULL, "
                    "value_kind VARCHAR(16) NOT NULL, "
                    "value_text TEXT NOT NULL, "
                    "updated_at_utc VARCHAR(64) NOT NULL, "
                    "PRIMARY KEY (key_path, value_name)"
                    ")"
                )
            )
    except SQLAlchemyError as error:
        raise ConfigurationStoreError("configuration store schema creation failed") from error


class SQLAlchemyConfigurationStore(ConfigurationStorePort):
    """Configuration store keeping registry-shaped values in one SQL table.

    Key paths and value names are matched case-insensitively, as the registry does.
    """

    def __init__(self, engine: Engine):
        """Initialize SQL configuration store.

        Args:
            engine: SQLAlchemy engine used for all store operations.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def store_label(self) -> str:
        """Return the target database URL for diagnostics.

        Returns:
            str: Rendered engine URL string without password.

        Raises:
            RuntimeError: Raised if URL rendering fails.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def store_read_value(self, key_path: str, value_name: str) -> ConfigurationValue | None:
        """Read one stored value if it exists.

        Args:
            key_path: Registry-shaped key path.
            value_name: Value name under the key.

        Returns:
            ConfigurationValue | None: Stored value or None.

        Raises:
            ValueError: Raised when key path or value name is invalid.
            ConfigurationStoreError: Raised when the query fails.
        """

        normalized_key_path, normalized_value_name = self._store_normalize_identity(key_path, value_name)
        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT value_kind, value_text FROM configuration_value "
                        "WHERE key_path = :key_path AND value_name = :value_name"
                    ),
                    {"key_path": normalized_key_path, "value_name": normalized_value_name},
                ).first()
        except SQLAlchemyError as error:
            raise ConfigurationStoreError(f"configuration read failed for {key_path}\\{value_name}") from error

        if row is None:
            return None
        value_kind, value_text = row[0], row[1]
        if value_kind == _VALUE_KIND_DWORD:
            return int(value_text)
        return str(value_text)

    def store_write_value(self, key_path: str, value_name: str, value: ConfigurationValue) -> None:
        """Insert or overwrite one stored value.

        Args:
            key_path: Registry-shaped key path.
            value_name: Value name under the key.
            value: Integer or string value.

        Returns:
            None: Store is updated as side effect.

        Raises:
            ValueError: Raised when identity or value type is invalid.
            ConfigurationStoreError: Raised when the upsert fails.
        """

        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"unsupported configuration value type: {type(value).__name__}")

        normalized_key_path, normalized_value_name = self._store_normalize_identity(key_path, value_name)
        value_kind = _VALUE_KIND_DWORD if isinstance(value, int) else _VALUE_KIND_STRING
        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO configuration_value "
                        "(key_path, value_name, value_kind, value_text, updated_at_utc) "
                        "VALUES (:key_path, :value_name, :value_kind, :value_text, :updated_at_utc) "
                        "ON CONFLICT (key_path, value_name) DO UPDATE SET "
                        "value_kind = excluded.value_kind, "
                        "value_text = excluded.value_text, "
                        "updated_at_utc = excluded.updated_at_utc"
                    ),
                    {
                        "key_path": normalized_key_path,
                        "value_name": normalized_value_name,
                        "value_kind": value_kind,
                        "value_text": str(value),
                        "updated_at_utc": datetime.now(timezone.utc).isoformat(),
                    },
                )
        except SQLAlchemyError as error:
            raise ConfigurationStoreError(f"configuration write failed for {key_path}\\{value_name}") from error

    def _store_normalize_identity(self, key_path: str, value_name: str) -> tuple[str, str]:
        hive_name, subkey = registry_split_path(key_path)
        normalized_value_name = value_name.strip()
        if not normalized_value_name:
            raise ValueError("value_name must not be blank")
        return f"{hive_name}\\{subkey}".lower(), normalized_value_name.lower()
