"""Database layer package for registry and SQL configuration store boundaries."""

from .configuration_store import SQLAlchemyConfigurationStore, db_configuration_store_ensure_schema
from .interfaces import ConfigurationStoreError, ConfigurationStorePort, ConfigurationValue
from .registry import WindowsRegistryStore, registry_split_path
from .session import db_create_engine

__all__ = [
	"ConfigurationStoreError",
	"ConfigurationStorePort",
	"ConfigurationValue",
	"SQLAlchemyConfigurationStore",
	"WindowsRegistryStore",
	"db_configuration_store_ensure_schema",
	"db_create_engine",
	"registry_split_path",
]
