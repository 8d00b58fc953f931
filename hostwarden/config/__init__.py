"""Configuration package for runtime settings and startup validation."""

from .settings import (
	CREDENTIAL_SOURCES,
	AppSettings,
	RunOptions,
	SettingsLoadError,
	config_build_run_options,
	config_load_settings,
)

__all__ = [
	"CREDENTIAL_SOURCES",
	"AppSettings",
	"RunOptions",
	"SettingsLoadError",
	"config_build_run_options",
	"config_load_settings",
]
