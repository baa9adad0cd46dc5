"""Configuration module for Licencewatch."""

from licencewatch.config.settings import RecheckConfig, Settings, get_settings

__all__ = ["Settings", "get_settings", "RecheckConfig"]
