"""Utility modules for Licencewatch."""

from licencewatch.utils.exceptions import (
    ConfigurationError,
    LicenceWatchError,
)

__all__ = [
    "LicenceWatchError",
    "ConfigurationError",
]
