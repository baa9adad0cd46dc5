"""Custom exceptions for Licencewatch."""


class LicenceWatchError(Exception):
    """Base exception for all Licencewatch errors."""

    pass


class ConfigurationError(LicenceWatchError):
    """Error in configuration or settings."""

    pass
