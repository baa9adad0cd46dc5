"""Configuration validation for startup checks.

Validates that required configuration is present and valid before the
check service starts talking to the licensing registry.

Usage:
    from licencewatch.config.validation import validate_configuration

    # During startup
    errors = validate_configuration()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        sys.exit(1)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from licencewatch.config.settings import Settings, get_settings
from licencewatch.utils.exceptions import ConfigurationError

logger = logging.getLogger("licencewatch.config")


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # Must be fixed, service cannot start
    WARNING = "warning"  # Should be fixed, service can start but may have issues


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Validate application configuration.

    Runs all configuration checks and returns a list of validation results.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []

    results.extend(_validate_recheck(settings))
    results.extend(_validate_registry(settings))
    results.extend(_validate_environment(settings))

    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration and raise if errors found.

    Args:
        settings: Settings to validate

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    warnings = [r for r in results if r.severity == ValidationSeverity.WARNING]
    for warning in warnings:
        logger.warning(str(warning))


# =============================================================================
# Validators
# =============================================================================


def _validate_recheck(settings: Settings) -> list[ValidationResult]:
    """Validate the per-tier recheck cadence."""
    results: list[ValidationResult] = []
    recheck = settings.recheck

    for name in ("high_months", "medium_months", "low_months"):
        months = getattr(recheck, name)
        if months < 1:
            results.append(
                ValidationResult(
                    field=f"recheck.{name}",
                    severity=ValidationSeverity.ERROR,
                    message=f"Recheck interval must be at least one month, got {months}",
                    suggestion="Use a positive number of months",
                )
            )

    if not (recheck.high_months <= recheck.medium_months <= recheck.low_months):
        results.append(
            ValidationResult(
                field="recheck",
                severity=ValidationSeverity.ERROR,
                message=(
                    "Recheck intervals must not shrink as risk falls "
                    f"(high={recheck.high_months}, medium={recheck.medium_months}, "
                    f"low={recheck.low_months})"
                ),
                suggestion="Order intervals so high <= medium <= low",
            )
        )

    return results


def _validate_registry(settings: Settings) -> list[ValidationResult]:
    """Validate licensing registry configuration."""
    results: list[ValidationResult] = []

    if not settings.registry_base_url:
        results.append(
            ValidationResult(
                field="registry_base_url",
                severity=ValidationSeverity.ERROR,
                message="Registry URL is not configured",
                suggestion="Set REGISTRY_BASE_URL environment variable",
            )
        )
    elif settings.ENVIRONMENT == "production" and not settings.registry_base_url.startswith(
        "https://"
    ):
        results.append(
            ValidationResult(
                field="registry_base_url",
                severity=ValidationSeverity.ERROR,
                message="Registry URL must use https in production",
                suggestion="Point REGISTRY_BASE_URL at the https endpoint",
            )
        )

    if settings.registry_timeout_ms < 1000:
        results.append(
            ValidationResult(
                field="registry_timeout_ms",
                severity=ValidationSeverity.WARNING,
                message=f"Registry timeout {settings.registry_timeout_ms}ms is very short",
                suggestion="Registry enquiries routinely take several seconds",
            )
        )

    if settings.ENVIRONMENT == "production":
        for name in ("registry_api_key", "registry_username", "registry_password"):
            if getattr(settings, name) is None:
                results.append(
                    ValidationResult(
                        field=name,
                        severity=ValidationSeverity.ERROR,
                        message=f"{name} is required in production",
                        suggestion=f"Set {name.upper()} environment variable",
                    )
                )

    return results


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    """Validate environment-specific settings."""
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and settings.log_level == "DEBUG":
        results.append(
            ValidationResult(
                field="log_level",
                severity=ValidationSeverity.WARNING,
                message="DEBUG log level in production may expose licence holder data",
                suggestion="Use INFO or WARNING for production",
            )
        )

    return results


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Get a summary of current configuration (safe for logging).

    Excludes credentials.

    Args:
        settings: Settings to summarize

    Returns:
        Dictionary with configuration summary
    """
    if settings is None:
        settings = get_settings()

    return {
        "environment": settings.ENVIRONMENT,
        "log_level": settings.log_level,
        "registry_base_url": settings.registry_base_url,
        "registry_timeout_ms": settings.registry_timeout_ms,
        "registry_credentials_configured": (
            settings.registry_api_key is not None
            and settings.registry_username is not None
            and settings.registry_password is not None
        ),
        "recheck_months": {
            "high": settings.recheck.high_months,
            "medium": settings.recheck.medium_months,
            "low": settings.recheck.low_months,
        },
    }
