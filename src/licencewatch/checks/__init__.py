"""Licence check orchestration and persistence protocol."""

from licencewatch.checks.service import (
    LicenceCheckService,
    build_driver_update,
    count_recent_checks,
    drivers_due_for_check,
    risk_tier_counts,
)
from licencewatch.checks.types import (
    CheckRepository,
    DriverNotEligibleError,
    DriverRecord,
    DriverUpdate,
    DueCheckCandidate,
    LicenceCheckOutcome,
)

__all__ = [
    # Service
    "LicenceCheckService",
    "build_driver_update",
    "drivers_due_for_check",
    "risk_tier_counts",
    "count_recent_checks",
    # Types
    "DriverRecord",
    "DriverUpdate",
    "LicenceCheckOutcome",
    "DueCheckCandidate",
    "CheckRepository",
    "DriverNotEligibleError",
]
