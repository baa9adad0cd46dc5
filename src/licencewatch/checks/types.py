"""Type definitions for licence check orchestration."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from licencewatch.risk.types import DriverProfile, RiskAssessment, RiskTier
from licencewatch.utils.exceptions import LicenceWatchError


class DriverNotEligibleError(LicenceWatchError):
    """Raised when a driver cannot be checked (e.g. no licence number)."""


@dataclass(frozen=True, slots=True)
class DriverRecord:
    """A driver as held by the driver store.

    Attributes:
        driver_id: Driver identifier.
        licence_number: Driving licence number, if known.
        profile: Stored attributes used by the risk rules.
    """

    driver_id: str
    licence_number: str | None
    profile: DriverProfile = field(default_factory=DriverProfile)


@dataclass(frozen=True, slots=True)
class DriverUpdate:
    """Projection of a completed check written back to the driver store."""

    last_licence_check: datetime
    licence_status: str
    risk_tier: RiskTier
    penalty_points: int
    licence_categories: tuple[str, ...] = ()
    cpc_expiry_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "last_licence_check": self.last_licence_check.isoformat(),
            "licence_status": self.licence_status,
            "risk_level": self.risk_tier.value,
            "penalty_points": self.penalty_points,
            "licence_categories": list(self.licence_categories),
            "cpc_expiry_date": self.cpc_expiry_date.isoformat() if self.cpc_expiry_date else None,
        }


@dataclass(frozen=True, slots=True)
class LicenceCheckOutcome:
    """Result of one licence check attempt, successful or failed.

    Attributes:
        driver_id: Driver that was checked.
        checked_by: User or process that requested the check.
        check_date: When the check ran.
        valid: Whether the licence was found valid.
        risk_tier: Risk tier; HIGH for failed checks.
        next_check_due: Date the next check is due.
        assessment: Full assessment, absent for failed checks.
        status_code: Registry status code, if a record was returned.
        raw_response: Registry payload as received.
        error_message: Failure message for failed checks.
    """

    driver_id: str
    checked_by: str
    check_date: datetime
    valid: bool
    risk_tier: RiskTier
    next_check_due: date
    assessment: RiskAssessment | None = None
    status_code: str | None = None
    raw_response: dict[str, Any] | None = None
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the registry call failed."""
        return self.error_message is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "driver_id": self.driver_id,
            "checked_by": self.checked_by,
            "check_date": self.check_date.isoformat(),
            "valid": self.valid,
            "risk_level": self.risk_tier.value,
            "next_check_due": self.next_check_due.isoformat(),
            "status_code": self.status_code,
            "assessment": self.assessment.to_dict() if self.assessment else None,
            "error_message": self.error_message,
        }


@dataclass(frozen=True, slots=True)
class DueCheckCandidate:
    """A driver considered for scheduled checking."""

    driver_id: str
    active: bool = True
    consent_provided: bool = False
    next_check_due: date | None = None


@runtime_checkable
class CheckRepository(Protocol):
    """Persistence for check outcomes and driver projections."""

    async def save_check(self, outcome: LicenceCheckOutcome) -> None:
        """Persist a check outcome as an audit record."""
        ...

    async def update_driver(self, driver_id: str, update: DriverUpdate) -> None:
        """Apply a check projection to the stored driver."""
        ...
