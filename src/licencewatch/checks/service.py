"""Licence check orchestration.

Fetches a driver's record from the licensing registry, evaluates it, and
persists both the check outcome and the driver projection. Registry
failures are recorded as failed high-risk checks and re-raised.
"""

import time
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

from licencewatch.checks.types import (
    CheckRepository,
    DriverNotEligibleError,
    DriverRecord,
    DriverUpdate,
    DueCheckCandidate,
    LicenceCheckOutcome,
)
from licencewatch.config.settings import Settings, get_settings
from licencewatch.core.logging import LogContext, get_logger, log_external_call
from licencewatch.registry.normalizer import normalize_licence_number, normalize_licence_response
from licencewatch.registry.protocol import RegistryClient
from licencewatch.registry.types import LicenceEnquiry, LicenceRecord, RegistryError
from licencewatch.risk.assembler import evaluate
from licencewatch.risk.schedule import next_check_date
from licencewatch.risk.scoring import RiskScoringEngine
from licencewatch.risk.types import RiskAssessment, RiskTier, as_date

logger = get_logger(__name__)


class LicenceCheckService:
    """Runs licence checks against the registry.

    Example:
        ```python
        service = LicenceCheckService(registry=client, repository=repo)

        outcome = await service.perform_check(driver, checked_by="user-1")
        print(f"Valid: {outcome.valid}, tier: {outcome.risk_tier.value}")
        ```
    """

    def __init__(
        self,
        registry: RegistryClient,
        repository: CheckRepository,
        engine: RiskScoringEngine | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the service.

        Args:
            registry: Licensing registry client.
            repository: Persistence for outcomes and driver projections.
            engine: Scoring engine; defaults to the default configuration.
            settings: Application settings; defaults to the cached settings.
        """
        self.registry = registry
        self.repository = repository
        self.engine = engine or RiskScoringEngine()
        self.settings = settings or get_settings()

    async def perform_check(
        self,
        driver: DriverRecord,
        *,
        checked_by: str,
        include_cpc: bool = False,
        include_tacho: bool = False,
        now: datetime | None = None,
    ) -> LicenceCheckOutcome:
        """Check a driver's licence and persist the result.

        Args:
            driver: Driver to check.
            checked_by: User or process requesting the check.
            include_cpc: Request Driver CPC details.
            include_tacho: Request tachograph card details.
            now: Check timestamp; defaults to the current UTC time.

        Returns:
            Outcome of the successful check.

        Raises:
            DriverNotEligibleError: If the driver has no licence number.
            RegistryError: If the registry call or response fails.
        """
        if not driver.licence_number:
            raise DriverNotEligibleError(f"Driver {driver.driver_id} has no licence number")

        now = now or datetime.now(UTC)
        enquiry = LicenceEnquiry(
            driving_licence_number=normalize_licence_number(driver.licence_number),
            include_cpc=include_cpc,
            include_tacho=include_tacho,
        )

        with LogContext(driver_id=driver.driver_id, checked_by=checked_by):
            logger.info("Licence check started", include_cpc=include_cpc, include_tacho=include_tacho)
            try:
                raw = await self._fetch(enquiry)
                record = normalize_licence_response(raw)
            except RegistryError as e:
                await self._record_failure(driver, checked_by, now, e)
                raise

            assessment = evaluate(
                record,
                driver.profile,
                now,
                engine=self.engine,
                recheck=self.settings.recheck,
            )

            outcome = LicenceCheckOutcome(
                driver_id=driver.driver_id,
                checked_by=checked_by,
                check_date=now,
                valid=assessment.valid,
                risk_tier=assessment.tier,
                next_check_due=assessment.next_check_due,
                assessment=assessment,
                status_code=record.status_code,
                raw_response=dict(raw),
            )

            await self.repository.save_check(outcome)
            await self.repository.update_driver(
                driver.driver_id, build_driver_update(record, assessment)
            )

            logger.info(
                "Licence check completed",
                valid=outcome.valid,
                tier=outcome.risk_tier.value,
                score=assessment.score,
                next_check_due=outcome.next_check_due.isoformat(),
            )

        return outcome

    async def _fetch(self, enquiry: LicenceEnquiry) -> Mapping[str, Any]:
        start = time.perf_counter()
        success = False
        try:
            raw = await self.registry.fetch_licence(enquiry)
            success = True
            return raw
        finally:
            log_external_call(
                logger,
                service="licensing_registry",
                operation="fetch_licence",
                duration_ms=(time.perf_counter() - start) * 1000,
                success=success,
            )

    async def _record_failure(
        self,
        driver: DriverRecord,
        checked_by: str,
        now: datetime,
        error: RegistryError,
    ) -> None:
        logger.warning(
            "Licence check failed",
            error_type=type(error).__name__,
            error=error.message,
        )
        failed = LicenceCheckOutcome(
            driver_id=driver.driver_id,
            checked_by=checked_by,
            check_date=now,
            valid=False,
            risk_tier=RiskTier.HIGH,
            next_check_due=next_check_date(RiskTier.HIGH, now, self.settings.recheck),
            error_message=error.message,
        )
        await self.repository.save_check(failed)


# =============================================================================
# Projections and queries
# =============================================================================


def build_driver_update(record: LicenceRecord, assessment: RiskAssessment) -> DriverUpdate:
    """Project a completed check onto the stored driver.

    Args:
        record: Normalized licence record.
        assessment: Assessment produced for the record.

    Returns:
        DriverUpdate for the driver store.
    """
    return DriverUpdate(
        last_licence_check=assessment.assessed_at,
        licence_status="valid" if assessment.valid else "invalid",
        risk_tier=assessment.tier,
        penalty_points=record.total_penalty_points,
        licence_categories=tuple(record.category_codes),
        cpc_expiry_date=record.cpc.expiry_date if record.cpc else None,
    )


def drivers_due_for_check(
    candidates: Iterable[DueCheckCandidate], now: date | datetime
) -> list[DueCheckCandidate]:
    """Active, consenting drivers whose next check is due.

    A driver with no recorded next-check date is always due.
    """
    today = as_date(now)
    return [
        c
        for c in candidates
        if c.active
        and c.consent_provided
        and (c.next_check_due is None or c.next_check_due <= today)
    ]


def risk_tier_counts(tiers: Iterable[RiskTier | str]) -> dict[str, int]:
    """Count drivers per risk tier."""
    counts = {tier.value: 0 for tier in RiskTier}
    for tier in tiers:
        counts[RiskTier(tier).value] += 1
    return counts


def count_recent_checks(
    check_dates: Iterable[datetime], now: datetime, days: int
) -> int:
    """Count checks run within the last ``days`` days of ``now``."""
    cutoff = now - timedelta(days=days)
    return sum(1 for d in check_dates if d >= cutoff)
