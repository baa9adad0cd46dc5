"""Assembles validity, scoring and scheduling into a RiskAssessment.

This is the single entry point callers use to evaluate a licence. It
performs no I/O; persisting the result is the caller's concern.
"""

from datetime import UTC, date, datetime, time

from licencewatch.config.settings import RecheckConfig
from licencewatch.core.logging import get_logger
from licencewatch.registry.types import LicenceRecord
from licencewatch.risk.schedule import next_check_date
from licencewatch.risk.scoring import RiskScoringEngine
from licencewatch.risk.types import DriverProfile, RiskAssessment, as_date
from licencewatch.risk.validity import is_valid

logger = get_logger(__name__)

_default_engine: RiskScoringEngine | None = None


def _get_default_engine() -> RiskScoringEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = RiskScoringEngine()
    return _default_engine


def _as_timestamp(moment: date | datetime) -> datetime:
    if isinstance(moment, datetime):
        return moment
    return datetime.combine(moment, time.min, tzinfo=UTC)


def evaluate(
    record: LicenceRecord,
    profile: DriverProfile,
    now: date | datetime,
    engine: RiskScoringEngine | None = None,
    recheck: RecheckConfig | None = None,
) -> RiskAssessment:
    """Evaluate a licence record and produce a complete assessment.

    Args:
        record: Normalized licence record.
        profile: Stored driver attributes.
        now: Evaluation timestamp; every date rule is relative to it.
        engine: Scoring engine, defaults to one with default configuration.
        recheck: Recheck intervals per tier.

    Returns:
        Immutable RiskAssessment.
    """
    engine = engine or _get_default_engine()
    today = as_date(now)

    breakdown = engine.score(record, profile, today)
    valid = is_valid(record, today)
    due = next_check_date(breakdown.tier, today, recheck)

    assessment = RiskAssessment(
        tier=breakdown.tier,
        score=breakdown.score,
        factors=tuple(breakdown.factors),
        recommendations=tuple(breakdown.recommendations),
        next_check_due=due,
        valid=valid,
        assessed_at=_as_timestamp(now),
        contributions=breakdown.contributions,
    )

    logger.debug(
        "Licence assessed",
        tier=assessment.tier.value,
        score=assessment.score,
        valid=valid,
        next_check_due=due.isoformat(),
    )

    return assessment
