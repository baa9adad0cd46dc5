"""Recheck scheduling by risk tier."""

from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from licencewatch.config.settings import RecheckConfig
from licencewatch.risk.types import RiskTier, as_date


def recheck_months(tier: RiskTier, config: RecheckConfig | None = None) -> int:
    """Months between checks for a tier."""
    config = config or RecheckConfig()
    if tier == RiskTier.HIGH:
        return config.high_months
    elif tier == RiskTier.MEDIUM:
        return config.medium_months
    else:
        return config.low_months


def next_check_date(
    tier: RiskTier,
    now: date | datetime,
    config: RecheckConfig | None = None,
) -> date:
    """Date the next licence check is due.

    Uses calendar-month arithmetic; a day past the end of the target month
    is clamped to its last day (31 January + 1 month is 29 February 2024).

    Args:
        tier: Risk tier from the latest assessment.
        now: Evaluation timestamp.
        config: Recheck intervals.

    Returns:
        Due date of the next check.
    """
    return as_date(now) + relativedelta(months=recheck_months(tier, config))
