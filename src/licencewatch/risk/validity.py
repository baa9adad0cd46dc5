"""Licence validity evaluation.

A licence is invalid when any of the following hold:
- its expiry date has passed, or the registry sent an unreadable expiry date
- its status code is one of the invalidating statuses
- it carries an active disqualification (open-ended or ending in the future)
"""

from datetime import date, datetime

from licencewatch.core.logging import get_logger
from licencewatch.registry.types import Disqualification, LicenceRecord
from licencewatch.risk.offences import INVALID_STATUS_CODES
from licencewatch.risk.types import as_date

logger = get_logger(__name__)


def active_disqualifications(
    record: LicenceRecord, now: date | datetime
) -> list[Disqualification]:
    """Disqualifications still in force at ``now``."""
    today = as_date(now)
    return [d for d in record.disqualifications if d.is_active(today)]


def has_active_disqualification(record: LicenceRecord, now: date | datetime) -> bool:
    """Check if any disqualification is still in force at ``now``."""
    return bool(active_disqualifications(record, now))


def invalidity_reasons(record: LicenceRecord, now: date | datetime) -> list[str]:
    """List every reason the licence is invalid at ``now``.

    Args:
        record: Normalized licence record.
        now: Evaluation timestamp.

    Returns:
        Reasons in rule order; empty when the licence is valid.
    """
    today = as_date(now)
    reasons: list[str] = []

    if record.expiry_unreadable:
        logger.warning(
            "Licence expiry date unreadable, treating licence as invalid",
            field="licenceDetails.expiryDate",
            value=record.unparsed_expiry_date,
        )
        reasons.append("expiry date unreadable")
    elif record.expiry_date is not None and record.expiry_date < today:
        reasons.append(f"expired {record.expiry_date.isoformat()}")

    if record.status_code in INVALID_STATUS_CODES:
        reasons.append(f"status {record.status_code}")

    if has_active_disqualification(record, today):
        reasons.append("active disqualification")

    return reasons


def is_valid(record: LicenceRecord, now: date | datetime) -> bool:
    """Determine whether a licence is valid at ``now``.

    Args:
        record: Normalized licence record.
        now: Evaluation timestamp.

    Returns:
        True if no invalidating condition applies.
    """
    reasons = invalidity_reasons(record, now)
    if reasons:
        logger.debug("Licence invalid", reasons=reasons)
    return not reasons
