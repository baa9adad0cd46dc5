"""Shared types for the licence risk engine.

Rule evaluators return :class:`RiskContribution` values; the scoring
engine collects them, in evaluation order, into a :class:`ScoreBreakdown`;
the assembler wraps that into the immutable :class:`RiskAssessment` that
callers persist.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

# Tier thresholds on the aggregate score.
MEDIUM_RISK_THRESHOLD = 15
HIGH_RISK_THRESHOLD = 40


class RiskTier(str, Enum):
    """Risk tier classification."""

    LOW = "low"  # 0-14
    MEDIUM = "medium"  # 15-39
    HIGH = "high"  # 40+


class RiskRule(str, Enum):
    """Rules that can contribute to a risk score."""

    # Validity
    INVALID_LICENCE = "invalid_licence"

    # Penalty points
    PENALTY_POINTS = "penalty_points"

    # Temporal patterns
    TIME_WEIGHTED_RECENCY = "time_weighted_recency"
    SEVERITY_ESCALATION = "severity_escalation"
    FREQUENCY_ACCELERATION = "frequency_acceleration"
    REPEAT_OFFENCE = "repeat_offence"
    TEMPORAL_CLUSTER = "temporal_cluster"
    BEHAVIORAL_TREND = "behavioral_trend"

    # Offences and disqualifications
    SERIOUS_OFFENCE = "serious_offence"
    ACTIVE_DISQUALIFICATION = "active_disqualification"

    # CPC
    CPC_EXPIRED = "cpc_expired"
    CPC_EXPIRING = "cpc_expiring"

    # Age and medical policy
    MEDICAL_OVERDUE = "medical_overdue"
    MEDICAL_DUE_SOON = "medical_due_soon"
    MEDICAL_UNKNOWN = "medical_unknown"
    NEW_DRIVER_POINTS = "new_driver_points"

    # Professional categories
    PROFESSIONAL_DRIVER = "professional_driver"
    LOST_CATEGORIES = "lost_categories"
    CATEGORY_DOWNGRADE = "category_downgrade"
    CATEGORY_RESTRICTIONS = "category_restrictions"
    PROVISIONAL_CATEGORIES = "provisional_categories"
    EXPIRED_CATEGORIES = "expired_categories"

    # Licence restrictions
    LICENCE_RESTRICTIONS = "licence_restrictions"


def tier_for_score(
    score: int,
    medium_threshold: int = MEDIUM_RISK_THRESHOLD,
    high_threshold: int = HIGH_RISK_THRESHOLD,
) -> RiskTier:
    """Classify an aggregate score into a risk tier.

    Args:
        score: Aggregate risk score.
        medium_threshold: Lowest score classified MEDIUM.
        high_threshold: Lowest score classified HIGH.

    Returns:
        RiskTier for the score.
    """
    if score >= high_threshold:
        return RiskTier.HIGH
    elif score >= medium_threshold:
        return RiskTier.MEDIUM
    else:
        return RiskTier.LOW


def as_date(moment: date | datetime) -> date:
    """Reduce a timestamp to its calendar date."""
    return moment.date() if isinstance(moment, datetime) else moment


@dataclass(frozen=True, slots=True)
class DriverProfile:
    """Stored attributes of a driver used alongside the registry record.

    Attributes:
        date_of_birth: Driver's date of birth.
        last_medical_date: Date of the most recent medical review.
        licence_issue_date: Date the driver's full licence was issued.
        previous_categories: Category codes recorded at the previous check.
        penalty_points: Penalty points recorded at the previous check.
    """

    date_of_birth: date | None = None
    last_medical_date: date | None = None
    licence_issue_date: date | None = None
    previous_categories: tuple[str, ...] = ()
    penalty_points: int = 0


@dataclass(frozen=True, slots=True)
class RiskContribution:
    """Score delta and explanation produced by one rule.

    Attributes:
        rule: Identifier of the rule that fired.
        score: Non-negative score added by the rule.
        factor: Human-readable contributing factor.
        recommendation: Recommended action, if the rule carries one.
    """

    rule: RiskRule
    score: int
    factor: str | None = None
    recommendation: str | None = None


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """Ordered contributions from every rule group."""

    contributions: tuple[RiskContribution, ...] = ()
    tier: RiskTier = RiskTier.LOW

    @property
    def score(self) -> int:
        """Aggregate score."""
        return sum(c.score for c in self.contributions)

    @property
    def factors(self) -> list[str]:
        """Contributing factors in evaluation order."""
        return [c.factor for c in self.contributions if c.factor]

    @property
    def recommendations(self) -> list[str]:
        """Recommended actions in evaluation order."""
        return [c.recommendation for c in self.contributions if c.recommendation]

    def by_rule(self) -> dict[RiskRule, int]:
        """Total score contributed per rule."""
        totals: dict[RiskRule, int] = {}
        for contribution in self.contributions:
            totals[contribution.rule] = totals.get(contribution.rule, 0) + contribution.score
        return totals


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    """Complete, immutable result of one licence evaluation.

    Attributes:
        tier: Risk tier.
        score: Aggregate risk score.
        factors: Contributing factors in rule order.
        recommendations: Recommended actions in rule order.
        next_check_due: Date the next licence check is due.
        valid: Whether the licence is currently valid.
        assessed_at: Timestamp the evaluation was run for.
        contributions: Per-rule audit trail.
    """

    tier: RiskTier
    score: int
    factors: tuple[str, ...]
    recommendations: tuple[str, ...]
    next_check_due: date
    valid: bool
    assessed_at: datetime
    contributions: tuple[RiskContribution, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "risk_level": self.tier.value,
            "risk_score": self.score,
            "risk_factors": list(self.factors),
            "recommendations": list(self.recommendations),
            "next_check_due": self.next_check_due.isoformat(),
            "valid": self.valid,
            "assessed_at": self.assessed_at.isoformat(),
            "contributions": [
                {
                    "rule": c.rule.value,
                    "score": c.score,
                    "factor": c.factor,
                    "recommendation": c.recommendation,
                }
                for c in self.contributions
            ],
        }
