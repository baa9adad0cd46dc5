"""Risk scoring engine for licence records.

The engine runs an ordered pipeline of rule groups. Every group is a pure
evaluator returning zero or more RiskContributions; all groups run on
every evaluation so each applicable factor and recommendation is recorded.

Group order:
1. Licence validity
2. Penalty points
3. Temporal endorsement patterns
4. Serious offences
5. Active disqualification
6. Driver CPC
7. Age and medical policy
8. Professional categories
9. Licence restrictions
"""

from collections.abc import Callable
from datetime import date, datetime

from pydantic import BaseModel, Field

from licencewatch.core.logging import get_logger
from licencewatch.registry.types import LicenceRecord
from licencewatch.risk.categories import CategoryConfig, ProfessionalCategoryDetector
from licencewatch.risk.medical import MedicalPolicyConfig, MedicalPolicyEvaluator
from licencewatch.risk.offences import is_serious_offence
from licencewatch.risk.temporal import TemporalConfig, TemporalPatternAnalyzer
from licencewatch.risk.types import (
    HIGH_RISK_THRESHOLD,
    MEDIUM_RISK_THRESHOLD,
    DriverProfile,
    RiskContribution,
    RiskRule,
    ScoreBreakdown,
    as_date,
    tier_for_score,
)
from licencewatch.risk.validity import has_active_disqualification, is_valid

logger = get_logger(__name__)

RuleGroup = Callable[[LicenceRecord, DriverProfile, date], list[RiskContribution]]


class ScoringConfig(BaseModel):
    """Configuration for the risk scoring engine."""

    # Validity
    invalid_licence_score: int = Field(default=50, ge=0, description="Score for invalid licence")

    # Penalty point bands
    high_points: int = Field(default=9, ge=0, description="Points for the high band")
    medium_points: int = Field(default=6, ge=0, description="Points for the medium band")
    low_points: int = Field(default=3, ge=0, description="Points for the low band")
    high_points_score: int = Field(default=30, ge=0, description="Score for the high band")
    medium_points_score: int = Field(default=15, ge=0, description="Score for the medium band")
    low_points_score: int = Field(default=5, ge=0, description="Score for the low band")

    # Offences and disqualifications
    serious_offence_score: int = Field(default=35, ge=0, description="Score for a serious offence")
    disqualification_score: int = Field(
        default=40, ge=0, description="Score for an active disqualification"
    )

    # CPC
    cpc_expired_score: int = Field(default=20, ge=0, description="Score for an expired CPC")
    cpc_expiring_score: int = Field(default=10, ge=0, description="Score for a CPC expiring soon")
    cpc_warning_days: int = Field(default=30, ge=0, description="Days before CPC expiry to warn")

    # Restrictions
    restrictions_score: int = Field(default=10, ge=0, description="Score for licence restrictions")

    # Tier thresholds
    medium_threshold: int = Field(
        default=MEDIUM_RISK_THRESHOLD, ge=0, description="Score threshold for MEDIUM"
    )
    high_threshold: int = Field(
        default=HIGH_RISK_THRESHOLD, ge=0, description="Score threshold for HIGH"
    )

    # Sub-evaluators
    temporal: TemporalConfig = Field(default_factory=TemporalConfig)
    medical: MedicalPolicyConfig = Field(default_factory=MedicalPolicyConfig)
    categories: CategoryConfig = Field(default_factory=CategoryConfig)


class RiskScoringEngine:
    """Scores a licence record against the driver's stored profile.

    The engine holds configuration only; it keeps no state between calls,
    so the same inputs and ``now`` always produce the same breakdown.

    Example:
        ```python
        engine = RiskScoringEngine()

        breakdown = engine.score(record, profile, now)
        print(f"Score: {breakdown.score}")
        print(f"Tier: {breakdown.tier.value}")
        for factor in breakdown.factors:
            print(f"  - {factor}")
        ```
    """

    def __init__(self, config: ScoringConfig | None = None):
        """Initialize the scoring engine.

        Args:
            config: Engine configuration.
        """
        self.config = config or ScoringConfig()
        self.temporal = TemporalPatternAnalyzer(self.config.temporal)
        self.medical = MedicalPolicyEvaluator(self.config.medical)
        self.categories = ProfessionalCategoryDetector(self.config.categories)

    @property
    def rule_groups(self) -> list[RuleGroup]:
        """Rule groups in evaluation order."""
        return [
            self.validity_rule,
            self.penalty_points_rule,
            self.temporal_rule,
            self.serious_offence_rule,
            self.disqualification_rule,
            self.cpc_rule,
            self.medical_rule,
            self.category_rule,
            self.restrictions_rule,
        ]

    def score(
        self,
        record: LicenceRecord,
        profile: DriverProfile,
        now: date | datetime,
    ) -> ScoreBreakdown:
        """Run every rule group and aggregate the result.

        Args:
            record: Normalized licence record.
            profile: Stored driver attributes.
            now: Evaluation timestamp.

        Returns:
            ScoreBreakdown with contributions in group order and the tier.
        """
        today = as_date(now)

        contributions: list[RiskContribution] = []
        for group in self.rule_groups:
            results = group(record, profile, today)
            if results:
                logger.debug(
                    "Rule group applied",
                    group=group.__name__,
                    score=sum(c.score for c in results),
                )
            contributions.extend(results)

        total = sum(c.score for c in contributions)
        tier = tier_for_score(total, self.config.medium_threshold, self.config.high_threshold)
        breakdown = ScoreBreakdown(contributions=tuple(contributions), tier=tier)

        logger.info(
            "Licence risk scored",
            score=total,
            tier=tier.value,
            rules=len(contributions),
            endorsements=len(record.endorsements),
        )

        return breakdown

    # -------------------------------------------------------------------------
    # Rule groups
    # -------------------------------------------------------------------------

    def validity_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Invalid or expired licence."""
        if is_valid(record, today):
            return []
        return [
            RiskContribution(
                rule=RiskRule.INVALID_LICENCE,
                score=self.config.invalid_licence_score,
                factor="Invalid or expired licence",
                recommendation="Immediate investigation required",
            )
        ]

    def penalty_points_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Banded penalty point total."""
        cfg = self.config
        points = record.total_penalty_points

        if points >= cfg.high_points:
            return [
                RiskContribution(
                    rule=RiskRule.PENALTY_POINTS,
                    score=cfg.high_points_score,
                    factor=f"High penalty points ({points})",
                    recommendation="Consider additional training",
                )
            ]
        elif points >= cfg.medium_points:
            return [
                RiskContribution(
                    rule=RiskRule.PENALTY_POINTS,
                    score=cfg.medium_points_score,
                    factor=f"Medium penalty points ({points})",
                    recommendation="Monitor closely",
                )
            ]
        elif points >= cfg.low_points:
            return [
                RiskContribution(
                    rule=RiskRule.PENALTY_POINTS,
                    score=cfg.low_points_score,
                    factor=f"Low penalty points ({points})",
                )
            ]
        return []

    def temporal_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Temporal endorsement patterns."""
        return self.temporal.analyze(record.endorsements, today)

    def serious_offence_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Any endorsement for a most-serious offence."""
        if not any(is_serious_offence(e.code) for e in record.endorsements):
            return []
        return [
            RiskContribution(
                rule=RiskRule.SERIOUS_OFFENCE,
                score=self.config.serious_offence_score,
                factor="Serious driving offence present",
                recommendation="Enhanced monitoring required",
            )
        ]

    def disqualification_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Disqualification still in force."""
        if not has_active_disqualification(record, today):
            return []
        return [
            RiskContribution(
                rule=RiskRule.ACTIVE_DISQUALIFICATION,
                score=self.config.disqualification_score,
                factor="Active disqualification",
                recommendation="Cannot drive - immediate action required",
            )
        ]

    def cpc_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Expired or soon-expiring Driver CPC."""
        if record.cpc is None or record.cpc.expiry_date is None:
            return []

        days_to_expiry = (record.cpc.expiry_date - today).days
        if days_to_expiry < 0:
            return [
                RiskContribution(
                    rule=RiskRule.CPC_EXPIRED,
                    score=self.config.cpc_expired_score,
                    factor="CPC expired",
                    recommendation="CPC renewal required immediately",
                )
            ]
        elif days_to_expiry <= self.config.cpc_warning_days:
            return [
                RiskContribution(
                    rule=RiskRule.CPC_EXPIRING,
                    score=self.config.cpc_expiring_score,
                    factor="CPC expiring soon",
                    recommendation="Schedule CPC renewal",
                )
            ]
        return []

    def medical_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Age-based medical reviews and new-driver points."""
        return self.medical.evaluate(
            profile,
            penalty_points=record.total_penalty_points,
            now=today,
            licence_issue_date=record.issue_date,
        )

    def category_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Professional category holdings and changes."""
        return self.categories.evaluate(record, profile, today)

    def restrictions_rule(
        self, record: LicenceRecord, profile: DriverProfile, today: date
    ) -> list[RiskContribution]:
        """Licence-level restrictions."""
        if not record.restrictions:
            return []
        return [
            RiskContribution(
                rule=RiskRule.LICENCE_RESTRICTIONS,
                score=self.config.restrictions_score,
                factor=f"Licence restrictions present ({len(record.restrictions)})",
                recommendation="Verify compliance with restrictions",
            )
        ]


def create_scoring_engine(config: ScoringConfig | None = None) -> RiskScoringEngine:
    """Create a risk scoring engine.

    Args:
        config: Optional engine configuration.

    Returns:
        Configured RiskScoringEngine.
    """
    return RiskScoringEngine(config=config)
