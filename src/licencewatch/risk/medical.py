"""Age and medical review policy.

Drivers aged 45 and over need periodic medical reviews: every five years
until 65, annually from 65. Newly qualified drivers are also flagged when
their penalty points put them within reach of revocation.
"""

from dataclasses import dataclass
from datetime import date, datetime

from pydantic import BaseModel, Field

from licencewatch.core.logging import get_logger
from licencewatch.risk.types import DriverProfile, RiskContribution, RiskRule, as_date

logger = get_logger(__name__)

# Approximate year length used for age calculation.
DAYS_PER_YEAR = 365.25


@dataclass(frozen=True, slots=True)
class MedicalReviewInterval:
    """Medical review requirement for an age band.

    Attributes:
        frequency: Readable review frequency ("annually", "every 5 years").
        max_days: Maximum days allowed between reviews.
        warning_days: Days before the deadline a review counts as due soon.
    """

    frequency: str
    max_days: int
    warning_days: int


class MedicalPolicyConfig(BaseModel):
    """Configuration for age and medical policy rules."""

    periodic_review_age: int = Field(default=45, ge=0, description="Age requiring 5-yearly reviews")
    annual_review_age: int = Field(default=65, ge=0, description="Age requiring annual reviews")
    annual_max_days: int = Field(default=365, ge=1, description="Days between annual reviews")
    annual_warning_days: int = Field(default=30, ge=0, description="Warning window, annual")
    periodic_max_days: int = Field(default=1825, ge=1, description="Days between 5-yearly reviews")
    periodic_warning_days: int = Field(default=90, ge=0, description="Warning window, 5-yearly")

    overdue_score: int = Field(default=25, ge=0, description="Score for an overdue review")
    due_soon_score: int = Field(default=10, ge=0, description="Score for a review due soon")
    unknown_score: int = Field(default=20, ge=0, description="Score when no review is recorded")

    new_driver_days: int = Field(default=730, ge=1, description="Days a driver counts as new")
    new_driver_points: int = Field(default=6, ge=0, description="Points flagged for new drivers")
    new_driver_score: int = Field(default=15, ge=0, description="Score for a new driver at risk")


def calculate_age(date_of_birth: date, today: date) -> int:
    """Age in whole years using a 365.25-day year.

    The approximation can differ from calendar age by one day around a
    birthday; it is kept so scores stay stable across releases.
    """
    return int((today - date_of_birth).days // DAYS_PER_YEAR)


def medical_review_interval(
    age: int, config: MedicalPolicyConfig | None = None
) -> MedicalReviewInterval | None:
    """Medical review requirement for an age, or None when not required."""
    cfg = config or MedicalPolicyConfig()
    if age >= cfg.annual_review_age:
        return MedicalReviewInterval("annually", cfg.annual_max_days, cfg.annual_warning_days)
    if age >= cfg.periodic_review_age:
        return MedicalReviewInterval(
            "every 5 years", cfg.periodic_max_days, cfg.periodic_warning_days
        )
    return None


class MedicalPolicyEvaluator:
    """Applies age-based medical review and new-driver rules.

    Example:
        ```python
        evaluator = MedicalPolicyEvaluator()
        contributions = evaluator.evaluate(profile, penalty_points=7, now=now)
        ```
    """

    def __init__(self, config: MedicalPolicyConfig | None = None):
        """Initialize the evaluator.

        Args:
            config: Policy configuration.
        """
        self.config = config or MedicalPolicyConfig()

    def medical_review_interval(self, age: int) -> MedicalReviewInterval | None:
        """Medical review requirement for an age under this configuration."""
        return medical_review_interval(age, self.config)

    def evaluate(
        self,
        profile: DriverProfile,
        penalty_points: int,
        now: date | datetime,
        licence_issue_date: date | None = None,
    ) -> list[RiskContribution]:
        """Evaluate medical review status and new-driver risk.

        Args:
            profile: Stored driver attributes.
            penalty_points: Current penalty point total.
            now: Evaluation timestamp.
            licence_issue_date: Issue date from the registry, used when the
                profile has none.

        Returns:
            Contributions in rule order.
        """
        today = as_date(now)
        contributions: list[RiskContribution] = []

        if profile.date_of_birth is not None:
            contributions.extend(self._medical_review(profile, today))

        issue_date = profile.licence_issue_date or licence_issue_date
        if issue_date is not None:
            contributions.extend(self._new_driver(issue_date, penalty_points, today))

        return contributions

    def _medical_review(self, profile: DriverProfile, today: date) -> list[RiskContribution]:
        age = calculate_age(profile.date_of_birth, today)  # type: ignore[arg-type]
        interval = self.medical_review_interval(age)
        if interval is None:
            return []

        if profile.last_medical_date is None:
            return [
                RiskContribution(
                    rule=RiskRule.MEDICAL_UNKNOWN,
                    score=self.config.unknown_score,
                    factor=f"No medical review date on record (age {age})",
                    recommendation=(
                        f"Medical review status unknown - driver aged {age} requires "
                        f"{interval.frequency} medicals"
                    ),
                )
            ]

        days_since = (today - profile.last_medical_date).days

        if days_since > interval.max_days:
            days_overdue = days_since - interval.max_days
            return [
                RiskContribution(
                    rule=RiskRule.MEDICAL_OVERDUE,
                    score=self.config.overdue_score,
                    factor=f"Medical review overdue ({days_overdue} days overdue)",
                    recommendation=(
                        f"Medical review required immediately - driver aged {age} needs "
                        f"{interval.frequency} medicals"
                    ),
                )
            ]

        if days_since > interval.max_days - interval.warning_days:
            days_remaining = interval.max_days - days_since
            return [
                RiskContribution(
                    rule=RiskRule.MEDICAL_DUE_SOON,
                    score=self.config.due_soon_score,
                    factor=f"Medical review due soon ({days_remaining} days remaining)",
                    recommendation=(
                        f"Schedule medical review - due {interval.frequency} for age {age}"
                    ),
                )
            ]

        return []

    def _new_driver(
        self, issue_date: date, penalty_points: int, today: date
    ) -> list[RiskContribution]:
        cfg = self.config
        if (today - issue_date).days >= cfg.new_driver_days:
            return []
        if penalty_points < cfg.new_driver_points:
            return []

        logger.debug("New driver near revocation threshold", penalty_points=penalty_points)
        return [
            RiskContribution(
                rule=RiskRule.NEW_DRIVER_POINTS,
                score=cfg.new_driver_score,
                factor=(
                    f"New driver approaching {cfg.new_driver_points}-point threshold "
                    f"({penalty_points} points)"
                ),
                recommendation=(
                    f"New driver at risk - {cfg.new_driver_points} points triggers "
                    "licence revocation"
                ),
            )
        ]


def create_medical_policy_evaluator(
    config: MedicalPolicyConfig | None = None,
) -> MedicalPolicyEvaluator:
    """Create a medical policy evaluator.

    Args:
        config: Optional policy configuration.

    Returns:
        Configured MedicalPolicyEvaluator.
    """
    return MedicalPolicyEvaluator(config=config)
