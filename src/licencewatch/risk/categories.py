"""Professional category change detection.

Compares the goods and passenger categories on the current record with
those recorded at the previous check, and inspects the current categories
for restrictions, provisional status and expiry.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from licencewatch.core.logging import get_logger
from licencewatch.registry.types import PROFESSIONAL_CATEGORIES, LicenceRecord
from licencewatch.risk.offences import TRAILER_DOWNGRADES
from licencewatch.risk.types import DriverProfile, RiskContribution, RiskRule, as_date

logger = get_logger(__name__)


class CategoryConfig(BaseModel):
    """Scores for professional category rules."""

    professional_driver_score: int = Field(default=5, ge=0, description="Baseline for C/D holders")
    lost_score: int = Field(default=30, ge=0, description="Score for lost categories")
    downgrade_score: int = Field(default=20, ge=0, description="Score for trailer downgrades")
    restricted_score: int = Field(default=15, ge=0, description="Score for restricted categories")
    provisional_score: int = Field(default=25, ge=0, description="Score for provisional categories")
    expired_score: int = Field(default=35, ge=0, description="Score for expired categories")


class ProfessionalCategoryDetector:
    """Detects risk in a driver's goods and passenger entitlements.

    Example:
        ```python
        detector = ProfessionalCategoryDetector()
        contributions = detector.evaluate(record, profile, now)
        ```
    """

    def __init__(self, config: CategoryConfig | None = None):
        """Initialize the detector.

        Args:
            config: Detector configuration.
        """
        self.config = config or CategoryConfig()

    def evaluate(
        self,
        record: LicenceRecord,
        profile: DriverProfile,
        now: date | datetime,
    ) -> list[RiskContribution]:
        """Run every professional category rule.

        Args:
            record: Current licence record.
            profile: Stored driver attributes with previous categories.
            now: Evaluation timestamp.

        Returns:
            Contributions in rule order.
        """
        today = as_date(now)
        contributions: list[RiskContribution] = []

        contributions.extend(self.professional_driver(record))
        contributions.extend(self.lost_categories(record, profile))
        contributions.extend(self.trailer_downgrades(record, profile))
        contributions.extend(self.restricted_categories(record))
        contributions.extend(self.provisional_categories(record))
        contributions.extend(self.expired_categories(record, today))

        if contributions:
            logger.debug(
                "Professional category rules applied",
                rules=[c.rule.value for c in contributions],
            )

        return contributions

    def professional_driver(self, record: LicenceRecord) -> list[RiskContribution]:
        """Baseline contribution for any driver holding C or D categories."""
        codes = _current_professional(record)
        if not codes:
            return []
        return [
            RiskContribution(
                rule=RiskRule.PROFESSIONAL_DRIVER,
                score=self.config.professional_driver_score,
                factor=f"Professional licence categories: {', '.join(codes)}",
                recommendation="Professional driver - ensure medical reviews are up to date",
            )
        ]

    def lost_categories(
        self, record: LicenceRecord, profile: DriverProfile
    ) -> list[RiskContribution]:
        """Previously held professional categories missing from the record."""
        current = set(_current_professional(record))
        lost = [code for code in _previous_professional(profile) if code not in current]
        if not lost:
            return []
        return [
            RiskContribution(
                rule=RiskRule.LOST_CATEGORIES,
                score=self.config.lost_score,
                factor=f"Lost professional licence categories: {', '.join(lost)}",
                recommendation=(
                    "Immediate investigation required - professional driving categories lost"
                ),
            )
        ]

    def trailer_downgrades(
        self, record: LicenceRecord, profile: DriverProfile
    ) -> list[RiskContribution]:
        """Trailer entitlements lost while the base category was kept."""
        current = set(_current_professional(record))
        previous = set(_previous_professional(profile))

        downgrades = [
            f"{trailer} → {base} (lost trailer entitlement)"
            for trailer, base in TRAILER_DOWNGRADES
            if trailer in previous and trailer not in current and base in current
        ]
        if not downgrades:
            return []
        return [
            RiskContribution(
                rule=RiskRule.CATEGORY_DOWNGRADE,
                score=self.config.downgrade_score,
                factor=f"Category downgrades: {', '.join(downgrades)}",
                recommendation=(
                    "Review reason for category downgrade - may affect operational capability"
                ),
            )
        ]

    def restricted_categories(self, record: LicenceRecord) -> list[RiskContribution]:
        """Professional categories carrying restriction codes."""
        restricted = [
            f"{c.code}: {', '.join(c.restriction_codes)}"
            for c in record.professional_categories
            if c.restriction_codes
        ]
        if not restricted:
            return []
        return [
            RiskContribution(
                rule=RiskRule.CATEGORY_RESTRICTIONS,
                score=self.config.restricted_score,
                factor=f"Professional category restrictions: {'; '.join(restricted)}",
                recommendation="Verify compliance with professional licence restrictions",
            )
        ]

    def provisional_categories(self, record: LicenceRecord) -> list[RiskContribution]:
        """Professional categories held only provisionally."""
        provisional = [c.code for c in record.professional_categories if c.provisional]
        if not provisional:
            return []
        return [
            RiskContribution(
                rule=RiskRule.PROVISIONAL_CATEGORIES,
                score=self.config.provisional_score,
                factor=f"Provisional professional categories: {', '.join(provisional)}",
                recommendation=(
                    "Professional categories are provisional - full licence required "
                    "for commercial driving"
                ),
            )
        ]

    def expired_categories(self, record: LicenceRecord, today: date) -> list[RiskContribution]:
        """Professional categories whose own validity has ended."""
        expired = [
            c.code
            for c in record.professional_categories
            if c.valid_to is not None and c.valid_to < today
        ]
        if not expired:
            return []
        return [
            RiskContribution(
                rule=RiskRule.EXPIRED_CATEGORIES,
                score=self.config.expired_score,
                factor=f"Expired professional categories: {', '.join(expired)}",
                recommendation=(
                    "Professional categories expired - immediate renewal required "
                    "before commercial driving"
                ),
            )
        ]


def _current_professional(record: LicenceRecord) -> list[str]:
    return _unique(c.code for c in record.professional_categories)


def _previous_professional(profile: DriverProfile) -> list[str]:
    return _unique(
        code.upper() for code in profile.previous_categories if code.upper() in PROFESSIONAL_CATEGORIES
    )


def _unique(codes) -> list[str]:
    return list(dict.fromkeys(codes))


def create_category_detector(config: CategoryConfig | None = None) -> ProfessionalCategoryDetector:
    """Create a professional category detector.

    Args:
        config: Optional detector configuration.

    Returns:
        Configured ProfessionalCategoryDetector.
    """
    return ProfessionalCategoryDetector(config=config)
