"""Temporal Pattern Analyzer for endorsement histories.

This module provides the TemporalPatternAnalyzer that:
1. Weights endorsements by how recently they were convicted
2. Detects escalating offence severity across the latest endorsements
3. Detects accelerating violation frequency
4. Groups repeat offences by offence family
5. Finds clusters of convictions close together in time
6. Compares recent against historical offence severity

Only the endorsements present in the current registry snapshot are
analyzed; there is no history beyond what the record carries.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from statistics import fmean

from pydantic import BaseModel, Field

from licencewatch.core.logging import get_logger
from licencewatch.registry.types import Endorsement
from licencewatch.risk.offences import offence_group, offence_group_name, offence_severity
from licencewatch.risk.types import RiskContribution, RiskRule, as_date

logger = get_logger(__name__)


# =============================================================================
# Models
# =============================================================================


@dataclass(frozen=True, slots=True)
class TemporalCluster:
    """A run of convictions falling within one cluster window.

    Attributes:
        size: Number of endorsements in the cluster.
        day_span: Days between the newest and oldest conviction.
        start_date: Oldest conviction date in the cluster.
        end_date: Newest conviction date in the cluster.
    """

    size: int
    day_span: int
    start_date: date
    end_date: date


class TemporalConfig(BaseModel):
    """Configuration for temporal pattern analysis."""

    # Time-weighted recency (30-day months)
    very_recent_days: int = Field(default=180, ge=1, description="Age of a very recent conviction")
    recent_days: int = Field(default=360, ge=1, description="Age of a recent conviction")
    moderate_days: int = Field(default=720, ge=1, description="Age of a moderately old conviction")
    very_recent_weight: int = Field(default=15, ge=0, description="Score per very recent conviction")
    recent_weight: int = Field(default=10, ge=0, description="Score per recent conviction")
    moderate_weight: int = Field(default=5, ge=0, description="Score per moderate conviction")
    recency_alert_score: int = Field(
        default=20, ge=0, description="Weighted score that triggers a monitoring recommendation"
    )

    # Severity escalation
    escalation_window: int = Field(
        default=3, ge=2, description="Most recent endorsements compared for escalation"
    )
    escalation_score: int = Field(default=25, ge=0, description="Score for escalating severity")

    # Frequency acceleration
    acceleration_ratio: float = Field(
        default=1.5, gt=0.0, description="6-month rate over 12-month rate that signals acceleration"
    )
    acceleration_score: int = Field(default=20, ge=0, description="Score for frequency acceleration")

    # Repeat offences
    repeat_threshold: int = Field(default=3, ge=2, description="Offences in one family to repeat")
    repeat_score: int = Field(default=15, ge=0, description="Score per repeated offence family")

    # Temporal clustering
    cluster_window_days: int = Field(default=90, ge=1, description="Maximum cluster span")
    cluster_min_size: int = Field(default=2, ge=2, description="Convictions forming a cluster")
    cluster_score_per_violation: int = Field(
        default=10, ge=0, description="Score per endorsement in a cluster"
    )

    # Behavioral trend
    trend_min_endorsements: int = Field(default=4, ge=2, description="Endorsements for trend")
    trend_ratio: float = Field(
        default=1.3, gt=0.0, description="Recent over historical mean severity that signals decline"
    )
    trend_score: int = Field(default=15, ge=0, description="Score for behavioral deterioration")


# =============================================================================
# Temporal Pattern Analyzer
# =============================================================================


class TemporalPatternAnalyzer:
    """Analyzes an endorsement history for temporal risk patterns.

    Each detector returns zero or more RiskContributions; ``analyze`` runs
    all of them in a fixed order and concatenates the results.

    Example:
        ```python
        analyzer = TemporalPatternAnalyzer()

        contributions = analyzer.analyze(record.endorsements, now)
        for contribution in contributions:
            print(f"+{contribution.score}: {contribution.factor}")
        ```
    """

    def __init__(self, config: TemporalConfig | None = None):
        """Initialize the analyzer.

        Args:
            config: Analyzer configuration.
        """
        self.config = config or TemporalConfig()

    def analyze(
        self,
        endorsements: tuple[Endorsement, ...] | list[Endorsement],
        now: date | datetime,
    ) -> list[RiskContribution]:
        """Run every temporal detector over the endorsements.

        Args:
            endorsements: Endorsements from the licence record.
            now: Evaluation timestamp.

        Returns:
            Contributions in detector order.
        """
        if not endorsements:
            return []

        today = as_date(now)
        newest_first = self._newest_first(endorsements)

        contributions: list[RiskContribution] = []
        contributions.extend(self.time_weighted_recency(newest_first, today))
        contributions.extend(self.severity_escalation(newest_first))
        contributions.extend(self.frequency_acceleration(newest_first, today))
        contributions.extend(self.repeat_offences(endorsements))
        contributions.extend(self.temporal_clusters(newest_first))
        contributions.extend(self.behavioral_trend(newest_first))

        logger.debug(
            "Temporal patterns analyzed",
            endorsements=len(endorsements),
            dated=len(newest_first),
            contributions=len(contributions),
            score=sum(c.score for c in contributions),
        )

        return contributions

    # -------------------------------------------------------------------------
    # Detectors
    # -------------------------------------------------------------------------

    def time_weighted_recency(
        self, endorsements: list[Endorsement], today: date
    ) -> list[RiskContribution]:
        """Weight each conviction by its age.

        Args:
            endorsements: Dated endorsements.
            today: Evaluation date.

        Returns:
            One contribution summarizing the age buckets, or none.
        """
        cfg = self.config
        very_recent = recent = moderate = 0

        for endorsement in endorsements:
            age_days = (today - endorsement.conviction_date).days  # type: ignore[operator]
            if age_days < cfg.very_recent_days:
                very_recent += 1
            elif age_days < cfg.recent_days:
                recent += 1
            elif age_days < cfg.moderate_days:
                moderate += 1

        weighted = (
            very_recent * cfg.very_recent_weight
            + recent * cfg.recent_weight
            + moderate * cfg.moderate_weight
        )

        periods: list[str] = []
        if very_recent:
            periods.append(f"{very_recent} in last 6 months")
        if recent:
            periods.append(f"{recent} in 6-12 months")
        if moderate:
            periods.append(f"{moderate} in 12-24 months")

        if not periods:
            return []

        recommendation = None
        if very_recent >= 2:
            recommendation = "Multiple very recent offences - immediate review required"
        elif very_recent >= 1 and recent + moderate >= 2:
            recommendation = "Escalating pattern detected - enhanced monitoring recommended"
        elif weighted >= cfg.recency_alert_score:
            recommendation = "Recent offending pattern - closer monitoring advised"

        return [
            RiskContribution(
                rule=RiskRule.TIME_WEIGHTED_RECENCY,
                score=weighted,
                factor=f"Time-weighted endorsements: {', '.join(periods)}",
                recommendation=recommendation,
            )
        ]

    def severity_escalation(self, endorsements: list[Endorsement]) -> list[RiskContribution]:
        """Check whether the latest endorsements strictly increase in severity.

        Args:
            endorsements: Dated endorsements, newest first.

        Returns:
            One contribution if severity escalates, else none.
        """
        window = self.config.escalation_window
        if len(endorsements) < window:
            return []

        # Oldest to newest
        latest = list(reversed(endorsements[:window]))
        levels = [offence_severity(e.code) for e in latest]

        if not all(earlier < later for earlier, later in zip(levels, levels[1:])):
            return []

        chain = " → ".join(e.code or "unknown" for e in latest)
        return [
            RiskContribution(
                rule=RiskRule.SEVERITY_ESCALATION,
                score=self.config.escalation_score,
                factor=f"Escalating severity pattern: {chain}",
                recommendation="Escalating offence severity detected - intervention recommended",
            )
        ]

    def frequency_acceleration(
        self, endorsements: list[Endorsement], today: date
    ) -> list[RiskContribution]:
        """Compare the 6-month violation rate against the 12-month rate.

        Args:
            endorsements: Dated endorsements.
            today: Evaluation date.

        Returns:
            One contribution if frequency is accelerating, else none.
        """
        cfg = self.config
        ages = [(today - e.conviction_date).days for e in endorsements]  # type: ignore[operator]

        six_months = sum(1 for age in ages if age < cfg.very_recent_days)
        twelve_months = sum(1 for age in ages if age < cfg.recent_days)
        twenty_four_months = sum(1 for age in ages if age < cfg.moderate_days)

        six_month_rate = six_months / 6
        year_rate = twelve_months / 12
        two_year_rate = twenty_four_months / 24

        logger.debug(
            "Violation rates per month",
            six_month_rate=round(six_month_rate, 3),
            year_rate=round(year_rate, 3),
            two_year_rate=round(two_year_rate, 3),
        )

        if year_rate > 0 and six_month_rate > year_rate * cfg.acceleration_ratio:
            return [
                RiskContribution(
                    rule=RiskRule.FREQUENCY_ACCELERATION,
                    score=cfg.acceleration_score,
                    factor=(
                        f"Frequency acceleration: {six_months} violations in 6 months "
                        f"vs {twelve_months} in full year"
                    ),
                    recommendation=(
                        "Violation frequency increasing - enhanced monitoring required"
                    ),
                )
            ]
        return []

    def repeat_offences(
        self, endorsements: tuple[Endorsement, ...] | list[Endorsement]
    ) -> list[RiskContribution]:
        """Flag every offence family with repeated endorsements.

        Args:
            endorsements: All endorsements, dated or not.

        Returns:
            One contribution per repeated offence family.
        """
        groups: dict[str, int] = defaultdict(int)
        for endorsement in endorsements:
            if endorsement.code:
                groups[offence_group(endorsement.code)] += 1

        contributions: list[RiskContribution] = []
        for group, count in groups.items():
            if count < self.config.repeat_threshold:
                continue
            name = offence_group_name(group)
            contributions.append(
                RiskContribution(
                    rule=RiskRule.REPEAT_OFFENCE,
                    score=self.config.repeat_score,
                    factor=f"Repeat {name} offences ({count} incidents)",
                    recommendation=f"Pattern of {name} violations - targeted intervention needed",
                )
            )
        return contributions

    def temporal_clusters(self, endorsements: list[Endorsement]) -> list[RiskContribution]:
        """Score each cluster of convictions.

        Args:
            endorsements: Dated endorsements, newest first.

        Returns:
            One contribution per cluster.
        """
        return [
            RiskContribution(
                rule=RiskRule.TEMPORAL_CLUSTER,
                score=self.config.cluster_score_per_violation * cluster.size,
                factor=f"{cluster.size} violations within {cluster.day_span} days",
                recommendation="Multiple violations in short period - immediate review required",
            )
            for cluster in self.find_clusters(endorsements)
        ]

    def behavioral_trend(self, endorsements: list[Endorsement]) -> list[RiskContribution]:
        """Compare mean severity of the recent half against the older half.

        Args:
            endorsements: Dated endorsements, newest first.

        Returns:
            One contribution if recent behaviour is markedly worse, else none.
        """
        cfg = self.config
        if len(endorsements) < cfg.trend_min_endorsements:
            return []

        boundary = len(endorsements) // 2
        recent_mean = fmean(offence_severity(e.code) for e in endorsements[:boundary])
        older_mean = fmean(offence_severity(e.code) for e in endorsements[boundary:])

        if recent_mean > older_mean * cfg.trend_ratio:
            return [
                RiskContribution(
                    rule=RiskRule.BEHAVIORAL_TREND,
                    score=cfg.trend_score,
                    factor=(
                        "Behavioral deterioration: recent violations more serious "
                        "than historical pattern"
                    ),
                    recommendation=(
                        "Declining compliance trend - consider additional training or assessment"
                    ),
                )
            ]
        return []

    # -------------------------------------------------------------------------
    # Clustering
    # -------------------------------------------------------------------------

    def find_clusters(
        self, endorsements: tuple[Endorsement, ...] | list[Endorsement]
    ) -> list[TemporalCluster]:
        """Greedily partition convictions into non-overlapping clusters.

        Scanning newest first, each cluster starts at the first unconsumed
        conviction and takes every following conviction within the cluster
        window of that start. Members of a cluster are not reconsidered.

        Args:
            endorsements: Endorsements in any order.

        Returns:
            Clusters with at least ``cluster_min_size`` members, newest first.
        """
        cfg = self.config
        dates = [e.conviction_date for e in self._newest_first(endorsements)]

        clusters: list[TemporalCluster] = []
        i = 0
        while i < len(dates) - 1:
            start = dates[i]
            oldest = start
            size = 1
            for current in dates[i + 1 :]:
                if abs((start - current).days) > cfg.cluster_window_days:  # type: ignore[operator]
                    break
                size += 1
                oldest = min(oldest, current)  # type: ignore[type-var]

            if size >= cfg.cluster_min_size:
                clusters.append(
                    TemporalCluster(
                        size=size,
                        day_span=abs((start - oldest).days),  # type: ignore[operator]
                        start_date=oldest,  # type: ignore[arg-type]
                        end_date=start,  # type: ignore[arg-type]
                    )
                )
                i += size
            else:
                i += 1

        return clusters

    @staticmethod
    def _newest_first(
        endorsements: tuple[Endorsement, ...] | list[Endorsement],
    ) -> list[Endorsement]:
        dated = [e for e in endorsements if e.conviction_date is not None]
        return sorted(dated, key=lambda e: e.conviction_date, reverse=True)  # type: ignore[arg-type, return-value]


def create_temporal_analyzer(config: TemporalConfig | None = None) -> TemporalPatternAnalyzer:
    """Create a temporal pattern analyzer.

    Args:
        config: Optional analyzer configuration.

    Returns:
        Configured TemporalPatternAnalyzer.
    """
    return TemporalPatternAnalyzer(config=config)
