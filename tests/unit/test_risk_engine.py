"""Unit tests for the RiskScoringEngine."""

from datetime import date

import pytest
from pydantic import ValidationError

from conftest import NOW, days_ago, days_ahead, make_endorsement, make_record
from licencewatch.registry.types import CpcDetails, Disqualification
from licencewatch.risk.scoring import RiskScoringEngine, ScoringConfig, create_scoring_engine
from licencewatch.risk.types import (
    DriverProfile,
    RiskRule,
    RiskTier,
    ScoreBreakdown,
    tier_for_score,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def engine() -> RiskScoringEngine:
    """Create a default scoring engine."""
    return RiskScoringEngine()


COMPARATIVE_RULES = frozenset(
    {RiskRule.SEVERITY_ESCALATION, RiskRule.FREQUENCY_ACCELERATION, RiskRule.BEHAVIORAL_TREND}
)


def absolute_score(breakdown: ScoreBreakdown) -> int:
    """Score from rules that do not compare one slice of history with another."""
    return sum(c.score for c in breakdown.contributions if c.rule not in COMPARATIVE_RULES)


# =============================================================================
# Initialization Tests
# =============================================================================


class TestScoringEngineInit:
    """Tests for RiskScoringEngine initialization."""

    def test_init_default_config(self) -> None:
        """Test initialization with default config."""
        engine = RiskScoringEngine()
        assert engine.config.invalid_licence_score == 50
        assert engine.temporal.config is engine.config.temporal
        assert len(engine.rule_groups) == 9

    def test_factory_with_config(self) -> None:
        """Test factory with custom config."""
        engine = create_scoring_engine(ScoringConfig(restrictions_score=12))
        assert engine.config.restrictions_score == 12

    def test_validation_bounds(self) -> None:
        """Test scores must be non-negative."""
        with pytest.raises(ValidationError):
            ScoringConfig(serious_offence_score=-1)


# =============================================================================
# Tier Tests
# =============================================================================


class TestTiers:
    """Tests for tier classification."""

    @pytest.mark.parametrize(
        ("score", "tier"),
        [
            (0, RiskTier.LOW),
            (14, RiskTier.LOW),
            (15, RiskTier.MEDIUM),
            (39, RiskTier.MEDIUM),
            (40, RiskTier.HIGH),
            (200, RiskTier.HIGH),
        ],
    )
    def test_tier_boundaries(self, score: int, tier: RiskTier) -> None:
        """Test tier thresholds at 15 and 40."""
        assert tier_for_score(score) == tier

    def test_custom_thresholds(self) -> None:
        """Test the engine applies configured thresholds."""
        engine = RiskScoringEngine(ScoringConfig(medium_threshold=5, high_threshold=10))
        breakdown = engine.score(make_record(("C",)), DriverProfile(), NOW)
        assert breakdown.score == 5
        assert breakdown.tier == RiskTier.MEDIUM


# =============================================================================
# Clean Record Tests
# =============================================================================


class TestCleanRecords:
    """Tests for records with nothing on them."""

    def test_clean_record_scores_zero(self, engine: RiskScoringEngine) -> None:
        """Test a clean, valid car licence scores zero."""
        breakdown = engine.score(make_record(), DriverProfile(), NOW)

        assert breakdown.score == 0
        assert breakdown.tier == RiskTier.LOW
        assert breakdown.factors == []
        assert breakdown.recommendations == []

    def test_clean_professional_record_scores_five(self, engine: RiskScoringEngine) -> None:
        """Test a clean professional licence scores only the baseline."""
        breakdown = engine.score(make_record(("B", "C", "CE")), DriverProfile(), NOW)

        assert breakdown.score == 5
        assert breakdown.tier == RiskTier.LOW
        assert breakdown.factors == ["Professional licence categories: C, CE"]


# =============================================================================
# Rule Group Tests
# =============================================================================


class TestRuleGroups:
    """Tests for individual rule groups through the engine."""

    def test_invalid_licence(self, engine: RiskScoringEngine) -> None:
        """Test an expired licence adds 50."""
        breakdown = engine.score(make_record(expiry_date=days_ago(1)), DriverProfile(), NOW)

        assert breakdown.score == 50
        assert breakdown.tier == RiskTier.HIGH
        assert breakdown.factors == ["Invalid or expired licence"]
        assert breakdown.recommendations == ["Immediate investigation required"]

    @pytest.mark.parametrize(
        ("points", "score", "factor"),
        [
            (12, 30, "High penalty points (12)"),
            (9, 30, "High penalty points (9)"),
            (8, 15, "Medium penalty points (8)"),
            (6, 15, "Medium penalty points (6)"),
            (5, 5, "Low penalty points (5)"),
            (3, 5, "Low penalty points (3)"),
        ],
    )
    def test_penalty_point_bands(
        self, engine: RiskScoringEngine, points: int, score: int, factor: str
    ) -> None:
        """Test each penalty point band."""
        breakdown = engine.score(make_record(penalty_points=points), DriverProfile(), NOW)
        assert breakdown.score == score
        assert breakdown.factors == [factor]

    def test_low_points_without_recommendation(self, engine: RiskScoringEngine) -> None:
        """Test the low band adds no recommendation."""
        breakdown = engine.score(make_record(penalty_points=3), DriverProfile(), NOW)
        assert breakdown.recommendations == []

    def test_two_points_score_nothing(self, engine: RiskScoringEngine) -> None:
        """Test fewer than three points is not banded."""
        breakdown = engine.score(make_record(penalty_points=2), DriverProfile(), NOW)
        assert breakdown.score == 0

    def test_points_summed_from_endorsements(self, engine: RiskScoringEngine) -> None:
        """Test endorsement points are used when no total is reported."""
        record = make_record(
            endorsements=(make_endorsement("SP30", 1000, 3), make_endorsement("SP30", 1200, 3))
        )
        assert engine.score(record, DriverProfile(), NOW).by_rule()[RiskRule.PENALTY_POINTS] == 15

    def test_serious_offence(self, engine: RiskScoringEngine) -> None:
        """Test a drink-driving endorsement adds 35."""
        record = make_record(endorsements=(make_endorsement("DR10", 1000, 0),))
        breakdown = engine.score(record, DriverProfile(), NOW)

        assert breakdown.score == 35
        assert breakdown.tier == RiskTier.MEDIUM
        assert breakdown.factors == ["Serious driving offence present"]
        assert breakdown.recommendations == ["Enhanced monitoring required"]

    def test_serious_offence_added_once(self, engine: RiskScoringEngine) -> None:
        """Test several serious offences add the bonus once."""
        record = make_record(
            endorsements=(make_endorsement("DR10", 1000, 0), make_endorsement("DD40", 1500, 0))
        )
        assert engine.score(record, DriverProfile(), NOW).by_rule()[RiskRule.SERIOUS_OFFENCE] == 35

    def test_active_disqualification(self, engine: RiskScoringEngine) -> None:
        """Test an active disqualification adds 40 alongside invalidity."""
        record = make_record(disqualifications=(Disqualification(start_date=days_ago(10)),))
        breakdown = engine.score(record, DriverProfile(), NOW)

        assert breakdown.score == 90
        assert breakdown.factors == ["Invalid or expired licence", "Active disqualification"]
        assert "Cannot drive - immediate action required" in breakdown.recommendations

    def test_cpc_expired(self, engine: RiskScoringEngine) -> None:
        """Test an expired CPC adds 20."""
        record = make_record(cpc=CpcDetails(expiry_date=days_ago(1)))
        breakdown = engine.score(record, DriverProfile(), NOW)
        assert breakdown.score == 20
        assert breakdown.factors == ["CPC expired"]

    @pytest.mark.parametrize(("days", "score"), [(0, 10), (30, 10), (31, 0)])
    def test_cpc_expiring(self, engine: RiskScoringEngine, days: int, score: int) -> None:
        """Test the 30-day CPC warning window."""
        record = make_record(cpc=CpcDetails(expiry_date=days_ahead(days)))
        assert engine.score(record, DriverProfile(), NOW).score == score

    def test_missing_cpc_expiry(self, engine: RiskScoringEngine) -> None:
        """Test CPC details without an expiry date contribute nothing."""
        record = make_record(cpc=CpcDetails(cpc_number="X"))
        assert engine.score(record, DriverProfile(), NOW).score == 0

    def test_medical_policy(self, engine: RiskScoringEngine) -> None:
        """Test an older driver without a recorded medical."""
        profile = DriverProfile(date_of_birth=date(1953, 6, 1))
        breakdown = engine.score(make_record(), profile, NOW)
        assert breakdown.score == 20
        assert breakdown.tier == RiskTier.MEDIUM

    def test_new_driver_from_record_issue_date(self, engine: RiskScoringEngine) -> None:
        """Test the new-driver rule uses the registry issue date."""
        record = make_record(issue_date=days_ago(100), penalty_points=6)
        breakdown = engine.score(record, DriverProfile(), NOW)
        assert breakdown.by_rule() == {
            RiskRule.PENALTY_POINTS: 15,
            RiskRule.NEW_DRIVER_POINTS: 15,
        }

    def test_lost_category(self, engine: RiskScoringEngine) -> None:
        """Test prior C and CE with current C."""
        profile = DriverProfile(previous_categories=("C", "CE"))
        breakdown = engine.score(make_record(("C",)), profile, NOW)

        assert breakdown.by_rule()[RiskRule.LOST_CATEGORIES] == 30
        assert breakdown.factors.count("Lost professional licence categories: CE") == 1

    def test_restrictions(self, engine: RiskScoringEngine) -> None:
        """Test licence restrictions add a flat 10."""
        record = make_record(restrictions=("01", "78", "79"))
        breakdown = engine.score(record, DriverProfile(), NOW)

        assert breakdown.score == 10
        assert breakdown.factors == ["Licence restrictions present (3)"]
        assert breakdown.recommendations == ["Verify compliance with restrictions"]


# =============================================================================
# Aggregation Tests
# =============================================================================


class TestAggregation:
    """Tests for aggregation properties."""

    def test_group_order(self, engine: RiskScoringEngine) -> None:
        """Test factors follow rule-group order."""
        record = make_record(
            ("C",),
            status_code="REVOKED",
            penalty_points=9,
            endorsements=(make_endorsement("DR10", 1000, 0),),
            cpc=CpcDetails(expiry_date=days_ahead(10)),
            restrictions=("01",),
        )
        breakdown = engine.score(record, DriverProfile(), NOW)

        assert breakdown.factors == [
            "Invalid or expired licence",
            "High penalty points (9)",
            "Serious driving offence present",
            "CPC expiring soon",
            "Professional licence categories: C",
            "Licence restrictions present (1)",
        ]
        assert breakdown.score == 50 + 30 + 35 + 10 + 5 + 10
        assert breakdown.tier == RiskTier.HIGH

    def test_score_is_sum_of_contributions(self, engine: RiskScoringEngine) -> None:
        """Test the score equals the sum of every contribution."""
        record = make_record(
            endorsements=tuple(make_endorsement("SP30", d) for d in (20, 40, 300, 500)),
        )
        breakdown = engine.score(record, DriverProfile(), NOW)
        assert breakdown.score == sum(c.score for c in breakdown.contributions)
        assert all(c.score >= 0 for c in breakdown.contributions)

    def test_deterministic(self, engine: RiskScoringEngine) -> None:
        """Test identical inputs give identical breakdowns."""
        record = make_record(
            ("C", "D"),
            endorsements=tuple(make_endorsement("SP30", d) for d in (20, 40, 300)),
        )
        profile = DriverProfile(date_of_birth=date(1960, 3, 3), previous_categories=("CE",))
        assert engine.score(record, profile, NOW) == engine.score(record, profile, NOW)

    @pytest.mark.parametrize(
        ("history_days", "heavy_days"),
        [
            ((), 30),
            ((400,), 30),
            ((20, 40, 300, 500), 10),
            ((20, 40, 300, 500), 2000),
            ((100, 700, 800), 400),
            ((50, 130, 135), 5),
            ((30, 60, 800, 900), 2000),
        ],
    )
    def test_adding_heavy_endorsement_never_lowers_absolute_score(
        self,
        engine: RiskScoringEngine,
        history_days: tuple[int, ...],
        heavy_days: int,
    ) -> None:
        """Test a nine-point endorsement never lowers the non-comparative rules."""
        base = tuple(make_endorsement("SP30", d, 3) for d in history_days)
        heavy = make_endorsement("DR10", heavy_days, 10)

        without = engine.score(make_record(endorsements=base), DriverProfile(), NOW)
        with_heavy = engine.score(
            make_record(endorsements=base + (heavy,)), DriverProfile(), NOW
        )

        assert absolute_score(with_heavy) >= absolute_score(without)

    @pytest.mark.parametrize(
        ("history_days", "heavy_days"),
        [((), 30), ((400,), 30), ((20, 40, 300, 500), 10)],
    )
    def test_adding_heavy_endorsement_never_lowers_score(
        self,
        engine: RiskScoringEngine,
        history_days: tuple[int, ...],
        heavy_days: int,
    ) -> None:
        """Test the full score rises when no comparative bonus is lost."""
        base = tuple(make_endorsement("SP30", d, 3) for d in history_days)
        heavy = make_endorsement("DR10", heavy_days, 10)

        without = engine.score(make_record(endorsements=base), DriverProfile(), NOW)
        with_heavy = engine.score(
            make_record(endorsements=base + (heavy,)), DriverProfile(), NOW
        )

        assert with_heavy.score >= without.score

    def test_old_heavy_endorsement_can_remove_trend_bonus(
        self, engine: RiskScoringEngine
    ) -> None:
        """Test an old serious offence dilutes the trend comparison and drops its bonus."""
        base = (
            make_endorsement("DR10", 30, 10),
            make_endorsement("SP30", 60, 3),
            make_endorsement("SP30", 800, 3),
            make_endorsement("SP30", 900, 3),
        )
        old_heavy = make_endorsement("DD40", 2000, 10)

        without = engine.score(make_record(endorsements=base), DriverProfile(), NOW)
        with_heavy = engine.score(
            make_record(endorsements=base + (old_heavy,)), DriverProfile(), NOW
        )

        expected = without.by_rule()
        assert expected.pop(RiskRule.BEHAVIORAL_TREND) == 15
        assert with_heavy.by_rule() == expected
        assert without.score == 165
        assert with_heavy.score == 150

    def test_undated_endorsements_do_not_fail(self, engine: RiskScoringEngine) -> None:
        """Test endorsements without dates only skip the temporal rules."""
        record = make_record(endorsements=(make_endorsement("DR10", None, 3),))
        breakdown = engine.score(record, DriverProfile(), NOW)
        assert breakdown.by_rule() == {
            RiskRule.PENALTY_POINTS: 5,
            RiskRule.SERIOUS_OFFENCE: 35,
        }
