"""Licence risk engine.

Evaluates a normalized licence record against a driver's stored profile
and produces a scored, tiered and scheduled RiskAssessment.
"""

from licencewatch.risk.assembler import evaluate
from licencewatch.risk.categories import (
    CategoryConfig,
    ProfessionalCategoryDetector,
    create_category_detector,
)
from licencewatch.risk.medical import (
    MedicalPolicyConfig,
    MedicalPolicyEvaluator,
    MedicalReviewInterval,
    calculate_age,
    create_medical_policy_evaluator,
    medical_review_interval,
)
from licencewatch.risk.offences import (
    INVALID_STATUS_CODES,
    OFFENCE_GROUP_NAMES,
    OFFENCE_SEVERITY,
    SERIOUS_OFFENCE_CODES,
    TRAILER_DOWNGRADES,
    OffenceSeverity,
    is_serious_offence,
    offence_group,
    offence_group_name,
    offence_severity,
)
from licencewatch.risk.schedule import next_check_date, recheck_months
from licencewatch.risk.scoring import RiskScoringEngine, ScoringConfig, create_scoring_engine
from licencewatch.risk.temporal import (
    TemporalCluster,
    TemporalConfig,
    TemporalPatternAnalyzer,
    create_temporal_analyzer,
)
from licencewatch.risk.types import (
    HIGH_RISK_THRESHOLD,
    MEDIUM_RISK_THRESHOLD,
    DriverProfile,
    RiskAssessment,
    RiskContribution,
    RiskRule,
    RiskTier,
    ScoreBreakdown,
    tier_for_score,
)
from licencewatch.risk.validity import (
    active_disqualifications,
    has_active_disqualification,
    invalidity_reasons,
    is_valid,
)

__all__ = [
    # Entry points
    "evaluate",
    "is_valid",
    "next_check_date",
    # Types
    "DriverProfile",
    "RiskAssessment",
    "RiskContribution",
    "RiskRule",
    "RiskTier",
    "ScoreBreakdown",
    "tier_for_score",
    "MEDIUM_RISK_THRESHOLD",
    "HIGH_RISK_THRESHOLD",
    # Validity
    "invalidity_reasons",
    "active_disqualifications",
    "has_active_disqualification",
    # Scoring
    "RiskScoringEngine",
    "ScoringConfig",
    "create_scoring_engine",
    # Temporal patterns
    "TemporalPatternAnalyzer",
    "TemporalConfig",
    "TemporalCluster",
    "create_temporal_analyzer",
    # Medical policy
    "MedicalPolicyEvaluator",
    "MedicalPolicyConfig",
    "MedicalReviewInterval",
    "calculate_age",
    "medical_review_interval",
    "create_medical_policy_evaluator",
    # Professional categories
    "ProfessionalCategoryDetector",
    "CategoryConfig",
    "create_category_detector",
    # Offences
    "OffenceSeverity",
    "OFFENCE_SEVERITY",
    "SERIOUS_OFFENCE_CODES",
    "OFFENCE_GROUP_NAMES",
    "INVALID_STATUS_CODES",
    "TRAILER_DOWNGRADES",
    "offence_severity",
    "is_serious_offence",
    "offence_group",
    "offence_group_name",
    # Scheduling
    "recheck_months",
]
