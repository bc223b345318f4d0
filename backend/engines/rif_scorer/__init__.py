"""
RIF Scorer Engine

Deterministic risk scoring for Risk Intake Form submissions.
Converts visible answers into a normalized score and risk level.
"""

from .definition import (
    InvalidThresholdsError,
    QuestionContribution,
    RIFScorerError,
    RiskIndicator,
    RiskLevel,
    RiskThresholds,
    ScoreResult,
    SectionScore,
)

from .impl import (
    RIFScorer,
    compute_score,
    round_half_up,
    LEVEL_RECOMMENDATIONS,
    RISK_INDICATOR_HIGH_POINTS,
    RISK_INDICATOR_MIN_POINTS,
    SECTION_ALERT_PERCENTAGE,
    SUBCATEGORY_SEPARATOR,
    THRESHOLD_HIGH,
    THRESHOLD_MEDIUM,
)

__all__ = [
    # Classes
    "RIFScorer",
    # Models
    "QuestionContribution",
    "RiskIndicator",
    "RiskLevel",
    "RiskThresholds",
    "ScoreResult",
    "SectionScore",
    # Exceptions
    "InvalidThresholdsError",
    "RIFScorerError",
    # Functions
    "compute_score",
    "round_half_up",
    # Constants
    "LEVEL_RECOMMENDATIONS",
    "RISK_INDICATOR_HIGH_POINTS",
    "RISK_INDICATOR_MIN_POINTS",
    "SECTION_ALERT_PERCENTAGE",
    "SUBCATEGORY_SEPARATOR",
    "THRESHOLD_HIGH",
    "THRESHOLD_MEDIUM",
]
