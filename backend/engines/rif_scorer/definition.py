"""
RIF Scorer - Data Definitions

Pydantic models for risk scoring of RIF submissions.
Implements weighted per-question contributions and a three-tier level.

Author: TRACS Risk Team
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RiskLevel(str, Enum):
    """
    Discrete risk levels.

    - LOW: normalized score below the medium threshold
    - MEDIUM: between the thresholds (inclusive)
    - HIGH: above the high threshold
    """
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RiskThresholds(BaseModel):
    """Normalized-score thresholds, overridable per deployment."""

    model_config = ConfigDict(frozen=True)

    medium: float = Field(
        default=40.0,
        ge=0,
        le=100,
        description="Lowest normalized score rated MEDIUM."
    )

    high: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Highest normalized score still rated MEDIUM."
    )

    @model_validator(mode="after")
    def validate_order(self) -> "RiskThresholds":
        if self.medium > self.high:
            raise ValueError(
                f"medium threshold ({self.medium}) exceeds high threshold ({self.high})"
            )
        return self


class QuestionContribution(BaseModel):
    """Risk contribution of one active, answered question."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_key: str
    section_id: str
    risk_score: int = Field(ge=0, description="Risk score after the maxPoints ceiling.")
    weightage: float = Field(gt=0)
    contribution: float = Field(ge=0, description="risk_score * weightage.")
    max_contribution: float = Field(ge=0, description="maxPoints * weightage.")
    warning: Optional[str] = Field(
        default=None,
        description="Why the answer could not be scored, if it could not."
    )


class SectionScore(BaseModel):
    """Score breakdown of one active section."""

    model_config = ConfigDict(frozen=True)

    section_id: str
    title: str
    order: int
    score: float = Field(ge=0)
    max_score: float = Field(ge=0)
    percentage: float = Field(ge=0, le=100)
    answered_questions: int = Field(default=0, ge=0)


class RiskIndicator(BaseModel):
    """An individual answer carrying notable risk."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_text: str
    section_id: str
    section_title: str
    risk_score: int = Field(ge=0)
    risk_level: RiskLevel = Field(description="HIGH or MEDIUM, from the answer's risk score.")
    value: Union[str, List[str]]


class ScoreResult(BaseModel):
    """
    Result of scoring one finalized answer set.

    Immutable. Carries no timestamp so that identical inputs produce
    identical results.
    """

    model_config = ConfigDict(frozen=True)

    raw_score: float = Field(..., ge=0, description="Sum of contributions.")
    max_possible_score: float = Field(..., ge=0, description="Sum of maxPoints * weightage.")
    normalized_score: int = Field(..., ge=0, le=100, description="Score scaled to 0-100.")
    risk_level: RiskLevel

    warnings: List[str] = Field(
        default_factory=list,
        description="Ids of questions whose answers need manual review."
    )

    section_scores: List[SectionScore] = Field(default_factory=list)
    contributions: List[QuestionContribution] = Field(default_factory=list)
    risk_indicators: List[RiskIndicator] = Field(
        default_factory=list,
        description="Answers whose risk score reaches the indicator floor."
    )
    recommendations: List[str] = Field(default_factory=list)

    def get_traffic_light(self) -> str:
        """Traffic-light emoji for the risk level."""
        return {
            RiskLevel.LOW: "🟢",
            RiskLevel.MEDIUM: "🟡",
            RiskLevel.HIGH: "🔴",
        }[self.risk_level]

    def to_summary(self) -> str:
        """One-line summary."""
        return (
            f"{self.get_traffic_light()} Risk: {self.risk_level.value} | "
            f"Score: {self.normalized_score}/100 "
            f"({self.raw_score:g}/{self.max_possible_score:g}) | "
            f"Warnings: {len(self.warnings)}"
        )


# Custom Exceptions

class RIFScorerError(Exception):
    """Base error for the RIF scorer."""
    pass


class InvalidThresholdsError(RIFScorerError):
    """Risk thresholds are inconsistent."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid risk thresholds: {reason}")
