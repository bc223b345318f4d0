"""
RIF Scorer - Implementation

Deterministic risk scoring of RIF answer sets:
- Only active, answered questions contribute (visibility gated)
- Choice risk scores, worst-case for multi-choice, numeric buckets
- maxPoints ceiling and weightage per question
- Normalization to 0-100 and three-tier risk level

Author: TRACS Risk Team
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from engines.condition_evaluator import VisibilityResolver
from engines.form_definition import (
    AnswerSet,
    AnswerValue,
    Choice,
    FormDefinition,
    Question,
    QuestionType,
    UNSCORED_TYPES,
)

from .definition import (
    InvalidThresholdsError,
    QuestionContribution,
    RiskIndicator,
    RiskLevel,
    RiskThresholds,
    ScoreResult,
    SectionScore,
)

logger = logging.getLogger(__name__)


# Default level thresholds on the normalized score
THRESHOLD_MEDIUM = 40.0
THRESHOLD_HIGH = 70.0

# Sections above this percentage get an explicit alert
SECTION_ALERT_PERCENTAGE = 80.0

# Answers at or above these risk scores are reported as indicators
RISK_INDICATOR_MIN_POINTS = 2
RISK_INDICATOR_HIGH_POINTS = 3

# Cascading "Category | Subcategory" answers
SUBCATEGORY_SEPARATOR = " | "

LEVEL_RECOMMENDATIONS: Dict[RiskLevel, List[str]] = {
    RiskLevel.HIGH: [
        "HIGH RISK: Detailed due diligence required before onboarding",
        "Enhanced security controls and monitoring needed",
        "Quarterly risk reviews recommended",
    ],
    RiskLevel.MEDIUM: [
        "MEDIUM RISK: Standard due diligence with additional controls",
        "Semi-annual risk reviews recommended",
    ],
    RiskLevel.LOW: [
        "LOW RISK: Standard onboarding process acceptable",
        "Annual risk reviews sufficient",
    ],
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RIFScorer:
    """
    Deterministic risk scorer for RIF submissions.

    Walks the form in order, skips hidden sections/questions and
    unanswered questions, and aggregates weighted contributions into a
    normalized score (0-100) with a LOW/MEDIUM/HIGH level.

    Usage:
        scorer = RIFScorer()
        result = scorer.compute_score(form, answers)

        print(f"Score: {result.normalized_score}, Level: {result.risk_level}")
    """

    def __init__(
        self,
        thresholds: Optional[RiskThresholds] = None,
        section_alert_percentage: float = SECTION_ALERT_PERCENTAGE,
    ):
        """
        Initialize the RIF scorer.

        Args:
            thresholds: Level thresholds (default: 40 / 70)
            section_alert_percentage: Section percentage above which a
                section-specific recommendation is added (default: 80)
        """
        self.thresholds = thresholds or RiskThresholds(
            medium=THRESHOLD_MEDIUM, high=THRESHOLD_HIGH
        )
        self.section_alert_percentage = section_alert_percentage

    @classmethod
    def from_values(
        cls,
        medium_threshold: float,
        high_threshold: float,
        section_alert_percentage: float = SECTION_ALERT_PERCENTAGE,
    ) -> "RIFScorer":
        """Build a scorer from raw threshold numbers (e.g. settings)."""
        try:
            thresholds = RiskThresholds(medium=medium_threshold, high=high_threshold)
        except ValidationError as e:
            raise InvalidThresholdsError(str(e.errors()[0].get("msg"))) from e
        return cls(thresholds=thresholds, section_alert_percentage=section_alert_percentage)

    def compute_score(
        self,
        form: FormDefinition,
        answers: AnswerSet,
    ) -> ScoreResult:
        """
        Score an answer set against its form.

        Args:
            form: Validated form definition.
            answers: Answers of the submission.

        Returns:
            ScoreResult with raw/max/normalized score, level and breakdown.
        """
        resolver = VisibilityResolver(form, answers)

        raw_score = 0.0
        max_score = 0.0
        warnings: List[str] = []
        contributions: List[QuestionContribution] = []
        section_scores: List[SectionScore] = []
        indicators: List[RiskIndicator] = []

        for section in form.sections:
            if not resolver.is_section_active(section):
                logger.debug(f"Section {section.order} '{section.title}' inactive, skipped")
                continue

            section_raw = 0.0
            section_max = 0.0
            answered = 0

            for question in section.questions:
                answer = answers.get(question.id)
                if answer is None or answer.is_empty:
                    continue
                if not resolver.is_question_active(question):
                    continue

                item = self.score_question(question, answer.value)
                contributions.append(item)
                answered += 1
                section_raw += item.contribution
                section_max += item.max_contribution

                if item.warning:
                    logger.debug(f"Question '{question.id}' flagged: {item.warning}")
                    if question.id not in warnings:
                        warnings.append(question.id)

                if item.risk_score >= RISK_INDICATOR_MIN_POINTS:
                    indicators.append(RiskIndicator(
                        question_id=question.id,
                        question_text=question.question_text,
                        section_id=section.id,
                        section_title=section.title,
                        risk_score=item.risk_score,
                        risk_level=(
                            RiskLevel.HIGH
                            if item.risk_score >= RISK_INDICATOR_HIGH_POINTS
                            else RiskLevel.MEDIUM
                        ),
                        value=answer.value,
                    ))

            raw_score += section_raw
            max_score += section_max
            section_scores.append(SectionScore(
                section_id=section.id,
                title=section.title,
                order=section.order,
                score=round(section_raw, 4),
                max_score=round(section_max, 4),
                percentage=round(section_raw / section_max * 100, 2) if section_max > 0 else 0.0,
                answered_questions=answered,
            ))

        if max_score > 0:
            normalized = max(0, min(100, round_half_up(raw_score / max_score * 100)))
            risk_level = self.classify(normalized)
        else:
            # Nothing scorable was answered
            normalized = 0
            risk_level = RiskLevel.LOW

        return ScoreResult(
            raw_score=round(raw_score, 4),
            max_possible_score=round(max_score, 4),
            normalized_score=normalized,
            risk_level=risk_level,
            warnings=warnings,
            section_scores=section_scores,
            contributions=contributions,
            risk_indicators=indicators,
            recommendations=self._build_recommendations(risk_level, section_scores),
        )

    def classify(self, normalized_score: float) -> RiskLevel:
        """Map a normalized score to its risk level."""
        if normalized_score < self.thresholds.medium:
            return RiskLevel.LOW
        if normalized_score <= self.thresholds.high:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    def score_question(
        self,
        question: Question,
        value: AnswerValue,
    ) -> QuestionContribution:
        """Contribution of a single (active, answered) question."""
        risk, warning = self._risk_for_answer(question, value)
        risk = min(risk, question.max_points)

        return QuestionContribution(
            question_id=question.id,
            question_key=question.question_key,
            section_id=question.section_id or "",
            risk_score=risk,
            weightage=question.weightage,
            contribution=risk * question.weightage,
            max_contribution=question.max_points * question.weightage,
            warning=warning,
        )

    def _risk_for_answer(
        self,
        question: Question,
        value: AnswerValue,
    ) -> Tuple[int, Optional[str]]:
        """Raw risk score of an answer plus an optional review warning."""
        qtype = question.question_type

        if qtype in UNSCORED_TYPES:
            return 0, None

        if qtype == QuestionType.NUMBER:
            return self._risk_for_number(question, value)

        if qtype == QuestionType.BOOLEAN and not question.options.choices:
            return 0, None

        if qtype == QuestionType.MULTIPLE_CHOICE:
            selected = value if isinstance(value, list) else [value]
            scores = []
            unknown = []
            for item in selected:
                choice = self._match_choice(question, item)
                if choice is None:
                    unknown.append(item)
                else:
                    scores.append(choice.risk_score or 0)
            warning = f"unknown choice(s): {', '.join(unknown)}" if unknown else None
            return max(scores, default=0), warning

        # Single-value choice types
        if isinstance(value, list):
            if len(value) != 1:
                return 0, f"expected a single value, got {len(value)}"
            value = value[0]

        choice = self._match_choice(question, value)
        if choice is None:
            return 0, f"unknown choice: {value}"
        return choice.risk_score or 0, None

    def _risk_for_number(
        self,
        question: Question,
        value: AnswerValue,
    ) -> Tuple[int, Optional[str]]:
        buckets = question.options.risk_scoring
        if not buckets:
            return 0, None

        if isinstance(value, list):
            return 0, "expected a single number"

        try:
            number = float(value.strip())
        except ValueError:
            return 0, f"not a number: {value}"
        if not math.isfinite(number):
            return 0, f"not a finite number: {value}"

        for bucket in buckets:
            if bucket.contains(number):
                return bucket.risk_score, None
        return 0, f"value {value} is outside all risk buckets"

    def _match_choice(self, question: Question, value: str) -> Optional[Choice]:
        choice = question.find_choice(question.canonical_value(value))
        if choice is not None:
            return choice

        # Subcategories carry no risk metadata; score the category.
        if SUBCATEGORY_SEPARATOR in value:
            category = value.split(SUBCATEGORY_SEPARATOR, 1)[0].strip()
            return question.find_choice(category)

        return None

    def _build_recommendations(
        self,
        risk_level: RiskLevel,
        section_scores: List[SectionScore],
    ) -> List[str]:
        """Level guidance plus alerts for sections above the alert percentage."""
        recommendations = list(LEVEL_RECOMMENDATIONS[risk_level])
        for section in section_scores:
            if section.percentage > self.section_alert_percentage:
                recommendations.append(
                    f"Section {section.order} ({section.title}): High risk indicators detected"
                )
        return recommendations


# Convenience function
def compute_score(
    form: FormDefinition,
    answers: AnswerSet,
    thresholds: Optional[RiskThresholds] = None,
) -> ScoreResult:
    """
    Score an answer set with default settings.

    Convenience function for simple use cases.
    """
    return RIFScorer(thresholds=thresholds).compute_score(form, answers)
