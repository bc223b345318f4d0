"""
Submission Review - Implementation

Draft checks driven by the same visibility rules as scoring:
- Progress of required questions per active section
- Required-answer validation (hidden questions are never required)
- Follow-up text prompts triggered by specific answers

Author: TRACS Risk Team
"""

import logging
from typing import List, Optional

from engines.condition_evaluator import VisibilityResolver
from engines.form_definition import (
    Answer,
    AnswerSet,
    FormDefinition,
    Question,
    QuestionType,
)

from .definition import (
    FollowUpRequest,
    IssueKind,
    ProgressReport,
    SectionProgress,
    ValidationIssue,
)

logger = logging.getLogger(__name__)


DEFAULT_FOLLOW_UP_PROMPT = "Please provide additional details:"


def _has_text(answer: Optional[Answer]) -> bool:
    return bool(answer and answer.follow_up_text and answer.follow_up_text.strip())


class SubmissionReviewer:
    """
    Reviews a draft answer set against its form.

    Usage:
        reviewer = SubmissionReviewer(form, answers)
        report = reviewer.progress()
        issues = reviewer.validate()
        if not issues:
            answers.finalize()
    """

    def __init__(self, form: FormDefinition, answers: AnswerSet):
        self.form = form
        self.answers = answers

    def _visibility(self) -> VisibilityResolver:
        # Fresh per call: the draft may have changed since the last check
        return VisibilityResolver(self.form, self.answers)

    def _is_answered(self, question: Question) -> bool:
        answer = self.answers.get(question.id)
        return answer is not None and not answer.is_empty

    def progress(self) -> ProgressReport:
        """Required-question progress over active sections."""
        resolver = self._visibility()
        sections: List[SectionProgress] = []
        total_required = 0
        total_answered = 0

        for section in self.form.sections:
            if not resolver.is_section_active(section):
                continue

            required = [
                q for q in section.questions
                if q.is_required and resolver.is_question_active(q)
            ]
            answered = sum(1 for q in required if self._is_answered(q))

            total_required += len(required)
            total_answered += answered
            sections.append(SectionProgress(
                section_id=section.id,
                title=section.title,
                order=section.order,
                required_questions=len(required),
                answered_questions=answered,
                percentage=round(answered / len(required) * 100, 2) if required else 100.0,
            ))

        return ProgressReport(
            sections=sections,
            required_questions=total_required,
            answered_questions=total_answered,
            percentage=(
                round(total_answered / total_required * 100, 2)
                if total_required else 100.0
            ),
        )

    def follow_ups(self) -> List[FollowUpRequest]:
        """Follow-up prompts triggered by answers of active questions."""
        resolver = self._visibility()
        requests: List[FollowUpRequest] = []

        for _, question in self.form.iter_questions():
            if not self._is_answered(question):
                continue
            if not resolver.is_question_active(question):
                continue

            answer = self.answers.get(question.id)
            prompt = self._triggered_prompt(question, answer)
            if prompt is not None:
                requests.append(FollowUpRequest(
                    question_id=question.id,
                    question_key=question.question_key,
                    prompt=prompt,
                    satisfied=_has_text(answer),
                ))

        return requests

    def _triggered_prompt(self, question: Question, answer: Answer) -> Optional[str]:
        selected = answer.value if isinstance(answer.value, list) else [answer.value]
        if question.question_type == QuestionType.BOOLEAN:
            selected = [question.canonical_value(v) for v in selected]

        conditional_text = question.options.conditional_text
        if conditional_text is not None and any(conditional_text.matches(v) for v in selected):
            return conditional_text.prompt or DEFAULT_FOLLOW_UP_PROMPT

        for value in selected:
            choice = question.find_choice(value)
            if choice is not None and choice.requires_text:
                return f"Please provide details for '{choice.label or choice.value}':"
        return None

    def validate(self) -> List[ValidationIssue]:
        """Issues that must be fixed before the draft can be finalized."""
        resolver = self._visibility()
        issues: List[ValidationIssue] = []

        for section in self.form.sections:
            if not resolver.is_section_active(section):
                continue
            for question in section.questions:
                if not question.is_required or not resolver.is_question_active(question):
                    continue
                if not self._is_answered(question):
                    issues.append(ValidationIssue(
                        question_id=question.id,
                        question_key=question.question_key,
                        section_id=section.id,
                        kind=IssueKind.REQUIRED,
                        message="This question is required",
                    ))

        for request in self.follow_ups():
            if request.satisfied:
                continue
            question = self.form.question_by_id(request.question_id)
            issues.append(ValidationIssue(
                question_id=request.question_id,
                question_key=request.question_key,
                section_id=question.section_id or "",
                kind=IssueKind.FOLLOW_UP,
                message=request.prompt,
            ))

        if issues:
            logger.debug(
                f"Submission '{self.answers.submission_id}' has {len(issues)} validation issue(s)"
            )
        return issues


def calculate_progress(form: FormDefinition, answers: AnswerSet) -> ProgressReport:
    """Progress report with default settings."""
    return SubmissionReviewer(form, answers).progress()


def pending_follow_ups(form: FormDefinition, answers: AnswerSet) -> List[FollowUpRequest]:
    """Follow-up prompts triggered by the current answers."""
    return SubmissionReviewer(form, answers).follow_ups()


def validate_submission(form: FormDefinition, answers: AnswerSet) -> List[ValidationIssue]:
    """Validation issues blocking submission."""
    return SubmissionReviewer(form, answers).validate()
