"""
Scoring Service.

Awaits the storage collaborators, runs the synchronous engines over the
materialized form and answers, and hands results to the score sink.

Example:
    service = get_container().scoring_service
    result = await service.score_submission("tracs_rif", "sub-001")
    print(result.to_summary())
"""

from typing import Optional

from engines.condition_evaluator import evaluate_visibility
from engines.form_definition import AnswerSet, FormDefinition
from engines.rif_scorer import RIFScorer, ScoreResult
from engines.submission_review import SubmissionReviewer
from riskintake.core.exceptions import ScoringError, SubmissionNotFinalizedError
from riskintake.core.logging import ScoringLogger
from riskintake.schemas import SubmissionReview
from riskintake.services.collaborators import AnswerStore, FormStore, ScoreSink


class ScoringService:
    """
    Orchestrates a scoring run for one submission.

    Attributes:
        form_store: Source of form definitions.
        answer_store: Source of submission answers.
        result_sink: Receiver of computed scores.
        scorer: Configured RIF scorer.
    """

    def __init__(
        self,
        form_store: FormStore,
        answer_store: AnswerStore,
        result_sink: ScoreSink,
        scorer: Optional[RIFScorer] = None,
        logger: Optional[ScoringLogger] = None,
    ) -> None:
        self.form_store = form_store
        self.answer_store = answer_store
        self.result_sink = result_sink
        self.scorer = scorer or RIFScorer()
        self.logger = logger or ScoringLogger("service")

    async def _load(self, form_id: str, submission_id: str) -> tuple[FormDefinition, AnswerSet]:
        form = await self.form_store.load_form_definition(form_id)
        answers = await self.answer_store.load_answers(submission_id)
        for reference in form.unresolved_references():
            self.logger.unresolved_reference(form.id, reference)
        return form, answers

    async def score_submission(self, form_id: str, submission_id: str) -> ScoreResult:
        """
        Score a finalized submission and persist the result.

        Args:
            form_id: Form the submission answers.
            submission_id: Submission to score.

        Returns:
            The computed ScoreResult.

        Raises:
            FormNotFoundError: Unknown form.
            SubmissionNotFoundError: Unknown submission.
            SubmissionNotFinalizedError: The answer set is still a draft.
            ScoringError: The engines failed unexpectedly.
        """
        self.logger.run_start(form_id, submission_id)
        form, answers = await self._load(form_id, submission_id)

        if not answers.finalized:
            raise SubmissionNotFinalizedError(submission_id)

        try:
            result = self.scorer.compute_score(form, answers)
        except Exception as e:
            self.logger.error("compute", e)
            raise ScoringError(
                message="Failed to compute risk score",
                submission_id=submission_id,
                form_id=form_id,
                original_error=e,
            ) from e

        reasons = {c.question_id: c.warning for c in result.contributions if c.warning}
        for question_id in result.warnings:
            self.logger.review_needed(submission_id, question_id, reasons.get(question_id))

        await self.result_sink.persist_score_result(submission_id, result)
        self.logger.run_end(submission_id, result)
        return result

    async def review_submission(self, form_id: str, submission_id: str) -> SubmissionReview:
        """
        Review a submission without scoring it.

        Works for drafts and finalized answer sets alike.
        """
        form, answers = await self._load(form_id, submission_id)
        reviewer = SubmissionReviewer(form, answers)
        visibility = evaluate_visibility(form, answers)

        hidden = [s.id for s in form.sections if not visibility.is_section_active(s.id)]
        for section_id in hidden:
            self.logger.debug("review", f"section '{section_id}' hidden by current answers")

        return SubmissionReview(
            form_id=form_id,
            submission_id=submission_id,
            finalized=answers.finalized,
            progress=reviewer.progress(),
            issues=reviewer.validate(),
            follow_ups=reviewer.follow_ups(),
            hidden_sections=hidden,
        )
