"""
In-memory submission store.

Reference implementation of the answer store and score sink seams.
Score results are kept as an append-only history per submission:
scoring a resubmission adds a record, it never replaces one.
"""

import asyncio
from datetime import datetime, timezone

from engines.form_definition import AnswerSet
from engines.rif_scorer import ScoreResult
from riskintake.core.exceptions import SubmissionNotFoundError
from riskintake.core.logging import get_logger
from riskintake.schemas import ScoreRecord

logger = get_logger(__name__)


class InMemorySubmissionStore:
    """Answer sets and score histories held in process memory."""

    def __init__(self) -> None:
        self._answers: dict[str, AnswerSet] = {}
        self._history: dict[str, list[ScoreRecord]] = {}
        self._lock = asyncio.Lock()

    async def save_answers(self, answers: AnswerSet) -> None:
        """Store a copy of the answer set, replacing any previous one."""
        async with self._lock:
            self._answers[answers.submission_id] = answers.model_copy(deep=True)

    async def load_answers(self, submission_id: str) -> AnswerSet:
        """
        Return a copy of the stored answer set.

        Raises:
            SubmissionNotFoundError: Nothing stored for ``submission_id``.
        """
        answers = self._answers.get(submission_id)
        if answers is None:
            raise SubmissionNotFoundError(submission_id)
        return answers.model_copy(deep=True)

    async def persist_score_result(self, submission_id: str, result: ScoreResult) -> None:
        """Append a result to the submission's history."""
        async with self._lock:
            history = self._history.setdefault(submission_id, [])
            record = ScoreRecord(
                submission_id=submission_id,
                revision=len(history) + 1,
                recorded_at=datetime.now(timezone.utc),
                result=result,
            )
            history.append(record)
        logger.info(
            f"Recorded score revision {record.revision} for submission '{submission_id}'"
        )

    def history(self, submission_id: str) -> list[ScoreRecord]:
        """All recorded scores, oldest first."""
        return list(self._history.get(submission_id, []))

    def latest(self, submission_id: str) -> ScoreRecord | None:
        history = self._history.get(submission_id)
        return history[-1] if history else None
