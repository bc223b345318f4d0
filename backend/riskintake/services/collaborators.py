"""
Collaborator interfaces of the scoring core.

The engines receive already-materialized forms and answers. These
protocols describe the storage seams the scoring service awaits; any
object with matching coroutine methods can be plugged in.
"""

from typing import Protocol, runtime_checkable

from engines.form_definition import AnswerSet, FormDefinition
from engines.rif_scorer import ScoreResult


@runtime_checkable
class FormStore(Protocol):
    """Supplies validated form definitions."""

    async def load_form_definition(self, form_id: str) -> FormDefinition:
        ...


@runtime_checkable
class AnswerStore(Protocol):
    """Supplies the answer set of a submission."""

    async def load_answers(self, submission_id: str) -> AnswerSet:
        ...


@runtime_checkable
class ScoreSink(Protocol):
    """Receives computed results; owned by the caller."""

    async def persist_score_result(self, submission_id: str, result: ScoreResult) -> None:
        ...
