"""
Form Definition - Implementation

Load-time validation of RIF definitions and answer sets:
- Converts raw JSON documents into frozen pydantic models
- Rejects malformed shapes early with FormDefinitionError
- Reports (but tolerates) conditions that reference unknown question keys

Author: TRACS Risk Team
"""

import json
import logging
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from .definition import (
    Answer,
    AnswerSet,
    FormDefinition,
    FormDefinitionError,
)

logger = logging.getLogger(__name__)


class FormDefinitionLoader:
    """
    Validating loader for RIF form documents.

    Usage:
        loader = FormDefinitionLoader()
        form = loader.load(payload)
        for section in form.sections:
            print(section.order, section.title)

    Raises:
        FormDefinitionError: If the document is not a valid form definition
    """

    def __init__(self, warn_unresolved: bool = True):
        """
        Initialize the loader.

        Args:
            warn_unresolved: Log a warning for every condition that
                references an unknown questionKey.
        """
        self.warn_unresolved = warn_unresolved

    def load(self, payload: Mapping[str, Any]) -> FormDefinition:
        """
        Validate a decoded form document.

        Args:
            payload: Mapping with camelCase (or snake_case) keys.

        Returns:
            The validated, immutable FormDefinition.
        """
        if not isinstance(payload, Mapping):
            raise FormDefinitionError(
                f"expected a JSON object, got {type(payload).__name__}"
            )

        form_id = payload.get("id")
        try:
            form = FormDefinition.model_validate(dict(payload))
        except ValidationError as e:
            raise FormDefinitionError(_summarize(e), form_id=form_id) from e

        if self.warn_unresolved:
            for reference in form.unresolved_references():
                logger.warning(
                    f"Form '{form.id}' v{form.version}: condition references "
                    f"unknown question ({reference}); it will evaluate as false"
                )

        logger.debug(
            f"Loaded form '{form.id}' v{form.version}: "
            f"{len(form.sections)} sections, "
            f"{sum(len(s.questions) for s in form.sections)} questions"
        )
        return form

    def load_json(self, raw: Union[str, bytes]) -> FormDefinition:
        """Decode and validate a JSON form document."""
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise FormDefinitionError(f"invalid JSON: {e}") from e
        return self.load(payload)


def _summarize(error: ValidationError) -> str:
    """Compact one-line description of a pydantic validation error."""
    parts = []
    for item in error.errors()[:5]:
        location = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else item.get("msg", ""))
    if error.error_count() > 5:
        parts.append(f"... {error.error_count() - 5} more")
    return "; ".join(parts)


def load_form_definition(payload: Mapping[str, Any]) -> FormDefinition:
    """
    Validate a form document with default settings.

    Convenience function for simple use cases.
    """
    return FormDefinitionLoader().load(payload)


def build_answer_set(
    submission_id: str,
    answers: Optional[Iterable[Union[Answer, Mapping[str, Any]]]] = None,
    finalized: bool = False,
) -> AnswerSet:
    """
    Build an AnswerSet from ``{questionId, value}`` records.

    Later records for the same question replace earlier ones.
    """
    answer_set = AnswerSet(submission_id=submission_id)
    for item in answers or []:
        if isinstance(item, Answer):
            answer_set.answers[item.question_id] = item
        else:
            answer = Answer.model_validate(dict(item))
            answer_set.answers[answer.question_id] = answer
    if finalized:
        answer_set.finalize()
    return answer_set
