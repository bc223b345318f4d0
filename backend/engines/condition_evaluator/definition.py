"""
Condition Evaluator - Data Definitions

Result models for section/question visibility.

Author: TRACS Risk Team
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class VisibilityMap(BaseModel):
    """
    Active sections and questions of a form for one answer set.

    Ids are listed in form order.
    """

    model_config = ConfigDict(frozen=True)

    active_section_ids: List[str] = Field(
        default_factory=list,
        description="Sections whose conditional logic currently holds."
    )

    active_question_ids: List[str] = Field(
        default_factory=list,
        description="Questions that are active (their section included)."
    )

    hidden_question_ids: List[str] = Field(
        default_factory=list,
        description="Questions hidden by their own or their section's logic."
    )

    def is_section_active(self, section_id: str) -> bool:
        return section_id in self.active_section_ids

    def is_question_active(self, question_id: str) -> bool:
        return question_id in self.active_question_ids


# Custom Exceptions

class ConditionEvaluatorError(Exception):
    """Base error for the condition evaluator."""
    pass


class UnsupportedConditionError(ConditionEvaluatorError):
    """A node that is not a validated condition model was evaluated."""
    def __init__(self, node: object):
        self.node = node
        super().__init__(
            f"Unsupported condition node of type {type(node).__name__}; "
            f"load the form through FormDefinitionLoader first."
        )
