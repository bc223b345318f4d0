"""
Submission Review - Data Definitions

Progress and validation models for RIF drafts. Everything here is
computed over visible questions only.

Author: TRACS Risk Team
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IssueKind(str, Enum):
    """Reasons a submission is not ready."""
    REQUIRED = "required"
    FOLLOW_UP = "follow_up"


class ValidationIssue(BaseModel):
    """A problem blocking submission of a draft."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_key: str
    section_id: str
    kind: IssueKind
    message: str


class FollowUpRequest(BaseModel):
    """Additional text the respondent owes because of an answer."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_key: str
    prompt: str
    satisfied: bool = Field(
        default=False,
        description="True when follow-up text was already supplied."
    )


class SectionProgress(BaseModel):
    """Required-question progress of one active section."""

    model_config = ConfigDict(frozen=True)

    section_id: str
    title: str
    order: int
    required_questions: int = Field(ge=0)
    answered_questions: int = Field(ge=0)
    percentage: float = Field(ge=0, le=100)


class ProgressReport(BaseModel):
    """Progress of a submission across active sections."""

    model_config = ConfigDict(frozen=True)

    sections: List[SectionProgress] = Field(default_factory=list)
    required_questions: int = Field(default=0, ge=0)
    answered_questions: int = Field(default=0, ge=0)
    percentage: float = Field(default=100.0, ge=0, le=100)

    def section(self, section_id: str) -> Optional[SectionProgress]:
        for item in self.sections:
            if item.section_id == section_id:
                return item
        return None
