from typing import List

from pydantic import BaseModel, ConfigDict, Field

from engines.submission_review import FollowUpRequest, ProgressReport, ValidationIssue


class SubmissionReview(BaseModel):
    """Snapshot of a draft: progress, blocking issues and follow-up prompts."""

    model_config = ConfigDict(frozen=True)

    form_id: str = Field(description="Form the submission answers")
    submission_id: str = Field(description="Reviewed submission")
    finalized: bool = Field(default=False, description="Whether the answer set is already final")
    progress: ProgressReport = Field(description="Required-question progress over active sections")
    issues: List[ValidationIssue] = Field(default_factory=list)
    follow_ups: List[FollowUpRequest] = Field(default_factory=list)
    hidden_sections: List[str] = Field(
        default_factory=list,
        description="Ids of sections the current answers hide",
    )

    @property
    def ready(self) -> bool:
        """True when nothing blocks finalizing the draft."""
        return not self.issues
