from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from engines.rif_scorer import ScoreResult


class ScoreRecord(BaseModel):
    """Immutable history entry for one scoring of a submission."""

    model_config = ConfigDict(frozen=True)

    submission_id: str = Field(description="Submission the score belongs to")
    revision: int = Field(ge=1, description="1-based position in the submission history")
    recorded_at: datetime = Field(description="When the result was persisted (UTC)")
    result: ScoreResult = Field(description="Score computed for this revision")
