from riskintake.schemas.review import SubmissionReview
from riskintake.schemas.score_history import ScoreRecord

__all__ = [
    "ScoreRecord",
    "SubmissionReview",
]
