from riskintake.services.collaborators import AnswerStore, FormStore, ScoreSink
from riskintake.services.container import get_container, reset_container
from riskintake.services.form_repository import JsonFormRepository
from riskintake.services.scoring_service import ScoringService
from riskintake.services.submission_store import InMemorySubmissionStore

__all__ = [
    "AnswerStore",
    "FormStore",
    "ScoreSink",
    "JsonFormRepository",
    "InMemorySubmissionStore",
    "ScoringService",
    "get_container",
    "reset_container",
]
