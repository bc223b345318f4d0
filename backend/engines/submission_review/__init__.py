"""
Submission Review Engine

Progress tracking, required-answer validation and follow-up prompts
for RIF drafts.
"""

from .definition import (
    FollowUpRequest,
    IssueKind,
    ProgressReport,
    SectionProgress,
    ValidationIssue,
)

from .impl import (
    SubmissionReviewer,
    calculate_progress,
    pending_follow_ups,
    validate_submission,
    DEFAULT_FOLLOW_UP_PROMPT,
)

__all__ = [
    # Classes
    "SubmissionReviewer",
    # Models
    "FollowUpRequest",
    "IssueKind",
    "ProgressReport",
    "SectionProgress",
    "ValidationIssue",
    # Functions
    "calculate_progress",
    "pending_follow_ups",
    "validate_submission",
    # Constants
    "DEFAULT_FOLLOW_UP_PROMPT",
]
