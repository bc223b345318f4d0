"""
Custom exceptions for the TRACS Risk Intake backend.

This module provides a hierarchy of exceptions for consistent error handling
across the application. All exceptions inherit from RIFBaseException.

Engine-level validation errors (malformed form documents, finalized answer
sets) live next to the engines; these wrap the collaborator and service
layers around them.

Example:
    try:
        result = await service.score_submission("tracs_rif", submission_id)
    except SubmissionNotFinalizedError as e:
        logger.error(f"Scoring refused: {e}")
"""

from typing import Optional


class RIFBaseException(Exception):
    """
    Base exception class for all Risk Intake errors.

    All custom exceptions in the project should inherit from this class
    to enable consistent error handling and logging.

    Attributes:
        message: Human-readable description of the error.
        details: Optional additional context for debugging.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable description of the error.
            details: Optional additional context for debugging.
        """
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with optional details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class FormNotFoundError(RIFBaseException):
    """
    Exception raised when a form definition cannot be located.

    Attributes:
        form_id: Identifier of the requested form.
    """

    def __init__(self, form_id: str, details: Optional[str] = None) -> None:
        self.form_id = form_id
        super().__init__(f"[FormStore] Form '{form_id}' not found", details)


class SubmissionNotFoundError(RIFBaseException):
    """
    Exception raised when no answers exist for a submission.

    Attributes:
        submission_id: Identifier of the requested submission.
    """

    def __init__(self, submission_id: str, details: Optional[str] = None) -> None:
        self.submission_id = submission_id
        super().__init__(f"[SubmissionStore] Submission '{submission_id}' not found", details)


class SubmissionNotFinalizedError(RIFBaseException):
    """
    Exception raised when scoring is requested for a draft.

    Scores are computed once per finalized answer set; drafts can only
    be reviewed.

    Attributes:
        submission_id: Identifier of the draft submission.
    """

    def __init__(self, submission_id: str, details: Optional[str] = None) -> None:
        self.submission_id = submission_id
        super().__init__(
            f"[Scoring] Submission '{submission_id}' is still a draft and cannot be scored",
            details,
        )


class ScoringError(RIFBaseException):
    """
    Exception raised when the scoring run fails unexpectedly.

    Attributes:
        submission_id: Submission being scored.
        form_id: Form the submission answers.
        original_error: The underlying exception if available.
    """

    def __init__(
        self,
        message: str,
        submission_id: Optional[str] = None,
        form_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize scoring error.

        Args:
            message: Human-readable description of the error.
            submission_id: Submission being scored.
            form_id: Form the submission answers.
            original_error: The underlying exception if available.
            details: Optional additional context for debugging.
        """
        self.submission_id = submission_id
        self.form_id = form_id
        self.original_error = original_error

        enhanced_message = f"[Scoring] {message}"
        if submission_id:
            enhanced_message = f"{enhanced_message} (submission: {submission_id})"
        if form_id:
            enhanced_message = f"{enhanced_message} (form: {form_id})"
        if original_error:
            enhanced_message = (
                f"{enhanced_message} | Caused by: "
                f"{type(original_error).__name__}: {str(original_error)[:200]}"
            )

        super().__init__(enhanced_message, details)
