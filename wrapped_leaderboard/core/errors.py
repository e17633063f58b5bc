"""
Error taxonomy for the leaderboard service.

Every failure the submission pipeline or the read paths can report is a
subclass of ``LeaderboardError``. Each class carries a short machine-readable
``code`` and the HTTP status the API layer answers with; the message is safe
to show to end users.
"""

from typing import Any, Optional


class LeaderboardError(Exception):
    """Base exception for all leaderboard-specific errors."""

    code: str = "internal_error"
    status_code: int = 500
    default_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: User-facing error message. Falls back to the class default.
            details: Optional dictionary with additional context for logs only.
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_payload(self) -> dict[str, str]:
        """Body returned to API clients. Details stay server-side."""
        return {"error": self.message, "code": self.code}


# =============================================================================
# Caller errors
# =============================================================================


class Unauthenticated(LeaderboardError):
    code = "unauthenticated"
    status_code = 401
    default_message = "Unauthorized"


class InvalidInput(LeaderboardError):
    code = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class MissingInput(InvalidInput):
    code = "missing_input"
    default_message = "Missing required fields"


class UploadTooLarge(InvalidInput):
    code = "upload_too_large"
    status_code = 413
    default_message = "Screenshot is too large"


class InvalidDraft(InvalidInput):
    """A client-held draft token failed verification or expired."""

    code = "invalid_draft"
    default_message = "Pending submission is invalid or expired"


class DuplicateSubmission(LeaderboardError):
    code = "duplicate_submission"
    status_code = 400
    default_message = "You have already submitted your stats"


# =============================================================================
# Extraction errors
# =============================================================================


class ExtractionUnavailable(LeaderboardError):
    """The vision model failed or returned no textual content."""

    code = "extraction_unavailable"
    default_message = "Failed to extract stats from image"


class ExtractionUnparseable(LeaderboardError):
    """The vision model answered, but not with a single JSON object."""

    code = "extraction_unparseable"
    default_message = "Failed to parse extracted stats"


# =============================================================================
# Persistence errors
# =============================================================================


class StorageWriteFailed(LeaderboardError):
    code = "storage_write_failed"
    default_message = "Failed to upload screenshot"


class RecordInsertFailed(LeaderboardError):
    code = "record_insert_failed"
    default_message = "Failed to save submission"


class SubmissionConflict(RecordInsertFailed):
    """The store rejected the insert because the principal already owns a row."""

    code = "submission_conflict"
    status_code = 409
    default_message = "A submission for this account was saved concurrently"


class RecordNotFound(LeaderboardError):
    code = "record_not_found"
    status_code = 404
    default_message = "User not found"


class LeaderboardQueryFailed(LeaderboardError):
    code = "leaderboard_query_failed"
    default_message = "Failed to fetch leaderboard"


class ServiceUnavailable(LeaderboardError):
    """A collaborator the request needs was never configured."""

    code = "service_unavailable"
    status_code = 503
    default_message = "Service is not configured"
