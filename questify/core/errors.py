"""Error kinds raised by the Questify client core.

Every error carries a user-visible ``message`` so callers can decide whether
to display it or handle it silently.
"""

from __future__ import annotations


class QuestifyError(Exception):
    """Base class for all Questify errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(QuestifyError):
    """Local input problem detected before any network call."""


class NoSelectionError(ValidationError):
    """Submit attempted without a selected answer."""


class InvalidOptionError(ValidationError):
    """Selected option index is outside the question's options."""


class NetworkError(QuestifyError):
    """Request failed, timed out, or returned a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(NetworkError):
    """Backend rejected the bearer token (HTTP 401)."""


class IdempotentDuplicateError(NetworkError):
    """Backend reported that the question was already answered."""


class QuizSessionError(QuestifyError):
    """Operation not allowed in the current quiz session state."""


class StaleSessionError(QuizSessionError):
    """Session was never started, or already completed or quit."""


class AlreadyCompletedError(QuizSessionError):
    """Assignment is in the student's completed set."""


class SubmissionInProgressError(QuizSessionError):
    """A submit is in flight; submit and skip are refused until it resolves."""
