from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz attempt errors raised to the HTTP layer."""
    default_message = "Quiz error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(QuizError):
    """Quiz, content or attempt is missing, or the attempt belongs to someone else."""
    default_message = "Not found"


class AlreadyCompleted(QuizError):
    default_message = "You have already completed this quiz. You cannot attempt it again."

    def __init__(self, message: str | None = None, attempt_id: int | None = None):
        super().__init__(message)
        self.attempt_id = attempt_id
