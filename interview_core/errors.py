"""Error taxonomy for the evaluation pipeline."""
from __future__ import annotations


class EvaluationServiceError(Exception):
    """Base class for every error raised by interview_core."""


class ValidationError(EvaluationServiceError):
    """Submission is missing required fields or is malformed."""


class StoreError(EvaluationServiceError):
    """A persistent-store read or write failed."""


class ParseError(EvaluationServiceError):
    """Model output could not be turned into a valid evaluation."""


class EvaluationError(EvaluationServiceError):
    """The grading model failed on every attempt."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


__all__ = [
    "EvaluationServiceError",
    "ValidationError",
    "StoreError",
    "ParseError",
    "EvaluationError",
]
