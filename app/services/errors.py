"""Domain exceptions raised by the grading services.

Routers never see these directly: main.py installs one handler for
GradingError that maps each subclass to its HTTP status.
"""

from __future__ import annotations


class GradingError(Exception):
    pass


class QuizNotFoundError(GradingError):
    pass


class QuestionNotFoundError(GradingError):
    pass


class AttemptNotFoundError(GradingError):
    pass


class ReviewSessionNotFoundError(GradingError):
    pass


class QuizValidationError(GradingError, ValueError):
    pass


class QuestionValidationError(GradingError, ValueError):
    pass


class OrderConflictError(GradingError):
    """Another question of the same quiz already holds that order_index."""


class QuizInactiveError(GradingError):
    pass


class AttemptLimitReachedError(GradingError):
    pass
