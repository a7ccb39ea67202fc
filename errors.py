"""Exceptions raised by the elasticity quiz core."""


class QuizError(Exception):
    """Base exception for quiz errors."""
    pass


class DomainError(QuizError, ValueError):
    """A calculation was asked for outside its mathematical domain."""
    pass


class EmptyDatasetError(QuizError):
    """No goods are available to draw a question from."""
    pass


class DatasetUnavailableError(QuizError):
    """The reference dataset could not be fetched or parsed."""
    pass


class UnknownSessionError(QuizError, KeyError):
    """No session exists for the given id."""
    pass
