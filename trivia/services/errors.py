"""Domain errors raised by the service layer and mapped to HTTP statuses by the routes."""

from __future__ import annotations


class TriviaError(RuntimeError):
  """Base class for expected service failures."""


class JobNotFoundError(TriviaError):
  """Raised when a generation job id does not exist."""


class JobNotPendingError(TriviaError):
  """Raised when a job can no longer be cancelled because processing has started."""


class InvalidJobRequestError(TriviaError):
  """Raised when a generation request has an empty category or an out of range count."""


class UserNotFoundError(TriviaError):
  """Raised when a subscriber id does not exist."""


class QuestionNotFoundError(TriviaError):
  """Raised when a question id does not exist."""


class InvalidAnswerError(TriviaError):
  """Raised when an answer is not one of A, B, C or D."""
