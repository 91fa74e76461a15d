"""Schema package exports."""

from .sql import GenerationJob, Question, User, UserAnswer

__all__ = ["GenerationJob", "Question", "User", "UserAnswer"]
