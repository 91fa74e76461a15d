from . import answers, generation, scoring, users

__all__ = ["answers", "generation", "scoring", "users"]
