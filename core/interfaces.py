"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod

from .models import Draw, AIJudgement


class ExternalScorer(ABC):
    """Abstract base class for an AI-backed sentence scorer.

    Implementations return a judgement on a 0-10 scale or raise
    ExternalScorerError; callers fall back to the heuristic scorer.
    """

    name = 'external'

    @abstractmethod
    def score(self, sentence: str, draw: Draw) -> AIJudgement:
        """Score a sentence for a draw. Raises ExternalScorerError on failure."""
        pass
