from .models import (
    Verb, Tense, TimeCue, SpecialCondition, Draw, ScoreResult, AIJudgement, HistoryEntry,
    TenseKey, SpecialKey
)
from .interfaces import ExternalScorer
from .errors import LexiconError, ExternalScorerError
from .draw import generate_draw
from .scoring import score_sentence
from .session import Session, AttemptHistory, score_with_fallback
from .judge import build_judge_prompt
from .config import (
    DIFFICULTIES, DEFAULT_DIFFICULTY, SCORING_MODES, DEFAULT_SCORING_MODE,
    HEURISTIC_MAX_SCORE, AI_MAX_SCORE, HISTORY_LIMIT, LANGUAGE
)

__all__ = [
    'Verb', 'Tense', 'TimeCue', 'SpecialCondition', 'Draw', 'ScoreResult', 'AIJudgement',
    'HistoryEntry', 'TenseKey', 'SpecialKey',
    'ExternalScorer',
    'LexiconError', 'ExternalScorerError',
    'generate_draw', 'score_sentence',
    'Session', 'AttemptHistory', 'score_with_fallback',
    'build_judge_prompt',
    'DIFFICULTIES', 'DEFAULT_DIFFICULTY', 'SCORING_MODES', 'DEFAULT_SCORING_MODE',
    'HEURISTIC_MAX_SCORE', 'AI_MAX_SCORE', 'HISTORY_LIMIT', 'LANGUAGE'
]
