"""Session state: current draw, scoring mode and the attempt history."""

import logging
import random
import threading
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from .config import DEFAULT_DIFFICULTY, DEFAULT_SCORING_MODE, DIFFICULTIES, SCORING_MODES, HISTORY_LIMIT
from .draw import generate_draw
from .interfaces import ExternalScorer
from .models import Draw, ScoreResult, HistoryEntry
from .scoring import score_sentence

logger = logging.getLogger(__name__)


@dataclass
class ScoringOutcome:
    result: ScoreResult
    warning: Optional[str] = None
    entry: Optional[HistoryEntry] = None

    def to_dict(self) -> dict:
        return {
            'result': self.result.to_dict(),
            'warning': self.warning
        }


def score_with_fallback(sentence: str, draw: Draw,
                        scorer: ExternalScorer | None = None) -> tuple[ScoreResult, str | None]:
    """Score with the external scorer, falling back to the heuristic one.

    Any scorer failure becomes a warning string; the heuristic result is
    always returned in that case. The external scorer is tried once.
    """
    if scorer is None:
        return score_sentence(sentence, draw), None
    try:
        judgement = scorer.score(sentence, draw)
        return judgement.to_score_result(scorer.name), None
    except Exception as e:
        warning = f'{scorer.name} scoring failed ({e}); used offline scoring instead.'
        logger.warning(warning)
        return score_sentence(sentence, draw), warning


class AttemptHistory:
    """Newest-first log of attempts, capped at HISTORY_LIMIT entries."""

    def __init__(self, limit: int = HISTORY_LIMIT):
        self.limit = limit
        self._entries = deque(maxlen=limit)
        self._lock = threading.Lock()

    def record(self, entry: HistoryEntry) -> None:
        # appendleft on a bounded deque drops the oldest entry
        with self._lock:
            self._entries.appendleft(entry)

    def entries(self, limit: int = None) -> list[HistoryEntry]:
        with self._lock:
            items = list(self._entries)
        return items[:limit] if limit is not None else items

    def latest(self) -> HistoryEntry | None:
        with self._lock:
            return self._entries[0] if self._entries else None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def to_list(self, limit: int = None) -> list[dict]:
        return [entry.to_dict() for entry in self.entries(limit)]


class Session:
    """All state of one player: difficulty, scoring mode, current draw, history."""

    def __init__(self, difficulty: str = DEFAULT_DIFFICULTY, mode: str = DEFAULT_SCORING_MODE,
                 rng: random.Random = None):
        self.set_difficulty(difficulty)
        self.set_mode(mode)
        self.rng = rng or random.Random()
        self.history = AttemptHistory()
        self.draw = generate_draw(self.difficulty, self.rng)

    def set_difficulty(self, difficulty: str) -> None:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f'Unknown difficulty {difficulty!r}, expected one of {DIFFICULTIES}')
        self.difficulty = difficulty

    def set_mode(self, mode: str) -> None:
        if mode not in SCORING_MODES:
            raise ValueError(f'Unknown scoring mode {mode!r}, expected one of {SCORING_MODES}')
        self.mode = mode

    def new_draw(self) -> Draw:
        self.draw = generate_draw(self.difficulty, self.rng)
        return self.draw

    def score_attempt(self, sentence: str, scorer: ExternalScorer | None = None) -> ScoringOutcome:
        """Score a sentence for the current draw and record it in the history."""
        draw = self.draw
        result, warning = score_with_fallback(sentence, draw, scorer)
        entry = HistoryEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            draw=draw,
            sentence=sentence,
            result=replace(result, notes=list(result.notes))
        )
        self.history.record(entry)
        return ScoringOutcome(result=result, warning=warning, entry=entry)

    def to_dict(self) -> dict:
        return {
            'difficulty': self.difficulty,
            'mode': self.mode,
            'draw': self.draw.to_dict(),
            'history_size': len(self.history)
        }
