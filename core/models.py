"""Domain models for tiempo application."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import HEURISTIC_MAX_SCORE, AI_MAX_SCORE

IRREGULAR_MARK = '★'


class TenseKey(str, Enum):
    PRESENTE = 'presente'
    PRETERITO = 'preterito'
    FUTURO = 'futuro'
    IR_A = 'ir_a'


class SpecialKey(str, Enum):
    NEGATION = 'neg'
    QUESTION = 'q'
    CONNECTOR = 'conj'
    PLACE = 'place'
    EXTRA_TIME = 'time2'
    DIRECT_OBJECT = 'od'
    INDIRECT_OBJECT = 'oi'
    REFLEXIVE = 'refl'
    PLURAL = 'plural'
    ALSO_NEITHER = 'tambien'
    CHAINED_VERBS = 'twoverbs'
    OBLIGATION = 'tenerque'
    NO_ENGLISH = 'noeng'


@dataclass(frozen=True)
class Verb:
    infinitive: str
    irregular: bool = False

    @property
    def display(self) -> str:
        """Infinitive with the irregular star, e.g. 'tener★'."""
        return f'{self.infinitive}{IRREGULAR_MARK}' if self.irregular else self.infinitive

    @classmethod
    def from_display(cls, text: str) -> 'Verb':
        text = text.strip()
        if text.endswith(IRREGULAR_MARK):
            return cls(text[:-len(IRREGULAR_MARK)], irregular=True)
        return cls(text)


@dataclass(frozen=True)
class Tense:
    key: TenseKey
    name: str


@dataclass(frozen=True)
class TimeCue:
    text: str
    allowed_tenses: frozenset
    weight: int = 1

    def allows(self, tense_key: TenseKey) -> bool:
        return tense_key in self.allowed_tenses


@dataclass(frozen=True)
class SpecialCondition:
    text: str
    key: SpecialKey
    difficulty_gate: bool = False


@dataclass(frozen=True)
class Draw:
    """One coherent round: subject, verb, tense, time cue and special condition."""
    subject: str
    verb: Verb
    tense: Tense
    time_cue: TimeCue
    special: SpecialCondition

    def is_coherent(self) -> bool:
        return self.time_cue.allows(self.tense.key)

    def to_dict(self) -> dict:
        return {
            'subject': self.subject,
            'verb': self.verb.display,
            'tense': self.tense.name,
            'tenseKey': self.tense.key.value,
            'timeCue': self.time_cue.text,
            'special': self.special.text,
            'specialKey': self.special.key.value
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Draw':
        """Rebuild a draw from its dict form, resolving entries against the lexicon.

        Unknown time cues are accepted as single-tense cues so that drawings
        produced by other clients can still be scored.
        """
        from core.lexicon import find_tense, find_time_cue, find_special

        tense = find_tense(data['tenseKey'])
        time_cue = find_time_cue(data['timeCue'])
        if time_cue is None:
            time_cue = TimeCue(data['timeCue'], frozenset([tense.key]))
        special = find_special(data['specialKey'])
        return cls(
            subject=data['subject'],
            verb=Verb.from_display(data['verb']),
            tense=tense,
            time_cue=time_cue,
            special=special
        )


@dataclass
class ScoreResult:
    """Normalized scoring result shared by the heuristic and AI paths."""
    score: float
    max: int = HEURISTIC_MAX_SCORE
    notes: list = field(default_factory=list)
    corrected: Optional[str] = None
    source: str = 'heuristic'

    def to_dict(self) -> dict:
        return {
            'score': self.score,
            'max': self.max,
            'notes': list(self.notes),
            'corrected': self.corrected,
            'source': self.source
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ScoreResult':
        return cls(
            score=data['score'],
            max=data.get('max', HEURISTIC_MAX_SCORE),
            notes=list(data.get('notes', [])),
            corrected=data.get('corrected'),
            source=data.get('source', 'heuristic')
        )


@dataclass
class AIJudgement:
    """Structured verdict returned by an external scorer."""
    total_score: float
    breakdown: list
    explanation: str = ''
    corrected_version: Optional[str] = None

    def to_score_result(self, source: str) -> ScoreResult:
        return ScoreResult(
            score=self.total_score,
            max=AI_MAX_SCORE,
            notes=[*self.breakdown, '', self.explanation],
            corrected=self.corrected_version,
            source=source
        )


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: str
    draw: Draw
    sentence: str
    result: ScoreResult

    def to_dict(self) -> dict:
        return {
            'ts': self.timestamp,
            'draw': self.draw.to_dict(),
            'sentence': self.sentence,
            'result': self.result.to_dict()
        }
