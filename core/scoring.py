"""Offline heuristic scoring of a sentence against a draw."""

from . import detectors
from .config import (
    HEURISTIC_MAX_SCORE, CUE_POINTS, TENSE_POINTS, SPECIAL_POINTS, SUBJECT_POINTS,
    IRREGULAR_BONUS_POINTS, FLUENCY_POINTS, FLUENCY_MIN_WORDS
)
from .errors import LexiconError
from .models import Draw, ScoreResult, SpecialKey
from .tenses import check_tense
from .utils import normalize_sentence, tokenize, contains_phrase, count_words

FLUENCY_PUNCTUATION = '.!?¿¡'

SPECIAL_DETECTORS = {
    SpecialKey.NEGATION: detectors.has_negation,
    SpecialKey.QUESTION: detectors.is_question,
    SpecialKey.CONNECTOR: detectors.has_connector,
    SpecialKey.PLACE: detectors.has_place,
    SpecialKey.EXTRA_TIME: detectors.has_extra_time,
    SpecialKey.DIRECT_OBJECT: detectors.has_direct_object,
    SpecialKey.INDIRECT_OBJECT: detectors.has_indirect_object,
    SpecialKey.REFLEXIVE: detectors.has_reflexive,
    SpecialKey.PLURAL: detectors.has_plural,
    SpecialKey.ALSO_NEITHER: detectors.has_also_or_neither,
    SpecialKey.CHAINED_VERBS: detectors.has_chained_verbs,
    SpecialKey.OBLIGATION: detectors.has_obligation,
    SpecialKey.NO_ENGLISH: detectors.has_no_english,
}


def check_special_dispatch() -> None:
    """Fail fast if a special condition key has no detector."""
    missing = [key.value for key in SpecialKey if key not in SPECIAL_DETECTORS]
    if missing:
        raise LexiconError(f'No detector for special condition keys: {missing}')


def check_special(draw: Draw, sentence: str) -> bool:
    return SPECIAL_DETECTORS[draw.special.key](sentence)


def is_fluent(sentence: str) -> bool:
    """Length and punctuation as a simple fluency proxy."""
    return (count_words(sentence) >= FLUENCY_MIN_WORDS
            and any(ch in sentence for ch in FLUENCY_PUNCTUATION))


def score_sentence(sentence: str, draw: Draw) -> ScoreResult:
    """Score a sentence with the local rubric.

    Rubric: time cue (1), tense (2), special condition (2), subject (1),
    irregular verb bonus when the tense is right (1), fluency (1). The ceiling
    is always HEURISTIC_MAX_SCORE. Notes explain the first four checks when
    they fail; the two bonuses never add notes.
    """
    sent = normalize_sentence(sentence)
    tokens = tokenize(sent)
    notes = []
    score = 0

    if contains_phrase(tokens, draw.time_cue.text):
        score += CUE_POINTS
    else:
        notes.append(f'Añade la señal de tiempo: “{draw.time_cue.text}”.')

    tense_ok = check_tense(draw.tense.key, sent)
    if tense_ok:
        score += TENSE_POINTS
    else:
        notes.append(f'La forma verbal no coincide con el tiempo: {draw.tense.name}.')

    if check_special(draw, sent):
        score += SPECIAL_POINTS
    else:
        notes.append(f'Falta la condición especial: “{draw.special.text}”.')

    # Soft check: presence only, not agreement with the verb
    if draw.subject.lower() in tokens:
        score += SUBJECT_POINTS
    else:
        notes.append(f'Incluye o infiere el sujeto: “{draw.subject}”.')

    if draw.verb.irregular and tense_ok:
        score += IRREGULAR_BONUS_POINTS

    if is_fluent(sent):
        score += FLUENCY_POINTS

    return ScoreResult(score=score, max=HEURISTIC_MAX_SCORE, notes=notes, source='heuristic')
