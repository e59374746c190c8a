"""Coherent draw generation."""

import random

from .config import DIFFICULTIES, DEFAULT_DIFFICULTY
from .lexicon import SUBJECTS, VERBS, TENSES, TIME_CUES, SPECIALS
from .models import Draw, TimeCue


def weighted_sample(items: list[TimeCue], rng: random.Random) -> TimeCue:
    """Pick an item with probability proportional to its weight."""
    pool = [item for item in items for _ in range(item.weight or 1)]
    return rng.choice(pool)


def special_pool(difficulty: str) -> list:
    if difficulty == 'easy':
        return [s for s in SPECIALS if not s.difficulty_gate]
    return list(SPECIALS)


def generate_draw(difficulty: str = DEFAULT_DIFFICULTY, rng: random.Random = None) -> Draw:
    """Deal one coherent set of cards.

    The time cue is drawn only from cues compatible with the drawn tense, so
    every returned draw satisfies `draw.is_coherent()`. The verb is drawn
    independently of everything else.
    """
    if difficulty not in DIFFICULTIES:
        raise ValueError(f'Unknown difficulty {difficulty!r}, expected one of {DIFFICULTIES}')
    rng = rng or random.Random()

    subject = rng.choice(SUBJECTS)
    tense = rng.choice(TENSES)

    cues = [cue for cue in TIME_CUES if cue.allows(tense.key)]
    time_cue = weighted_sample(cues, rng)

    special = rng.choice(special_pool(difficulty))
    verb = rng.choice(VERBS)

    return Draw(subject=subject, verb=verb, tense=tense, time_cue=time_cue, special=special)
