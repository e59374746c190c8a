"""Static reference data for draws: subjects, verbs, tenses, time cues and specials."""

from .errors import LexiconError
from .models import (
    Verb, Tense, TimeCue, SpecialCondition, TenseKey, SpecialKey
)

PRESENTE = TenseKey.PRESENTE
PRETERITO = TenseKey.PRETERITO
FUTURO = TenseKey.FUTURO
IR_A = TenseKey.IR_A

SUBJECTS = ['yo', 'tú', 'él', 'ella', 'usted', 'nosotros', 'ustedes', 'ellos', 'ellas']

VERBS = [
    Verb('hablar'), Verb('comer'), Verb('vivir'), Verb('trabajar'), Verb('estudiar'),
    Verb('leer'), Verb('escribir'), Verb('correr'), Verb('abrir'), Verb('beber'),
    Verb('comprar'), Verb('vender'),
    Verb('venir', irregular=True), Verb('tener', irregular=True), Verb('poder', irregular=True),
    Verb('poner', irregular=True), Verb('hacer', irregular=True), Verb('decir', irregular=True),
    Verb('ir', irregular=True), Verb('ser', irregular=True), Verb('estar', irregular=True),
]

TENSES = [
    Tense(PRESENTE, 'Presente'),
    Tense(PRETERITO, 'Pretérito'),
    Tense(FUTURO, 'Futuro (simple)'),
    Tense(IR_A, 'Ir a + infinitivo'),
]


def _cue(text: str, allowed: list, weight: int = 1) -> TimeCue:
    return TimeCue(text, frozenset(allowed), weight)


# Cues are tagged with the tenses they naturally go with
TIME_CUES = [
    _cue('hoy', [PRESENTE, PRETERITO], 2),
    _cue('ahora', [PRESENTE], 2),
    _cue('siempre', [PRESENTE]),
    _cue('a veces', [PRESENTE]),
    _cue('ayer', [PRETERITO], 2),
    _cue('anoche', [PRETERITO]),
    _cue('el lunes pasado', [PRETERITO]),
    _cue('el año pasado', [PRETERITO]),
    _cue('hace ___ días', [PRETERITO]),
    _cue('de repente', [PRETERITO]),
    _cue('ya', [PRETERITO, PRESENTE]),
    _cue('todavía no', [PRESENTE]),
    _cue('mañana', [FUTURO, IR_A], 2),
    _cue('pasado mañana', [FUTURO, IR_A]),
    _cue('esta noche', [FUTURO, IR_A, PRESENTE]),
    _cue('el viernes que viene', [FUTURO, IR_A]),
    _cue('la semana que viene', [FUTURO, IR_A]),
    _cue('dentro de ___ meses', [FUTURO, IR_A]),
    _cue('pronto', [FUTURO, IR_A]),
    _cue('luego', [FUTURO, IR_A, PRESENTE]),
    _cue('más tarde', [FUTURO, IR_A]),
]

SPECIALS = [
    SpecialCondition('hazlo en negativo', SpecialKey.NEGATION),
    SpecialCondition('haz una pregunta', SpecialKey.QUESTION),
    SpecialCondition('usa ‘porque’ o ‘pero’', SpecialKey.CONNECTOR),
    SpecialCondition('añade un lugar', SpecialKey.PLACE),
    SpecialCondition('añade un tiempo extra', SpecialKey.EXTRA_TIME),
    SpecialCondition('usa un objeto directo (lo/la/los/las)', SpecialKey.DIRECT_OBJECT),
    SpecialCondition('usa un objeto indirecto (le/les)', SpecialKey.INDIRECT_OBJECT),
    SpecialCondition('usa un reflexivo si aplica', SpecialKey.REFLEXIVE, difficulty_gate=True),
    SpecialCondition('cambia al plural', SpecialKey.PLURAL, difficulty_gate=True),
    SpecialCondition('incluye ‘también’ o ‘tampoco’', SpecialKey.ALSO_NEITHER),
    SpecialCondition('encadena dos verbos', SpecialKey.CHAINED_VERBS),
    SpecialCondition('usa ‘tener que’ + inf', SpecialKey.OBLIGATION),
    SpecialCondition('sin decir ninguna palabra en inglés', SpecialKey.NO_ENGLISH),
]

# Expressions counted when a sentence must carry a second time reference.
# Placeholder cues contribute only their fixed lead-in ('hace', 'dentro de').
TIME_EXPRESSIONS = [
    'hoy', 'mañana', 'ayer', 'esta noche', 'esta tarde', 'esta mañana',
    'pasado mañana', 'la semana que viene', 'el año pasado', 'el lunes pasado',
    'dentro de', 'hace', 'luego', 'pronto',
    'ahora', 'siempre', 'a veces', 'anoche', 'de repente', 'ya', 'todavía no',
    'el viernes que viene', 'más tarde',
]

PLACE_NOUNS = [
    'casa', 'la casa', 'la escuela', 'el trabajo', 'la oficina', 'el parque', 'la ciudad'
]


def find_tense(key: str) -> Tense:
    """Look up a tense by key. Raises LexiconError for unknown keys."""
    for tense in TENSES:
        if tense.key.value == key:
            return tense
    raise LexiconError(f'Unknown tense key: {key!r}')


def find_time_cue(text: str) -> TimeCue | None:
    for cue in TIME_CUES:
        if cue.text == text:
            return cue
    return None


def find_special(key: str) -> SpecialCondition:
    """Look up a special condition by key. Raises LexiconError for unknown keys."""
    for special in SPECIALS:
        if special.key.value == key:
            return special
    raise LexiconError(f'Unknown special condition key: {key!r}')


def validate_lexicon(subjects: list = None, verbs: list = None, tenses: list = None,
                     time_cues: list = None, specials: list = None) -> None:
    """Check the integrity rules draw generation relies on.

    Every tense needs at least one compatible time cue, every cue needs a
    non-empty tense set and a positive weight, and every pool must be
    non-empty even after the easy-mode gate is applied.
    """
    subjects = SUBJECTS if subjects is None else subjects
    verbs = VERBS if verbs is None else verbs
    tenses = TENSES if tenses is None else tenses
    time_cues = TIME_CUES if time_cues is None else time_cues
    specials = SPECIALS if specials is None else specials

    if not subjects:
        raise LexiconError('No subjects defined')
    if not verbs:
        raise LexiconError('No verbs defined')
    if not tenses:
        raise LexiconError('No tenses defined')

    for cue in time_cues:
        if not cue.allowed_tenses:
            raise LexiconError(f'Time cue {cue.text!r} allows no tense')
        if cue.weight < 1:
            raise LexiconError(f'Time cue {cue.text!r} has weight {cue.weight}, expected >= 1')

    for tense in tenses:
        if not any(cue.allows(tense.key) for cue in time_cues):
            raise LexiconError(f'Tense {tense.key.value!r} has no compatible time cue')

    if not [s for s in specials if not s.difficulty_gate]:
        raise LexiconError('No special conditions available on easy difficulty')
