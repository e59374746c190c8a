"""Tense detection heuristics (loose, fast).

Presente has no positive pattern: present-tense forms are too varied to list,
so a sentence counts as present when no ir_a, futuro or preterito marker is
found. An infinitive-only fragment therefore passes as present.
"""

from .models import TenseKey
from .utils import tokenize, followed_by

IR_FORMS = {'voy', 'vas', 'va', 'vamos', 'van'}

FUTURE_ENDINGS = ('é', 'ás', 'á', 'emos', 'án')
IRREGULAR_FUTURE = {
    'iré', 'seré', 'haré', 'diré', 'tendré', 'vendré', 'pondré', 'podré', 'sabré', 'querré',
}

PRETERITE_ENDINGS = ('é', 'aste', 'ó', 'amos', 'aron', 'í', 'iste', 'ió', 'imos', 'ieron')
IRREGULAR_PRETERITE = {
    'fui', 'fuiste', 'fue', 'fuimos', 'fueron', 'hice', 'hizo', 'tuve', 'estuve', 'pude',
    'puse', 'supe', 'quise', 'vine', 'dije', 'traje', 'vi', 'dio',
}

# Common words whose stressed ending is not a verb ending
STRESSED_NON_VERBS = {
    'qué', 'más', 'aquí', 'allí', 'ahí', 'allá', 'acá', 'sí', 'café', 'mamá', 'papá',
    'jamás', 'además', 'quizá', 'quizás', 'está', 'estás', 'están', 'dé', 'también',
    'así', 'mí', 'según', 'sofá', 'detrás', 'atrás', 'después',
}


def _ends_with(tokens: list[str], endings: tuple) -> bool:
    for token in tokens:
        if token in STRESSED_NON_VERBS:
            continue
        for ending in endings:
            if token.endswith(ending) and len(token) > len(ending):
                return True
    return False


def is_ir_a(sentence: str) -> bool:
    return followed_by(tokenize(sentence), IR_FORMS, {'a'})


def is_futuro(sentence: str) -> bool:
    tokens = tokenize(sentence)
    return _ends_with(tokens, FUTURE_ENDINGS) or any(t in IRREGULAR_FUTURE for t in tokens)


def is_preterito(sentence: str) -> bool:
    tokens = tokenize(sentence)
    return _ends_with(tokens, PRETERITE_ENDINGS) or any(t in IRREGULAR_PRETERITE for t in tokens)


def is_presente(sentence: str) -> bool:
    # Checked in priority order ir_a, futuro, preterito
    return not (is_ir_a(sentence) or is_futuro(sentence) or is_preterito(sentence))


TENSE_CHECKS = {
    TenseKey.IR_A: is_ir_a,
    TenseKey.FUTURO: is_futuro,
    TenseKey.PRETERITO: is_preterito,
    TenseKey.PRESENTE: is_presente,
}


def check_tense(tense_key: TenseKey, sentence: str) -> bool:
    check = TENSE_CHECKS.get(tense_key)
    return check(sentence) if check else False
