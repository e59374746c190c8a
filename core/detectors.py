"""Heuristic detectors for special conditions.

Every detector is a pure predicate over a raw player sentence. Matching is
case-insensitive and works on word tokens, so 'no' matches in 'Ayer no comí'
but not inside 'nombre'. These are light checks for quick feedback, not a
parser: several of them accept false positives on purpose.
"""

from .lexicon import TIME_EXPRESSIONS, PLACE_NOUNS
from .utils import normalize_sentence, tokenize, contains_phrase, count_phrases, followed_by

REFLEXIVE_PRONOUNS = {'me', 'te', 'se', 'nos'}
# Stems of reflexive-prone verbs (bañar, lavar, levantar, llamar, sentar, sentir,
# vestir, duchar, acostar, acordar, quedar), including stem-changing forms
REFLEXIVE_STEMS = (
    'bañ', 'lav', 'levant', 'llam', 'sent', 'sient', 'vest', 'vist',
    'duch', 'acost', 'acuest', 'acord', 'acuerd', 'qued',
)
ENCLITIC_HOSTS = ('ar', 'er', 'ir', 'ando', 'ándo', 'iendo', 'iéndo')

# Modal and semi-modal verbs that commonly chain into an infinitive
MODAL_VERBS = {
    'ir', 'voy', 'vas', 'va', 'vamos', 'van',
    'poder', 'puedo', 'puedes', 'puede', 'podemos', 'pueden',
    'querer', 'quiero', 'quieres', 'quiere', 'queremos', 'quieren',
    'tener', 'tengo', 'tienes', 'tiene', 'tenemos', 'tienen',
    'necesitar', 'necesito', 'necesitas', 'necesita', 'necesitamos', 'necesitan',
    'deber', 'debo', 'debes', 'debe', 'debemos', 'deben',
    'saber', 'sé', 'sabes', 'sabe', 'sabemos', 'saben',
}
CHAIN_WINDOW = 3
INFINITIVE_ENDINGS = ('ar', 'er', 'ir')
# Common words that look like infinitives
NON_INFINITIVES = {
    'ayer', 'mujer', 'lugar', 'hogar', 'mar', 'bar', 'par',
    'taller', 'alquiler', 'cualquier',
}

TENER_FORMS = {'tengo', 'tienes', 'tiene', 'tenemos', 'tienen'}
PLURAL_PRONOUNS = {'nosotros', 'ustedes', 'ellos', 'ellas'}
PLURAL_ARTICLES = {'los', 'las'}
DIRECT_OBJECT_PRONOUNS = {'lo', 'la', 'los', 'las'}
INDIRECT_OBJECT_PRONOUNS = {'le', 'les'}

EXTRA_TIME_MIN_MATCHES = 2


def has_negation(sentence: str) -> bool:
    return 'no' in tokenize(sentence)


def is_question(sentence: str) -> bool:
    s = normalize_sentence(sentence)
    return s.startswith('¿') and s.endswith('?')


def has_connector(sentence: str) -> bool:
    tokens = tokenize(sentence)
    return 'porque' in tokens or 'pero' in tokens


def mentions_known_place(sentence: str) -> bool:
    tokens = tokenize(sentence)
    return any(contains_phrase(tokens, f'en {place}') for place in PLACE_NOUNS)


def has_place(sentence: str) -> bool:
    """'en' + a known place, or more loosely 'en' + any word."""
    if mentions_known_place(sentence):
        return True
    tokens = tokenize(sentence)
    return any(token == 'en' for token in tokens[:-1])


def count_time_references(sentence: str) -> int:
    return count_phrases(tokenize(sentence), TIME_EXPRESSIONS)


def has_extra_time(sentence: str) -> bool:
    """At least two separate time expressions in the sentence."""
    return count_time_references(sentence) >= EXTRA_TIME_MIN_MATCHES


def has_direct_object(sentence: str) -> bool:
    return any(token in DIRECT_OBJECT_PRONOUNS for token in tokenize(sentence))


def has_indirect_object(sentence: str) -> bool:
    return any(token in INDIRECT_OBJECT_PRONOUNS for token in tokenize(sentence))


def _is_reflexive_verb(token: str) -> bool:
    return token.startswith(REFLEXIVE_STEMS)


def _has_enclitic(token: str) -> bool:
    """Infinitive or gerund with an attached pronoun: 'bañarse', 'levantándome'."""
    for pronoun in REFLEXIVE_PRONOUNS:
        if token.endswith(pronoun) and token[:-len(pronoun)].endswith(ENCLITIC_HOSTS):
            return True
    return False


def has_reflexive(sentence: str) -> bool:
    """A reflexive pronoun followed later by a reflexive-prone verb, or the
    pronoun attached to the verb itself."""
    tokens = tokenize(sentence)
    for i, token in enumerate(tokens):
        if token in REFLEXIVE_PRONOUNS:
            if any(_is_reflexive_verb(t) for t in tokens[i + 1:]):
                return True
        elif _is_reflexive_verb(token) and _has_enclitic(token):
            return True
    return False


def has_also_or_neither(sentence: str) -> bool:
    tokens = tokenize(sentence)
    return 'también' in tokens or 'tampoco' in tokens


def _is_infinitive(token: str) -> bool:
    if token in NON_INFINITIVES:
        return False
    if token.endswith(INFINITIVE_ENDINGS):
        return True
    return _has_enclitic(token)


def has_chained_verbs(sentence: str) -> bool:
    """A modal verb with an infinitive shortly after it: 'quiero comer', 'voy a bañarme'."""
    tokens = tokenize(sentence)
    for i, token in enumerate(tokens):
        window = tokens[i + 1:i + 1 + CHAIN_WINDOW]
        if token in MODAL_VERBS and any(_is_infinitive(t) for t in window):
            return True
    return False


def has_obligation(sentence: str) -> bool:
    """'tener que': a conjugated tener directly followed by 'que'."""
    return followed_by(tokenize(sentence), TENER_FORMS, {'que'})


def has_plural(sentence: str) -> bool:
    tokens = tokenize(sentence)
    return any(token in PLURAL_PRONOUNS or token in PLURAL_ARTICLES for token in tokens)


def has_no_english(sentence: str) -> bool:
    # Not enforced: always satisfied
    return True
