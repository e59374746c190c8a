"""Unit tests for tiempo core module."""

import random
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

from core import detectors
from core.config import HEURISTIC_MAX_SCORE, AI_MAX_SCORE, HISTORY_LIMIT, DIFFICULTIES
from core.draw import generate_draw, weighted_sample, special_pool
from core.errors import LexiconError, ExternalScorerError
from core.interfaces import ExternalScorer
from core.judge import build_judge_prompt, build_scoring_prompt, parse_judgement, NO_SENTENCE
from core.lexicon import (
    SUBJECTS, VERBS, TENSES, TIME_CUES, SPECIALS,
    find_tense, find_time_cue, find_special, validate_lexicon
)
from core.models import Draw, Verb, TimeCue, TenseKey, SpecialKey, AIJudgement, ScoreResult
from core.scoring import score_sentence, SPECIAL_DETECTORS, check_special_dispatch
from core.session import Session, AttemptHistory, score_with_fallback
from core.tenses import is_ir_a, is_futuro, is_preterito, is_presente, check_tense
from core.utils import tokenize, count_words, contains_phrase, count_phrases


def make_draw(subject='yo', verb='hablar', tense='presente', cue='ahora', special='q') -> Draw:
    return Draw(
        subject=subject,
        verb=Verb.from_display(verb),
        tense=find_tense(tense),
        time_cue=find_time_cue(cue),
        special=find_special(special)
    )


# ============================================================================
# Mock Implementations
# ============================================================================

class FailingScorer(ExternalScorer):
    """External scorer that always fails."""

    name = 'cloud'

    def __init__(self, exc: Exception = None):
        self.exc = exc or RuntimeError('network unreachable')
        self.calls = 0

    def score(self, sentence: str, draw: Draw) -> AIJudgement:
        self.calls += 1
        raise self.exc


class FixedScorer(ExternalScorer):
    """External scorer that returns a fixed judgement."""

    name = 'ollama'

    def __init__(self, judgement: AIJudgement):
        self.judgement = judgement

    def score(self, sentence: str, draw: Draw) -> AIJudgement:
        return self.judgement


# ============================================================================
# Test Cases
# ============================================================================

class TestTokenizer(unittest.TestCase):
    """Tests for tokenizing helpers."""

    def test_lowercases_and_strips_punctuation(self):
        self.assertEqual(tokenize('¿Hablo AHORA?'), ['hablo', 'ahora'])

    def test_keeps_accented_letters(self):
        self.assertEqual(tokenize('Mañana también comí.'), ['mañana', 'también', 'comí'])

    def test_decomposed_accents_are_normalized(self):
        self.assertEqual(tokenize('come\u0301'), ['com\u00e9'])

    def test_empty_string(self):
        self.assertEqual(tokenize(''), [])

    def test_count_words_counts_whitespace_chunks(self):
        self.assertEqual(count_words('Ayer no comí nada.'), 4)
        self.assertEqual(count_words('Ayer no comí nada .'), 5)
        self.assertEqual(count_words('   '), 0)

    def test_contains_phrase_is_boundary_aware(self):
        self.assertFalse(contains_phrase(tokenize('Voy a la playa'), 'ya'))
        self.assertTrue(contains_phrase(tokenize('Ya comí'), 'ya'))

    def test_contains_phrase_placeholder(self):
        self.assertTrue(contains_phrase(tokenize('Llegué hace tres días.'), 'hace ___ días'))
        self.assertFalse(contains_phrase(tokenize('Llegué hace días.'), 'hace ___ días'))

    def test_count_phrases_prefers_longest(self):
        tokens = tokenize('Pasado mañana')
        self.assertEqual(count_phrases(tokens, ['mañana', 'pasado mañana']), 1)


class TestLexicon(unittest.TestCase):
    """Tests for lexicon data and validation."""

    def test_lexicon_is_valid(self):
        validate_lexicon()

    def test_every_tense_has_a_cue(self):
        for tense in TENSES:
            self.assertTrue(any(cue.allows(tense.key) for cue in TIME_CUES), tense.key)

    def test_irregular_verbs_are_flagged(self):
        irregular = {v.infinitive for v in VERBS if v.irregular}
        self.assertEqual(irregular, {'venir', 'tener', 'poder', 'poner', 'hacer', 'decir', 'ir', 'ser', 'estar'})

    def test_gated_specials(self):
        gated = {s.key for s in SPECIALS if s.difficulty_gate}
        self.assertEqual(gated, {SpecialKey.REFLEXIVE, SpecialKey.PLURAL})

    def test_tense_without_cue_is_rejected(self):
        cues = [c for c in TIME_CUES if not c.allows(TenseKey.IR_A)]
        with self.assertRaises(LexiconError):
            validate_lexicon(time_cues=cues)

    def test_cue_without_tenses_is_rejected(self):
        cues = TIME_CUES + [TimeCue('nunca', frozenset())]
        with self.assertRaises(LexiconError):
            validate_lexicon(time_cues=cues)

    def test_cue_with_zero_weight_is_rejected(self):
        cues = TIME_CUES + [TimeCue('nunca', frozenset([TenseKey.PRESENTE]), 0)]
        with self.assertRaises(LexiconError):
            validate_lexicon(time_cues=cues)

    def test_empty_easy_pool_is_rejected(self):
        specials = [s for s in SPECIALS if s.difficulty_gate]
        with self.assertRaises(LexiconError):
            validate_lexicon(specials=specials)

    def test_unknown_keys(self):
        with self.assertRaises(LexiconError):
            find_tense('pluscuamperfecto')
        with self.assertRaises(LexiconError):
            find_special('nope')
        self.assertIsNone(find_time_cue('nunca jamás'))


class TestModels(unittest.TestCase):
    """Tests for domain models."""

    def test_verb_display(self):
        self.assertEqual(Verb('tener', irregular=True).display, 'tener★')
        self.assertEqual(Verb('hablar').display, 'hablar')

    def test_verb_from_display(self):
        self.assertEqual(Verb.from_display('tener★'), Verb('tener', irregular=True))
        self.assertEqual(Verb.from_display('hablar'), Verb('hablar'))

    def test_draw_to_dict(self):
        data = make_draw().to_dict()
        self.assertEqual(data, {
            'subject': 'yo',
            'verb': 'hablar',
            'tense': 'Presente',
            'tenseKey': 'presente',
            'timeCue': 'ahora',
            'special': 'haz una pregunta',
            'specialKey': 'q'
        })

    def test_draw_from_dict(self):
        draw = make_draw(verb='tener★', tense='futuro', cue='mañana', special='neg')
        self.assertEqual(Draw.from_dict(draw.to_dict()), draw)

    def test_draw_from_dict_unknown_cue(self):
        data = make_draw().to_dict()
        data['timeCue'] = 'al amanecer'
        draw = Draw.from_dict(data)
        self.assertEqual(draw.time_cue.text, 'al amanecer')
        self.assertTrue(draw.is_coherent())

    def test_draw_is_immutable(self):
        draw = make_draw()
        with self.assertRaises(AttributeError):
            draw.subject = 'tú'

    def test_ai_judgement_normalization(self):
        judgement = AIJudgement(7, ['a', 'b', 'c', 'd'], 'Bien.', 'Hablo ahora.')
        result = judgement.to_score_result('cloud')
        self.assertEqual(result.max, AI_MAX_SCORE)
        self.assertEqual(result.notes, ['a', 'b', 'c', 'd', '', 'Bien.'])
        self.assertEqual(result.corrected, 'Hablo ahora.')
        self.assertEqual(result.source, 'cloud')

    def test_score_result_from_dict(self):
        result = ScoreResult.from_dict({'score': 5, 'notes': ['x']})
        self.assertEqual(result.max, HEURISTIC_MAX_SCORE)
        self.assertEqual(result.source, 'heuristic')
        self.assertIsNone(result.corrected)


class TestDrawGenerator(unittest.TestCase):
    """Tests for generate_draw."""

    def test_coherence_for_all_difficulties_and_seeds(self):
        for difficulty in DIFFICULTIES:
            for seed in range(300):
                draw = generate_draw(difficulty, random.Random(seed))
                self.assertIn(draw.tense.key, draw.time_cue.allowed_tenses)
                self.assertTrue(draw.is_coherent())

    def test_easy_mode_excludes_gated_specials(self):
        rng = random.Random(42)
        for _ in range(1000):
            draw = generate_draw('easy', rng)
            self.assertNotIn(draw.special.key, {SpecialKey.REFLEXIVE, SpecialKey.PLURAL})

    def test_standard_mode_can_draw_gated_specials(self):
        rng = random.Random(7)
        keys = {generate_draw('standard', rng).special.key for _ in range(1000)}
        self.assertIn(SpecialKey.REFLEXIVE, keys)
        self.assertIn(SpecialKey.PLURAL, keys)

    def test_special_pool(self):
        self.assertEqual(len(special_pool('easy')), len(SPECIALS) - 2)
        self.assertEqual(len(special_pool('wild')), len(SPECIALS))

    def test_fields_come_from_lexicon(self):
        rng = random.Random(1)
        for _ in range(200):
            draw = generate_draw('wild', rng)
            self.assertIn(draw.subject, SUBJECTS)
            self.assertIn(draw.verb, VERBS)
            self.assertIn(draw.tense, TENSES)
            self.assertIn(draw.time_cue, TIME_CUES)
            self.assertIn(draw.special, SPECIALS)

    def test_verbs_are_independent_of_tense(self):
        rng = random.Random(3)
        verbs = {generate_draw('standard', rng).verb for _ in range(2000)}
        self.assertEqual(verbs, set(VERBS))

    def test_weighted_sample_expands_by_weight(self):
        heavy = TimeCue('hoy', frozenset([TenseKey.PRESENTE]), 2)
        light = TimeCue('siempre', frozenset([TenseKey.PRESENTE]), 1)
        rng = MagicMock()
        rng.choice.side_effect = lambda pool: pool[0]
        weighted_sample([heavy, light], rng)
        pool = rng.choice.call_args[0][0]
        self.assertEqual(pool, [heavy, heavy, light])

    def test_same_seed_same_draw(self):
        self.assertEqual(generate_draw('standard', random.Random(9)),
                         generate_draw('standard', random.Random(9)))

    def test_unknown_difficulty(self):
        with self.assertRaises(ValueError):
            generate_draw('impossible')


class TestDetectors(unittest.TestCase):
    """Tests for special-condition detectors."""

    def test_negation(self):
        self.assertTrue(detectors.has_negation('Ayer no comí nada.'))
        self.assertTrue(detectors.has_negation('No sé.'))
        self.assertFalse(detectors.has_negation('Mi nombre es Ana.'))

    def test_question(self):
        self.assertTrue(detectors.is_question('  ¿Hablas español?  '))
        self.assertFalse(detectors.is_question('Hablas español?'))
        self.assertFalse(detectors.is_question('¿Hablas español'))

    def test_connector(self):
        self.assertTrue(detectors.has_connector('Como porque tengo hambre.'))
        self.assertTrue(detectors.has_connector('Quiero ir, pero no puedo.'))
        self.assertFalse(detectors.has_connector('Es una perola.'))

    def test_place(self):
        self.assertTrue(detectors.mentions_known_place('Estudio en la escuela.'))
        self.assertTrue(detectors.has_place('Vivo en Madrid.'))
        self.assertFalse(detectors.has_place('Vivo bien.'))
        self.assertFalse(detectors.has_place('Pienso en'))
        self.assertFalse(detectors.has_place('Entiendo todo.'))

    def test_extra_time(self):
        self.assertTrue(detectors.has_extra_time('Hoy trabajo y mañana descanso.'))
        self.assertTrue(detectors.has_extra_time('Ahora como y luego duermo.'))
        self.assertFalse(detectors.has_extra_time('Mañana voy a comer.'))
        self.assertFalse(detectors.has_extra_time('Pasado mañana voy a comer.'))
        self.assertEqual(detectors.count_time_references('Hoy, mañana y ayer.'), 3)

    def test_direct_object(self):
        self.assertTrue(detectors.has_direct_object('Lo compro.'))
        self.assertTrue(detectors.has_direct_object('Las veo.'))
        self.assertFalse(detectors.has_direct_object('Veo un lobo.'))

    def test_indirect_object(self):
        self.assertTrue(detectors.has_indirect_object('Le doy el libro.'))
        self.assertTrue(detectors.has_indirect_object('Les escribo.'))
        self.assertFalse(detectors.has_indirect_object('Leo un libro.'))

    def test_reflexive(self):
        self.assertTrue(detectors.has_reflexive('Me levanto temprano.'))
        self.assertTrue(detectors.has_reflexive('Se lava las manos.'))
        self.assertTrue(detectors.has_reflexive('Nos acostamos tarde.'))
        self.assertTrue(detectors.has_reflexive('Voy a bañarme.'))
        self.assertTrue(detectors.has_reflexive('Me quiero levantar temprano.'))
        self.assertFalse(detectors.has_reflexive('Me gusta el café.'))
        self.assertFalse(detectors.has_reflexive('Levanto la mesa.'))

    def test_reflexive_pronoun_must_come_first(self):
        self.assertFalse(detectors.has_reflexive('Llamo a mi madre y me voy.'))

    def test_also_neither(self):
        self.assertTrue(detectors.has_also_or_neither('Yo también.'))
        self.assertTrue(detectors.has_also_or_neither('Tampoco como carne.'))
        self.assertFalse(detectors.has_also_or_neither('Tan bien.'))

    def test_chained_verbs(self):
        self.assertTrue(detectors.has_chained_verbs('Quiero comer pizza.'))
        self.assertTrue(detectors.has_chained_verbs('Necesito estudiar.'))
        self.assertTrue(detectors.has_chained_verbs('Voy a correr.'))
        self.assertFalse(detectors.has_chained_verbs('Puedo.'))
        self.assertFalse(detectors.has_chained_verbs('Como pan.'))

    def test_chained_verbs_needs_infinitive(self):
        self.assertTrue(detectors.has_chained_verbs('Puede ser.'))
        self.assertTrue(detectors.has_chained_verbs('Vamos a levantarnos.'))
        self.assertFalse(detectors.has_chained_verbs('Tengo hambre.'))
        self.assertFalse(detectors.has_chained_verbs('Sé la respuesta.'))
        self.assertFalse(detectors.has_chained_verbs('Ella va a casa.'))
        self.assertFalse(detectors.has_chained_verbs('Quiero un lugar tranquilo.'))

    def test_chained_verbs_window(self):
        self.assertTrue(detectors.has_chained_verbs('Debo siempre estudiar.'))
        self.assertTrue(detectors.has_chained_verbs('Quiero ir al cine.'))
        self.assertFalse(detectors.has_chained_verbs('Quiero pan con mucho queso y comer.'))

    def test_obligation(self):
        self.assertTrue(detectors.has_obligation('Tengo que estudiar.'))
        self.assertTrue(detectors.has_obligation('Ellos tienen que trabajar.'))
        self.assertFalse(detectors.has_obligation('Tengo hambre que no termina.'))
        self.assertFalse(detectors.has_obligation('Tener que estudiar.'))

    def test_plural(self):
        self.assertTrue(detectors.has_plural('Nosotros comemos.'))
        self.assertTrue(detectors.has_plural('Compro las manzanas.'))
        self.assertFalse(detectors.has_plural('Yo como.'))

    def test_no_english_is_not_enforced(self):
        self.assertTrue(detectors.has_no_english('I like pizza.'))
        self.assertTrue(detectors.has_no_english(''))

    def test_case_insensitive(self):
        self.assertTrue(detectors.has_negation('NO QUIERO.'))
        self.assertTrue(detectors.has_also_or_neither('TAMBIÉN'))


class TestTenseChecker(unittest.TestCase):
    """Tests for tense heuristics."""

    def test_ir_a(self):
        self.assertTrue(is_ir_a('Voy a comer.'))
        self.assertTrue(is_ir_a('Ellos van a estudiar.'))
        self.assertFalse(is_ir_a('Voy al cine.'))
        self.assertFalse(is_ir_a('Como a las tres.'))

    def test_futuro(self):
        self.assertTrue(is_futuro('Comeré mañana.'))
        self.assertTrue(is_futuro('Hablarán pronto.'))
        self.assertTrue(is_futuro('Iré al parque.'))
        self.assertTrue(is_futuro('Tendré tiempo.'))
        self.assertFalse(is_futuro('Como pan.'))

    def test_preterito(self):
        self.assertTrue(is_preterito('Comí pan.'))
        self.assertTrue(is_preterito('Hablaste mucho.'))
        self.assertTrue(is_preterito('Ellos trabajaron.'))
        self.assertTrue(is_preterito('Fui al parque.'))
        self.assertTrue(is_preterito('Ayer vi una película.'))
        self.assertFalse(is_preterito('Como pan.'))

    def test_presente_by_elimination(self):
        self.assertTrue(is_presente('Como pan ahora.'))
        self.assertTrue(is_presente('Él está aquí.'))
        self.assertTrue(is_presente('¿Qué comes?'))
        self.assertFalse(is_presente('Voy a comer.'))
        self.assertFalse(is_presente('Comí pan.'))
        self.assertFalse(is_presente('Comeré pan.'))

    def test_stressed_non_verbs_are_ignored(self):
        self.assertTrue(is_presente('Así es la vida.'))
        self.assertTrue(is_presente('Es para mí.'))
        self.assertTrue(is_presente('Como después.'))
        self.assertFalse(is_preterito('Así es la vida.'))

    def test_infinitive_fragment_passes_as_presente(self):
        # Known limitation of elimination
        self.assertTrue(is_presente('Comer pan.'))

    def test_check_tense_dispatch(self):
        self.assertTrue(check_tense(TenseKey.IR_A, 'Vamos a bailar.'))
        self.assertTrue(check_tense('preterito', 'Comí.'))
        self.assertFalse(check_tense(TenseKey.FUTURO, 'Comí.'))


class TestHeuristicScorer(unittest.TestCase):
    """Tests for score_sentence."""

    def test_scenario_question_in_present(self):
        draw = make_draw(subject='yo', verb='hablar', tense='presente', cue='ahora', special='q')
        result = score_sentence('¿Hablo ahora?', draw)
        self.assertEqual(result.score, 5)
        self.assertEqual(result.max, 9)
        self.assertEqual(result.source, 'heuristic')
        self.assertEqual(result.notes, ['Incluye o infiere el sujeto: “yo”.'])

    def test_scenario_negative_preterite(self):
        draw = make_draw(verb='comer', tense='preterito', cue='ayer', special='neg')
        self.assertEqual(score_sentence('Ayer no comí nada.', draw).score, 5)
        self.assertEqual(score_sentence('Ayer no comí nada .', draw).score, 6)
        self.assertEqual(score_sentence('Ayer yo no comí nada.', draw).score, 7)

    def test_irregular_bonus_requires_tense(self):
        draw = make_draw(verb='tener★', tense='futuro', cue='mañana', special='neg')
        result = score_sentence('yo tengo', draw)
        self.assertEqual(result.score, 1)
        self.assertIn('La forma verbal no coincide con el tiempo: Futuro (simple).', result.notes)

    def test_irregular_bonus_granted(self):
        draw = make_draw(verb='tener★', tense='futuro', cue='mañana', special='neg')
        self.assertEqual(score_sentence('Mañana yo no tendré tiempo.', draw).score, 8)
        regular = make_draw(verb='hablar', tense='futuro', cue='mañana', special='neg')
        self.assertEqual(score_sentence('Mañana yo no tendré tiempo.', regular).score, 7)

    def test_stressed_adverb_keeps_presente(self):
        draw = make_draw(verb='ser★', tense='presente', cue='siempre', special='neg')
        result = score_sentence('Así yo no soy siempre.', draw)
        self.assertEqual(result.score, 8)
        self.assertEqual(result.notes, [])

    def test_notes_follow_check_order(self):
        draw = make_draw(tense='preterito', cue='ayer', special='neg')
        result = score_sentence('', draw)
        self.assertEqual(result.score, 0)
        self.assertEqual(result.notes, [
            'Añade la señal de tiempo: “ayer”.',
            'La forma verbal no coincide con el tiempo: Pretérito.',
            'Falta la condición especial: “hazlo en negativo”.',
            'Incluye o infiere el sujeto: “yo”.',
        ])

    def test_cue_is_case_insensitive(self):
        draw = make_draw(cue='esta noche', special='noeng')
        result = score_sentence('ESTA NOCHE como.', draw)
        self.assertNotIn('Añade la señal de tiempo: “esta noche”.', result.notes)

    def test_placeholder_cue(self):
        draw = make_draw(tense='preterito', cue='hace ___ días', special='noeng')
        result = score_sentence('Hace tres días comí pizza.', draw)
        self.assertEqual(result.score, 1 + 2 + 2 + 0 + 0 + 1)

    def test_extra_time_needs_two_expressions(self):
        draw = make_draw(tense='ir_a', cue='mañana', special='time2')
        single = score_sentence('Mañana voy a comer.', draw)
        self.assertIn('Falta la condición especial: “añade un tiempo extra”.', single.notes)
        double = score_sentence('Mañana voy a comer y luego voy a dormir.', draw)
        self.assertNotIn('Falta la condición especial: “añade un tiempo extra”.', double.notes)

    def test_subject_must_be_a_word(self):
        draw = make_draw(subject='él', special='noeng')
        self.assertIn('Incluye o infiere el sujeto: “él”.', score_sentence('Elefante ahora.', draw).notes)
        self.assertNotIn('Incluye o infiere el sujeto: “él”.', score_sentence('Él come ahora.', draw).notes)

    def test_fluency_needs_punctuation(self):
        draw = make_draw(subject='ellos', tense='presente', cue='siempre', special='plural')
        with_period = score_sentence('Ellos siempre comen mucho pan.', draw)
        without = score_sentence('Ellos siempre comen mucho pan', draw)
        self.assertEqual(with_period.score - without.score, 1)

    def test_bonuses_never_add_notes(self):
        draw = make_draw(verb='tener★', tense='preterito', cue='ayer', special='neg')
        result = score_sentence('Ayer yo no tuve tiempo', draw)
        self.assertEqual(result.notes, [])
        self.assertEqual(result.score, 7)

    def test_dispatch_is_exhaustive(self):
        check_special_dispatch()
        self.assertEqual(set(SPECIAL_DETECTORS), set(SpecialKey))

    def test_every_special_dispatches(self):
        for special in SPECIALS:
            draw = make_draw(special=special.key.value)
            result = score_sentence('Yo hablo ahora.', draw)
            self.assertIsInstance(result, ScoreResult)

    def test_score_is_bounded(self):
        sentences = [
            '', ' ', '¿?', 'yo', 'Mañana yo no tendré tiempo porque tengo que trabajar en casa.',
            '¡Ayer ellos no fueron al parque, pero hoy sí!', 'Nosotros siempre nos levantamos temprano.',
            'Hace dos días le di el libro y también lo leí.',
        ]
        rng = random.Random(11)
        for _ in range(200):
            draw = generate_draw(rng.choice(DIFFICULTIES), rng)
            for sentence in sentences:
                result = score_sentence(sentence, draw)
                self.assertEqual(result.max, HEURISTIC_MAX_SCORE)
                self.assertGreaterEqual(result.score, 0)
                self.assertLessEqual(result.score, result.max)

    def test_deterministic(self):
        draw = make_draw(tense='preterito', cue='ayer', special='neg')
        self.assertEqual(score_sentence('Ayer no comí.', draw), score_sentence('Ayer no comí.', draw))


class TestJudge(unittest.TestCase):
    """Tests for judge prompts and response parsing."""

    VALID = (
        '{"totalScore": 8, "conjugationScore": 4, "tenseTimeScore": 2, '
        '"specialConditionScore": 2, "naturalnessScore": 0, '
        '"correctedVersion": "Perfect!", "explanation": "Good use of the preterite."}'
    )

    def test_prompt_contains_draw_and_labels(self):
        draw = make_draw(verb='tener★')
        prompt = build_judge_prompt(draw, '¿Hablo ahora?')
        self.assertIn('Verb (infinitive): tener★', prompt)
        self.assertIn('Time cue: ahora', prompt)
        self.assertIn('conjugation accuracy (0–4)', prompt)
        self.assertIn('tense-time coherence (0–3)', prompt)
        self.assertIn('special condition (0–2)', prompt)
        self.assertIn('naturalness (0–1)', prompt)
        self.assertTrue(prompt.endswith('¿Hablo ahora?'))

    def test_prompt_without_sentence(self):
        self.assertTrue(build_judge_prompt(make_draw(), '').endswith(NO_SENTENCE))

    def test_scoring_prompt_asks_for_json(self):
        self.assertIn('"totalScore"', build_scoring_prompt(make_draw(), 'Hola.'))

    def test_parse_with_surrounding_text(self):
        judgement = parse_judgement(f'Sure! Here it is:\n```json\n{self.VALID}\n```', 'ollama')
        self.assertEqual(judgement.total_score, 8)
        self.assertEqual(judgement.breakdown, [
            'Conjugation accuracy: 4/4',
            'Tense-time coherence: 2/3',
            'Special condition: 2/2',
            'Naturalness: 0/1',
        ])
        self.assertEqual(judgement.corrected_version, 'Perfect!')
        self.assertEqual(judgement.explanation, 'Good use of the preterite.')

    def test_parse_without_json(self):
        with self.assertRaises(ExternalScorerError):
            parse_judgement('I cannot score this.')

    def test_parse_malformed_json(self):
        with self.assertRaises(ExternalScorerError):
            parse_judgement('{"totalScore": 8,}')

    def test_parse_missing_field(self):
        with self.assertRaises(ExternalScorerError):
            parse_judgement('{"totalScore": 8, "explanation": "ok"}')

    def test_parse_out_of_range(self):
        bad = self.VALID.replace('"totalScore": 8', '"totalScore": 12')
        with self.assertRaises(ExternalScorerError):
            parse_judgement(bad)


class TestAttemptHistory(unittest.TestCase):
    """Tests for the bounded attempt history."""

    def test_bound_and_order_after_sixty_attempts(self):
        session = Session(mode='offline', rng=random.Random(0))
        for i in range(1, 61):
            session.score_attempt(f'frase {i}')
        entries = session.history.entries()
        self.assertEqual(len(entries), HISTORY_LIMIT)
        self.assertEqual(entries[0].sentence, 'frase 60')
        self.assertEqual(entries[-1].sentence, 'frase 11')

    def test_entries_limit(self):
        history = AttemptHistory()
        session = Session(mode='offline')
        for i in range(5):
            history.record(session.score_attempt(f'frase {i}').entry)
        self.assertEqual([e.sentence for e in history.entries(2)], ['frase 4', 'frase 3'])
        self.assertEqual(history.latest().sentence, 'frase 4')

    def test_concurrent_records_keep_bound(self):
        session = Session(mode='offline')

        def work(n):
            for i in range(20):
                session.score_attempt(f'{n}-{i}')

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(8)))
        self.assertEqual(len(session.history), HISTORY_LIMIT)

    def test_entry_keeps_draw_of_its_round(self):
        session = Session(mode='offline', rng=random.Random(5))
        first = session.draw
        session.score_attempt('Hola.')
        session.new_draw()
        self.assertIs(session.history.latest().draw, first)

    def test_clear(self):
        history = AttemptHistory()
        history.clear()
        self.assertEqual(len(history), 0)
        self.assertIsNone(history.latest())


class TestScoringFallback(unittest.TestCase):
    """Tests for external scoring with heuristic fallback."""

    def test_offline_uses_heuristic(self):
        draw = make_draw()
        result, warning = score_with_fallback('¿Hablo ahora?', draw)
        self.assertEqual(result.score, 5)
        self.assertIsNone(warning)

    def test_failing_scorer_falls_back(self):
        scorer = FailingScorer()
        draw = make_draw()
        result, warning = score_with_fallback('¿Hablo ahora?', draw, scorer)
        self.assertIsNotNone(result)
        self.assertEqual(result.source, 'heuristic')
        self.assertEqual(result.max, HEURISTIC_MAX_SCORE)
        self.assertEqual(result.score, 5)
        self.assertIn('network unreachable', warning)
        self.assertEqual(scorer.calls, 1)

    def test_scorer_error_type_falls_back(self):
        scorer = FailingScorer(ExternalScorerError('bad JSON', 'cloud'))
        result, warning = score_with_fallback('Hola.', make_draw(), scorer)
        self.assertEqual(result.source, 'heuristic')
        self.assertIn('bad JSON', warning)

    def test_session_records_fallback_result(self):
        session = Session(mode='cloud', rng=random.Random(2))
        outcome = session.score_attempt('Hola.', FailingScorer())
        self.assertIsNotNone(outcome.warning)
        self.assertEqual(outcome.result.source, 'heuristic')
        self.assertEqual(session.history.latest().result.source, 'heuristic')

    def test_successful_scorer(self):
        judgement = AIJudgement(9, ['a', 'b', 'c', 'd'], 'Muy bien.', 'Perfect!')
        session = Session(mode='ollama')
        outcome = session.score_attempt('Hola.', FixedScorer(judgement))
        self.assertIsNone(outcome.warning)
        self.assertEqual(outcome.result.max, AI_MAX_SCORE)
        self.assertEqual(outcome.result.source, 'ollama')
        self.assertEqual(outcome.to_dict()['result']['corrected'], 'Perfect!')


class TestSession(unittest.TestCase):
    """Tests for Session state transitions."""

    def test_starts_with_a_draw(self):
        session = Session()
        self.assertTrue(session.draw.is_coherent())
        self.assertEqual(session.difficulty, 'standard')
        self.assertEqual(session.mode, 'cloud')

    def test_new_draw_respects_difficulty(self):
        session = Session(difficulty='easy', rng=random.Random(4))
        for _ in range(200):
            self.assertFalse(session.new_draw().special.difficulty_gate)

    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            Session(difficulty='hard')
        with self.assertRaises(ValueError):
            Session(mode='telepathy')

    def test_to_dict(self):
        session = Session(mode='offline')
        session.score_attempt('Hola.')
        data = session.to_dict()
        self.assertEqual(data['mode'], 'offline')
        self.assertEqual(data['history_size'], 1)
        self.assertEqual(data['draw'], session.draw.to_dict())


if __name__ == '__main__':
    unittest.main()
