"""Judge prompts and parsing of AI judge responses."""

import json
import logging
import re

from .config import AI_BREAKDOWN, AI_MAX_SCORE
from .errors import ExternalScorerError
from .models import Draw, AIJudgement

logger = logging.getLogger(__name__)

NO_SENTENCE = '(no sentence typed)'

SYSTEM_PROMPT = 'You are an expert Spanish language teacher. Always respond with valid JSON only.'

RESPONSE_FORMAT = """Provide a JSON response with this exact structure:
{
  "totalScore": <number 0-10>,
  "conjugationScore": <number 0-4>,
  "tenseTimeScore": <number 0-3>,
  "specialConditionScore": <number 0-2>,
  "naturalnessScore": <number 0-1>,
  "correctedVersion": "<corrected sentence or 'Perfect!' if correct>",
  "explanation": "<brief explanation of key errors or strengths>"
}"""

_JSON_BLOCK_RE = re.compile(r'\{[\s\S]*\}')


def build_judge_prompt(draw: Draw, sentence: str) -> str:
    """Instruction block for a human or AI judge, ready to paste into a chat."""
    d = draw.to_dict()
    return (
        'You are a Spanish grammar judge. Evaluate the player sentence strictly for the given draw.\n'
        '\n'
        'DRAW:\n'
        f'Subject: {d["subject"]}\n'
        f'Verb (infinitive): {d["verb"]}\n'
        f'Tense: {d["tense"]}\n'
        f'Time cue: {d["timeCue"]}\n'
        f'Special: {d["special"]}\n'
        '\n'
        'TASK:\n'
        '1) Score 0–10 on: conjugation accuracy (0–4), tense-time coherence (0–3), '
        'special condition (0–2), naturalness (0–1).\n'
        '2) Provide a one-line corrected version (if needed).\n'
        '3) Briefly explain the key error(s) in English.\n'
        '\n'
        'PLAYER SENTENCE:\n'
        f'{sentence or NO_SENTENCE}'
    )


def build_scoring_prompt(draw: Draw, sentence: str) -> str:
    """Judge prompt plus the JSON structure scorers must answer with."""
    return f'{build_judge_prompt(draw, sentence)}\n\n{RESPONSE_FORMAT}'


def _number(fields: dict, name: str, maximum: int, source: str | None) -> float:
    value = fields.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExternalScorerError(f'Invalid or missing {name}: {value!r}', source)
    if not 0 <= value <= maximum:
        raise ExternalScorerError(f'{name} out of range 0-{maximum}: {value}', source)
    return value


def format_breakdown(fields: dict) -> list[str]:
    return [f'{label}: {fields[name]:g}/{maximum}' for label, name, maximum in AI_BREAKDOWN]


def judgement_from_fields(fields: dict, source: str = None) -> AIJudgement:
    """Validate judge fields (camelCase, as the judge returns them)."""
    if not isinstance(fields, dict):
        raise ExternalScorerError(f'Expected a JSON object, got {type(fields).__name__}', source)
    total = _number(fields, 'totalScore', AI_MAX_SCORE, source)
    for _, name, maximum in AI_BREAKDOWN:
        _number(fields, name, maximum, source)
    explanation = fields.get('explanation') or ''
    corrected = fields.get('correctedVersion')
    return AIJudgement(
        total_score=total,
        breakdown=format_breakdown(fields),
        explanation=str(explanation),
        corrected_version=str(corrected) if corrected is not None else None
    )


def judgement_to_fields(judgement: dict) -> dict:
    """Keep only the judge fields from a parsed response."""
    keys = ['totalScore', 'correctedVersion', 'explanation'] + [name for _, name, _ in AI_BREAKDOWN]
    return {key: judgement.get(key) for key in keys}


def extract_json(content: str, source: str = None) -> dict:
    """Parse the first {...} block in a model's text reply."""
    match = _JSON_BLOCK_RE.search(content or '')
    if not match:
        logger.error(f"Diagnosis: no JSON object found in {source or 'judge'} response")
        logger.error(f'Raw response:\n{content}')
        raise ExternalScorerError(f'Invalid response format from {source or "judge"}', source)
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error(f'Failed to parse judgement: {e}')
        logger.error(f'Raw response:\n{content}')
        raise ExternalScorerError(f'Malformed JSON from {source or "judge"}: {e}', source) from e


def parse_judgement(content: str, source: str = None) -> AIJudgement:
    return judgement_from_fields(extract_json(content, source), source)
