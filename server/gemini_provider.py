"""Gemini AI scorer implementation (cloud scoring)."""

import logging
import threading
import time
import google.generativeai as genai

from core.config import GEMINI_MODEL, AI_TEMPERATURE, AI_MAX_TOKENS
from core.errors import ExternalScorerError
from core.interfaces import ExternalScorer
from core.judge import SYSTEM_PROMPT, build_scoring_prompt, extract_json, judgement_from_fields, judgement_to_fields
from core.models import Draw, AIJudgement

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class GeminiScorer(ExternalScorer):
    """Scores sentences with a Gemini model."""

    name = 'cloud'

    def __init__(self, api_key: str, model_name: str = GEMINI_MODEL):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name, system_instruction=SYSTEM_PROMPT)
        self.model_name = model_name
        self.stats = {'calls': 0, 'failures': 0, 'total_ms': 0}
        self._stats_lock = threading.Lock()

    def _record(self, failed: bool = False, ms: int = 0) -> None:
        with self._stats_lock:
            if failed:
                self.stats['failures'] += 1
            else:
                self.stats['calls'] += 1
                self.stats['total_ms'] += ms

    def _execute(self, prompt: str) -> tuple[str, int]:
        start_time = time.time()
        try:
            response = self.model.generate_content(
                prompt,
                generation_config={
                    'temperature': AI_TEMPERATURE,
                    'max_output_tokens': AI_MAX_TOKENS,
                }
            )
            text = response.text
        except Exception as e:
            self._record(failed=True)
            logger.error(f'Gemini request failed: {type(e).__name__}: {e}')
            raise ExternalScorerError(f'Gemini request failed: {e}', self.name) from e
        ms = int((time.time() - start_time) * 1000)
        self._record(ms=ms)
        return (text, ms)

    def judge(self, sentence: str, draw: Draw) -> tuple[dict, int]:
        """Raw judge fields (camelCase) and the request time in ms."""
        response, ms = self._execute(build_scoring_prompt(draw, sentence))
        try:
            fields = judgement_to_fields(extract_json(response, self.name))
            judgement_from_fields(fields, self.name)
        except ExternalScorerError:
            self._record(failed=True)
            raise
        logger.info(f'{self.model_name} judged sentence in {ms}ms: {fields["totalScore"]}/10')
        return (fields, ms)

    def score(self, sentence: str, draw: Draw) -> AIJudgement:
        fields, _ = self.judge(sentence, draw)
        return judgement_from_fields(fields, self.name)

    def get_stats(self) -> dict:
        with self._stats_lock:
            stats = dict(self.stats)
        calls = stats['calls']
        return {
            **stats,
            'model': self.model_name,
            'avg_ms': round(stats['total_ms'] / calls, 1) if calls > 0 else 0
        }
