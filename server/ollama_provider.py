"""Ollama scorer implementation (local AI scoring)."""

import logging
import time

import requests

from core.config import OLLAMA_URL, OLLAMA_MODEL, AI_TEMPERATURE, AI_MAX_TOKENS, AI_TIMEOUT_SECONDS
from core.errors import ExternalScorerError
from core.interfaces import ExternalScorer
from core.judge import SYSTEM_PROMPT, build_scoring_prompt, parse_judgement
from core.models import Draw, AIJudgement

logger = logging.getLogger(__name__)


class OllamaScorer(ExternalScorer):
    """Scores sentences with a model served by a local Ollama instance."""

    name = 'ollama'

    def __init__(self, base_url: str = OLLAMA_URL, model_name: str = OLLAMA_MODEL,
                 timeout: float = AI_TIMEOUT_SECONDS, session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.model_name = model_name
        self.timeout = timeout
        self.session = session or requests.Session()

    def _chat(self, prompt: str) -> str:
        payload = {
            'model': self.model_name,
            'messages': [
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': prompt}
            ],
            'stream': False,
            'options': {
                'temperature': AI_TEMPERATURE,
                'num_predict': AI_MAX_TOKENS
            }
        }
        try:
            response = self.session.post(f'{self.base_url}/api/chat', json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExternalScorerError(f'Ollama request failed: {e}. Is Ollama running?', self.name) from e

        if not response.ok:
            raise ExternalScorerError(
                f'Ollama request failed with status {response.status_code}. Is Ollama running?', self.name
            )
        try:
            return response.json()['message']['content']
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalScorerError(f'Unexpected Ollama response: {e}', self.name) from e

    def score(self, sentence: str, draw: Draw) -> AIJudgement:
        start_time = time.time()
        content = self._chat(build_scoring_prompt(draw, sentence))
        judgement = parse_judgement(content, self.name)
        ms = int((time.time() - start_time) * 1000)
        logger.info(f'{self.model_name} judged sentence in {ms}ms: {judgement.total_score}/10')
        return judgement
