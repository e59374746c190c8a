"""In-process game backend: rounds are dealt and scored locally.

Cloud scoring still goes through the server's /api/score endpoint, Ollama
is called directly, and offline mode never leaves the process.
"""

from core.judge import build_judge_prompt
from core.session import Session
from cli.api_client import TiempoAPIClient, RemoteCloudScorer
from server.ollama_provider import OllamaScorer


class LocalBackend:
    """Same operations as TiempoAPIClient, backed by a local Session."""

    def __init__(self, client: TiempoAPIClient, difficulty: str, mode: str,
                 ollama_url: str = None, ollama_model: str = None):
        self.client = client
        self.base_url = client.base_url
        self.session = Session(difficulty=difficulty, mode=mode)
        self.ollama_url = ollama_url
        self.ollama_model = ollama_model

    def health_check(self) -> dict:
        return {'service': 'tiempo (local)', 'status': 'ok'}

    def _scorer(self, mode: str):
        if mode == 'cloud':
            return RemoteCloudScorer(self.client)
        if mode == 'ollama':
            kwargs = {}
            if self.ollama_url:
                kwargs['base_url'] = self.ollama_url
            if self.ollama_model:
                kwargs['model_name'] = self.ollama_model
            return OllamaScorer(**kwargs)
        return None

    def new_draw(self, difficulty: str = None) -> dict:
        if difficulty:
            self.session.set_difficulty(difficulty)
        self.session.new_draw()
        return self.session.to_dict()

    def get_round(self) -> dict:
        return self.session.to_dict()

    def submit_attempt(self, sentence: str, mode: str = None,
                       ollama_url: str = None, ollama_model: str = None) -> dict:
        if mode:
            self.session.set_mode(mode)
        self.ollama_url = ollama_url or self.ollama_url
        self.ollama_model = ollama_model or self.ollama_model
        outcome = self.session.score_attempt(sentence, self._scorer(self.session.mode))
        return {**outcome.to_dict(), 'history_size': len(self.session.history)}

    def get_history(self, limit: int = 10) -> dict:
        return {'total': len(self.session.history), 'entries': self.session.history.to_list(limit)}

    def get_judge_prompt(self, sentence: str = '') -> dict:
        return {'prompt': build_judge_prompt(self.session.draw, sentence)}
