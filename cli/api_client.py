"""REST API client for tiempo server."""

import requests
from typing import Optional

from core.config import AI_TIMEOUT_SECONDS
from core.errors import ExternalScorerError
from core.interfaces import ExternalScorer
from core.judge import judgement_from_fields
from core.models import Draw, AIJudgement


class TiempoAPIClient:
    """Client for communicating with the tiempo REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default",
                 timeout: float = AI_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.timeout = timeout
        self.session = requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def _get(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """GET a game endpoint for this user; HTTP errors propagate."""
        query = {**(params or {}), 'user_id': self.user_id}
        response = self.session.get(self._url(endpoint), params=query, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, body: dict) -> dict:
        """POST to a game endpoint for this user; HTTP errors propagate."""
        payload = {**body, 'user_id': self.user_id}
        response = self.session.post(self._url(endpoint), json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Service name and status from the server root."""
        return self._get("/")

    def new_draw(self, difficulty: Optional[str] = None) -> dict:
        """Deal a new draw."""
        params = {'difficulty': difficulty} if difficulty else {}
        return self._get("/api/draw", params)

    def get_round(self) -> dict:
        """Get the current draw and session settings."""
        return self._get("/api/round")

    def submit_attempt(self, sentence: str, mode: Optional[str] = None,
                       ollama_url: Optional[str] = None, ollama_model: Optional[str] = None) -> dict:
        """Submit a sentence for the current draw."""
        data = {'sentence': sentence}
        if mode:
            data['mode'] = mode
        if ollama_url:
            data['ollama_url'] = ollama_url
        if ollama_model:
            data['ollama_model'] = ollama_model
        return self._post("/api/attempt", data)

    def get_history(self, limit: int = 10) -> dict:
        """Get past attempts, newest first."""
        return self._get("/api/history", {'limit': limit})

    def get_judge_prompt(self, sentence: str = "") -> dict:
        """Get the judge prompt for the current draw."""
        return self._get("/api/judge-prompt", {'sentence': sentence})

    def score_cloud(self, sentence: str, draw: dict) -> dict:
        """Ask the server's cloud judge for raw judgement fields."""
        response = self.session.post(
            self._url("/api/score"),
            json={'sentence': sentence, 'draw': draw},
            timeout=self.timeout
        )
        if not response.ok:
            try:
                error = response.json().get('error')
            except ValueError:
                error = None
            raise ExternalScorerError(
                error or f"API request failed with status {response.status_code}", 'cloud'
            )
        return response.json()


class RemoteCloudScorer(ExternalScorer):
    """Cloud scoring through the server's /api/score endpoint."""

    name = 'cloud'

    def __init__(self, client: TiempoAPIClient):
        self.client = client

    def score(self, sentence: str, draw: Draw) -> AIJudgement:
        try:
            fields = self.client.score_cloud(sentence, draw.to_dict())
        except requests.RequestException as e:
            raise ExternalScorerError(f"Cloud request failed: {e}", self.name) from e
        except ValueError as e:
            raise ExternalScorerError(f"Cloud response is not JSON: {e}", self.name) from e
        return judgement_from_fields(fields, self.name)
