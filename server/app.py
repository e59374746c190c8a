"""FastAPI server for tiempo application."""

import asyncio
import logging

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional

from core.config import DEFAULT_DIFFICULTY, DIFFICULTIES, SCORING_MODES
from core.errors import ExternalScorerError, LexiconError
from core.interfaces import ExternalScorer
from core.judge import build_judge_prompt
from core.lexicon import validate_lexicon
from core.models import Draw
from core.scoring import check_special_dispatch
from core.session import Session

from server.config_loader import get_settings
from server.gemini_provider import GeminiScorer
from server.ollama_provider import OllamaScorer

logger = logging.getLogger(__name__)


# Pydantic models for API
class DrawPayload(BaseModel):
    subject: str
    verb: str
    tense: str
    tenseKey: str
    timeCue: str
    special: str
    specialKey: str


class ScoreRequest(BaseModel):
    sentence: str = ''
    draw: Optional[DrawPayload] = None


class AttemptRequest(BaseModel):
    sentence: str
    user_id: str = "default"
    mode: Optional[str] = None
    ollama_url: Optional[str] = None
    ollama_model: Optional[str] = None


class ResultPayload(BaseModel):
    score: float
    max: int
    notes: list[str]
    corrected: Optional[str]
    source: str


class AttemptResponse(BaseModel):
    result: ResultPayload
    warning: Optional[str]
    history_size: int


class RoundResponse(BaseModel):
    difficulty: str
    mode: str
    draw: DrawPayload
    history_size: int


class UnavailableScorer(ExternalScorer):
    """Stands in for a scorer whose credentials are missing."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason

    def score(self, sentence: str, draw: Draw):
        raise ExternalScorerError(self.reason, self.name)


# Global state (in production, use proper DI)
settings: dict = {}
cloud_scorer: GeminiScorer = None
user_sessions: dict[str, Session] = {}


app = FastAPI(title="Tiempo API", description="Spanish tense drill scoring API")


def get_session(user_id: str = "default") -> Session:
    """Get or create the session for a user."""
    if user_id not in user_sessions:
        user_sessions[user_id] = Session()
    return user_sessions[user_id]


def get_scorer(mode: str, ollama_url: str = None, ollama_model: str = None) -> ExternalScorer | None:
    """External scorer for a scoring mode; None means offline scoring."""
    if mode == 'cloud':
        return cloud_scorer or UnavailableScorer('cloud', 'Gemini API key not configured on server')
    if mode == 'ollama':
        return OllamaScorer(
            base_url=ollama_url or settings.get('ollama_url'),
            model_name=ollama_model or settings.get('ollama_model')
        )
    return None


@app.on_event("startup")
async def startup():
    """Validate the lexicon and initialize AI scorers on startup."""
    global settings, cloud_scorer

    validate_lexicon()
    check_special_dispatch()

    settings = get_settings()
    api_key = settings.get('gemini_api_key')
    if api_key:
        cloud_scorer = GeminiScorer(api_key)
        logger.info(f"Cloud scorer initialized: {cloud_scorer.model_name}")
    else:
        cloud_scorer = None
        logger.warning(
            "GEMINI_API_KEY not set and no key in config file; "
            "cloud scoring will fall back to offline scoring"
        )


@app.get("/")
async def root():
    """Health check."""
    return {"service": "tiempo", "status": "ok"}


@app.get("/api/draw", response_model=RoundResponse)
async def new_draw(user_id: str = "default", difficulty: Optional[str] = None):
    """Deal a new draw for the user's session."""
    session = get_session(user_id)
    if difficulty is not None:
        try:
            session.set_difficulty(difficulty)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    session.new_draw()
    return session.to_dict()


@app.get("/api/round", response_model=RoundResponse)
async def get_round(user_id: str = "default"):
    """Current draw and settings of the user's session."""
    return get_session(user_id).to_dict()


@app.post("/api/score")
async def score(request: ScoreRequest):
    """Score a sentence with the cloud judge only.

    Failures return an error body with `fallback: true` so the caller can
    switch to offline scoring.
    """
    if not request.sentence.strip() or request.draw is None:
        return JSONResponse(status_code=400, content={"error": "Missing sentence or draw data"})

    if cloud_scorer is None:
        return JSONResponse(
            status_code=500,
            content={"error": "Gemini API key not configured on server", "fallback": True}
        )

    try:
        draw = Draw.from_dict(request.draw.model_dump())
    except LexiconError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        fields, _ = await asyncio.to_thread(cloud_scorer.judge, request.sentence, draw)
    except ExternalScorerError as e:
        logger.error(f"Cloud scoring error: {e}")
        return JSONResponse(
            status_code=502,
            content={"error": str(e) or "Failed to score sentence", "fallback": True}
        )
    return fields


@app.post("/api/attempt", response_model=AttemptResponse)
async def submit_attempt(request: AttemptRequest):
    """Score a sentence for the session's current draw and record it."""
    session = get_session(request.user_id)
    if request.mode is not None:
        try:
            session.set_mode(request.mode)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    scorer = get_scorer(session.mode, request.ollama_url, request.ollama_model)
    outcome = await asyncio.to_thread(session.score_attempt, request.sentence, scorer)
    return {
        **outcome.to_dict(),
        "history_size": len(session.history)
    }


@app.get("/api/history")
async def get_history(user_id: str = "default", limit: int = 50):
    """Past attempts, newest first."""
    session = get_session(user_id)
    entries = session.history.to_list(max(limit, 0))
    return {"total": len(session.history), "entries": entries}


@app.get("/api/judge-prompt")
async def get_judge_prompt(user_id: str = "default", sentence: str = ""):
    """Judge prompt for the current draw, for pasting into an external chat."""
    session = get_session(user_id)
    return {"prompt": build_judge_prompt(session.draw, sentence)}


@app.get("/api/settings")
async def get_settings_info():
    """Available options and which AI scorers are configured."""
    return {
        "difficulties": DIFFICULTIES,
        "default_difficulty": DEFAULT_DIFFICULTY,
        "modes": SCORING_MODES,
        "cloud_available": cloud_scorer is not None,
        "ollama_url": settings.get('ollama_url'),
        "ollama_model": settings.get('ollama_model')
    }


@app.get("/api/stats")
async def get_api_stats():
    """Cloud scorer usage statistics."""
    if cloud_scorer is None:
        return {"error": "Cloud scoring not configured"}
    return cloud_scorer.get_stats()


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
