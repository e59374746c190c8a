"""File and environment based settings for the tiempo server."""

import json
import logging
import os

from core.config import CONFIG_FILE, OLLAMA_URL, OLLAMA_MODEL

logger = logging.getLogger(__name__)


def load_config(config_file: str = None) -> dict:
    """Load the JSON config file. Returns {} when it does not exist."""
    path = os.path.expanduser(config_file or os.environ.get('TIEMPO_CONFIG', CONFIG_FILE))
    if not os.path.exists(path):
        return {}
    with open(path, 'r') as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f'Config file {path} must contain a JSON object')
    logger.info(f'Loaded config from {path}')
    return config


def get_settings(config_file: str = None) -> dict:
    """Environment variables first, then the config file, then defaults."""
    config = load_config(config_file)
    return {
        'gemini_api_key': os.environ.get('GEMINI_API_KEY') or config.get('gemini_api_key'),
        'ollama_url': os.environ.get('OLLAMA_URL') or config.get('ollama_url') or OLLAMA_URL,
        'ollama_model': os.environ.get('OLLAMA_MODEL') or config.get('ollama_model') or OLLAMA_MODEL,
    }
