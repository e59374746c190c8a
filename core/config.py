"""Configuration constants for tiempo application."""

LANGUAGE = 'Spanish'

# Draw difficulty
DIFFICULTIES = ['easy', 'standard', 'wild']
DEFAULT_DIFFICULTY = 'standard'

# Scoring modes
SCORING_MODES = ['cloud', 'ollama', 'offline']
DEFAULT_SCORING_MODE = 'cloud'

# Score ceilings
HEURISTIC_MAX_SCORE = 9       # Fixed display ceiling, not the sum of obtainable points
AI_MAX_SCORE = 10

# Heuristic rubric points
CUE_POINTS = 1
TENSE_POINTS = 2
SPECIAL_POINTS = 2
SUBJECT_POINTS = 1
IRREGULAR_BONUS_POINTS = 1
FLUENCY_POINTS = 1
FLUENCY_MIN_WORDS = 5

# AI breakdown: (label, field, maximum)
AI_BREAKDOWN = [
    ('Conjugation accuracy', 'conjugationScore', 4),
    ('Tense-time coherence', 'tenseTimeScore', 3),
    ('Special condition', 'specialConditionScore', 2),
    ('Naturalness', 'naturalnessScore', 1),
]

# Session history
HISTORY_LIMIT = 50

# AI providers
GEMINI_MODEL = 'gemini-2.0-flash'
OLLAMA_URL = 'http://localhost:11434'
OLLAMA_MODEL = 'llama3'
AI_TEMPERATURE = 0.3
AI_MAX_TOKENS = 500
AI_TIMEOUT_SECONDS = 60

CONFIG_FILE = '~/.config/tiempo/config.json'
