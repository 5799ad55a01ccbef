"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

import os
from typing import Optional


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_optional_int(key: str) -> Optional[int]:
    """Get integer from environment variable, None when unset or invalid."""
    value = os.environ.get(key)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


# =============================================================================
# SERVER SETTINGS
# =============================================================================
PORT = _get_int('PORT', 8000)
HOST = _get_str('HOST', '0.0.0.0')

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
# Data directory for the SQLite backend
# Priority: DATA_DIR > /app/data (container) > data (local)
DATA_DIR = (
    os.environ.get('DATA_DIR') or
    ('/app/data' if os.path.exists('/app') else 'data')
)

# sqlite, turso or supabase
DB_TYPE = _get_str('DB_TYPE', 'sqlite')

# Length of the identifiers handed out for shared draws
SHARE_ID_LENGTH = _get_int('SHARE_ID_LENGTH', 8)

# =============================================================================
# SESSION SETTINGS
# =============================================================================
# In-memory draw sessions expire after this long without being used
SESSION_TTL_MINUTES = _get_int('SESSION_TTL_MINUTES', 120)

# Oldest sessions are dropped once this many are held
MAX_SESSIONS = _get_int('MAX_SESSIONS', 1000)

# =============================================================================
# DRAW ENGINE
# =============================================================================
# Batch completion re-runs from its starting snapshot until it produces a
# complete, valid draw or runs out of attempts. 1 = single greedy pass.
DRAW_MAX_ATTEMPTS = _get_int('DRAW_MAX_ATTEMPTS', 200)

# When every attempt fails: raise instead of committing the short draw
DRAW_STRICT = _get_bool('DRAW_STRICT', False)

# Seed for reproducible draws (unset = system randomness)
DRAW_SEED = _get_optional_int('DRAW_SEED')

# =============================================================================
# COMMENTARY
# =============================================================================
GEMINI_API_KEY = _get_str('GEMINI_API_KEY', '')
GEMINI_MODEL = _get_str('GEMINI_MODEL', 'gemini-2.5-flash')
GEMINI_BASE_URL = _get_str(
    'GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta'
)
COMMENTARY_TIMEOUT_SECONDS = _get_int('COMMENTARY_TIMEOUT_SECONDS', 30)

# =============================================================================
# RATE LIMITING
# =============================================================================
# Cooldown between commentary requests (in seconds)
COMMENTARY_COOLDOWN_SECONDS = _get_int('COMMENTARY_COOLDOWN_SECONDS', 10)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')
