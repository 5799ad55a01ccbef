"""
Storage module for shared draws.

Provides a unified interface for multiple database backends:
- SQLite (local development, self-hosted)
- Turso (cloud SQLite, free tier)
- Supabase (PostgreSQL, free tier)

Usage:
    from groupdraw.storage import get_database

    db = get_database()  # Uses DB_TYPE env var
    draw_id = db.save_draw(groups)
"""

from .base import DrawStoreInterface, generate_draw_id
from .factory import get_database, reset_database
from .exceptions import (
    DatabaseError,
    ConnectionError,
    ConfigurationError,
    SchemaError,
    QueryError
)

__all__ = [
    'DrawStoreInterface',
    'generate_draw_id',
    'get_database',
    'reset_database',
    'DatabaseError',
    'ConnectionError',
    'ConfigurationError',
    'SchemaError',
    'QueryError'
]
