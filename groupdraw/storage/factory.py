"""
Shared-draw store selection.

DB_TYPE picks the backend when the store is first needed:

- sqlite (default): ``draws.db`` under DATA_DIR
- turso: TURSO_DATABASE_URL and TURSO_AUTH_TOKEN
- supabase: SUPABASE_URL and SUPABASE_KEY

Environment variables are read at lookup time, not at import, so tests can
switch backends with ``reset_database()``.
"""

import os
from typing import Callable, Dict, Optional

from .base import DrawStoreInterface
from .exceptions import ConfigurationError


def _sqlite_store() -> DrawStoreInterface:
    from .sqlite_db import SQLiteDatabase

    data_dir = os.environ.get('DATA_DIR') or (
        '/app/data' if os.path.exists('/app') else 'data'
    )
    return SQLiteDatabase(db_path=os.path.join(data_dir, 'draws.db'))


def _turso_store() -> DrawStoreInterface:
    from .turso_db import TursoDatabase
    return TursoDatabase()


def _supabase_store() -> DrawStoreInterface:
    from .supabase_db import SupabaseDatabase
    return SupabaseDatabase()


# Backends are imported lazily; turso and supabase are optional extras
_BACKENDS: Dict[str, Callable[[], DrawStoreInterface]] = {
    'sqlite': _sqlite_store,
    'turso': _turso_store,
    'supabase': _supabase_store,
}

_store: Optional[DrawStoreInterface] = None


def get_database() -> DrawStoreInterface:
    """
    Return the shared-draw store, creating it on first use.

    Raises:
        ConfigurationError: Unknown DB_TYPE or missing backend credentials
        DatabaseError: The backend could not be initialized
    """
    global _store
    if _store is not None:
        return _store

    db_type = os.environ.get('DB_TYPE', 'sqlite').lower()
    build = _BACKENDS.get(db_type)
    if build is None:
        raise ConfigurationError(
            f"Unknown DB_TYPE: {db_type} (expected one of: {', '.join(_BACKENDS)})"
        )

    print(f"[*] Draw storage backend: {db_type}")
    store = build()
    # A store that failed to initialize is not kept
    store.initialize()
    _store = store
    return _store


def reset_database() -> None:
    """Close and forget the current store (tests, config switches)."""
    global _store
    if _store is not None:
        _store.close()
        _store = None
