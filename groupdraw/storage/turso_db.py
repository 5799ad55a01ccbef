"""
Turso storage for shared draws.

Provides cloud-hosted SQLite-compatible storage using Turso's libSQL.
Key differences from local SQLite:
- Connection via URL + auth token
- No executescript() - execute statements individually
- Row access via index (row[0]) instead of dict key

Requires: pip install libsql-experimental
"""

import os
import json
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .base import DrawStoreInterface, generate_draw_id
from .exceptions import ConfigurationError, ConnectionError, QueryError, SchemaError
from .. import config


class TursoDatabase(DrawStoreInterface):
    """
    Turso cloud database implementation.

    Uses libSQL for SQLite-compatible cloud storage with edge replicas.
    """

    def __init__(self):
        """
        Create Turso database instance.

        Reads configuration from environment variables:
        - TURSO_DATABASE_URL: Database URL (e.g., libsql://your-db.turso.io)
        - TURSO_AUTH_TOKEN: Authentication token
        """
        self._url = os.environ.get('TURSO_DATABASE_URL')
        self._token = os.environ.get('TURSO_AUTH_TOKEN')
        self._conn = None
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        if not self._url:
            raise ConfigurationError(
                "TURSO_DATABASE_URL environment variable is required for Turso backend"
            )
        if not self._token:
            raise ConfigurationError(
                "TURSO_AUTH_TOKEN environment variable is required for Turso backend"
            )

        self._init_schema()
        self._initialized = True

    def _get_connection(self):
        """Get or create database connection."""
        if self._conn is None:
            try:
                import libsql_experimental as libsql
            except ImportError:
                raise ConfigurationError(
                    "libsql-experimental package not installed. "
                    "Install with: pip install libsql-experimental"
                )

            try:
                self._conn = libsql.connect(
                    self._url,
                    auth_token=self._token
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Turso: {e}")

        return self._conn

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except Exception:
            return False

    def _init_schema(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()

        try:
            conn.execute('''CREATE TABLE IF NOT EXISTS draws (
                id TEXT PRIMARY KEY,
                draw_data TEXT NOT NULL,
                created_at TEXT NOT NULL
            )''')
            conn.commit()
        except Exception as e:
            raise SchemaError(f"Failed to initialize Turso schema: {e}") from e

    # =========================================================================
    # DRAWS
    # =========================================================================

    def save_draw(self, groups: List[Dict[str, Any]]) -> str:
        """Save a draw. Returns its generated id."""
        conn = self._get_connection()
        draw_id = generate_draw_id(config.SHARE_ID_LENGTH)
        try:
            conn.execute(
                'INSERT INTO draws (id, draw_data, created_at) VALUES (?, ?, ?)',
                (
                    draw_id,
                    json.dumps(groups, ensure_ascii=False),
                    datetime.now(timezone.utc).isoformat()
                )
            )
            conn.commit()
        except Exception as e:
            raise QueryError(f"Failed to save draw: {e}") from e
        return draw_id

    def get_draw(self, draw_id: str) -> Optional[List[Dict[str, Any]]]:
        """Get a stored draw by id."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                'SELECT draw_data FROM draws WHERE id = ?', (draw_id,)
            ).fetchone()
        except Exception as e:
            raise QueryError(f"Failed to fetch draw {draw_id}: {e}") from e
        if row is None:
            return None
        return json.loads(row[0])

    def count_draws(self) -> int:
        """Number of stored draws."""
        conn = self._get_connection()
        try:
            return conn.execute('SELECT COUNT(*) FROM draws').fetchone()[0]
        except Exception as e:
            raise QueryError(f"Failed to count draws: {e}") from e

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        """Delete all draws."""
        conn = self._get_connection()
        conn.execute('DELETE FROM draws')
        conn.commit()
