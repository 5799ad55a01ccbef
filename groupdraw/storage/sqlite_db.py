"""
SQLite storage for shared draws.

Local development and self-hosted deployments. This is the SQLite
implementation of the DrawStoreInterface.
"""

import sqlite3
import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Iterator, List, Dict, Any
import threading

from .base import DrawStoreInterface, generate_draw_id
from .exceptions import QueryError, SchemaError
from .. import config


class SQLiteDatabase(DrawStoreInterface):
    """
    SQLite database for shared draws.
    Thread-safe with connection per thread.
    """

    def __init__(self, db_path: str = "data/draws.db"):
        """
        Create SQLite database instance.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        self._initialized = True

    def close(self) -> None:
        """Close database connections and clean up resources."""
        if hasattr(self._local, 'conn') and self._local.conn is not None:
            self._local.conn.close()
            self._local.conn = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except Exception:
            return False

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'conn') or self._local.conn is None:
            self._local.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0
            )
            self._local.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrent access
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def _init_schema(self) -> None:
        """Initialize database schema."""
        try:
            self._create_tables()
        except sqlite3.Error as e:
            raise SchemaError(f"Failed to initialize schema: {e}") from e

    def _create_tables(self) -> None:
        with self.transaction() as conn:
            # draw_data holds the JSON list of groups
            conn.execute('''
                CREATE TABLE IF NOT EXISTS draws (
                    id TEXT PRIMARY KEY,
                    draw_data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            ''')

    # =========================================================================
    # DRAWS
    # =========================================================================

    def save_draw(self, groups: List[Dict[str, Any]]) -> str:
        """Save a draw. Returns its generated id."""
        draw_id = generate_draw_id(config.SHARE_ID_LENGTH)
        try:
            with self.transaction() as conn:
                conn.execute('''
                    INSERT INTO draws (id, draw_data, created_at)
                    VALUES (?, ?, ?)
                ''', (
                    draw_id,
                    json.dumps(groups, ensure_ascii=False),
                    datetime.now(timezone.utc).isoformat()
                ))
        except sqlite3.Error as e:
            raise QueryError(f"Failed to save draw: {e}") from e
        return draw_id

    def get_draw(self, draw_id: str) -> Optional[List[Dict[str, Any]]]:
        """Get a stored draw by id."""
        try:
            conn = self._get_connection()
            row = conn.execute(
                'SELECT draw_data FROM draws WHERE id = ?', (draw_id,)
            ).fetchone()
        except sqlite3.Error as e:
            raise QueryError(f"Failed to fetch draw {draw_id}: {e}") from e
        if row is None:
            return None
        return json.loads(row['draw_data'])

    def count_draws(self) -> int:
        """Number of stored draws."""
        try:
            conn = self._get_connection()
            return conn.execute('SELECT COUNT(*) FROM draws').fetchone()[0]
        except sqlite3.Error as e:
            raise QueryError(f"Failed to count draws: {e}") from e

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        """Delete all draws."""
        with self.transaction() as conn:
            conn.execute('DELETE FROM draws')
