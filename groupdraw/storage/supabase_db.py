"""
Supabase storage for shared draws.

Provides PostgreSQL-based cloud storage using Supabase's REST API.
Key differences from SQLite:
- Uses supabase-py client library (REST API)
- initialize() verifies the draws table exists (doesn't create it)

Requires: pip install supabase
Schema must be created first via scripts/supabase_schema.sql
"""

import os
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from .base import DrawStoreInterface, generate_draw_id
from .exceptions import ConfigurationError, ConnectionError, QueryError
from .. import config


class SupabaseDatabase(DrawStoreInterface):
    """
    Supabase cloud database implementation.

    Uses PostgreSQL via Supabase's REST API.
    """

    def __init__(self):
        """
        Create Supabase database instance.

        Reads configuration from environment variables:
        - SUPABASE_URL: Project URL (e.g., https://your-project.supabase.co)
        - SUPABASE_KEY: Anon or service key
        """
        self._url = os.environ.get('SUPABASE_URL')
        self._key = os.environ.get('SUPABASE_KEY')
        self._client = None
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and verify schema."""
        if self._initialized:
            return

        if not self._url:
            raise ConfigurationError(
                "SUPABASE_URL environment variable is required for Supabase backend"
            )
        if not self._key:
            raise ConfigurationError(
                "SUPABASE_KEY environment variable is required for Supabase backend"
            )

        client = self._get_client()
        try:
            client.table('draws').select('id').limit(1).execute()
        except Exception as e:
            raise ConnectionError(
                f"Failed to connect to Supabase or schema not initialized. "
                f"Run scripts/supabase_schema.sql in Supabase SQL Editor first. "
                f"Error: {e}"
            )

        self._initialized = True

    def _get_client(self):
        """Get or create Supabase client."""
        if self._client is None:
            try:
                from supabase import create_client
            except ImportError:
                raise ConfigurationError(
                    "supabase package not installed. "
                    "Install with: pip install supabase"
                )

            try:
                self._client = create_client(self._url, self._key)
            except Exception as e:
                raise ConnectionError(f"Failed to create Supabase client: {e}")

        return self._client

    def close(self) -> None:
        """Close database connection (no-op for Supabase REST API)."""
        self._client = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            client = self._get_client()
            client.table('draws').select('id').limit(1).execute()
            return True
        except Exception:
            return False

    # =========================================================================
    # DRAWS
    # =========================================================================

    def save_draw(self, groups: List[Dict[str, Any]]) -> str:
        """Save a draw. Returns its generated id."""
        client = self._get_client()
        draw_id = generate_draw_id(config.SHARE_ID_LENGTH)
        try:
            client.table('draws').insert({
                'id': draw_id,
                'draw_data': groups,
                'created_at': datetime.now(timezone.utc).isoformat()
            }).execute()
        except Exception as e:
            raise QueryError(f"Failed to save draw: {e}") from e
        return draw_id

    def get_draw(self, draw_id: str) -> Optional[List[Dict[str, Any]]]:
        """Get a stored draw by id."""
        client = self._get_client()
        try:
            result = (
                client.table('draws')
                .select('draw_data')
                .eq('id', draw_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise QueryError(f"Failed to fetch draw {draw_id}: {e}") from e
        if not result.data:
            return None
        return result.data[0]['draw_data']

    def count_draws(self) -> int:
        """Number of stored draws."""
        client = self._get_client()
        try:
            result = client.table('draws').select('id', count='exact').execute()
        except Exception as e:
            raise QueryError(f"Failed to count draws: {e}") from e
        return result.count or 0

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        """Delete all draws."""
        client = self._get_client()
        client.table('draws').delete().neq('id', '').execute()
