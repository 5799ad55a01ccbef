"""
Draw Service - Runs draw sessions and their collaborators.

Keeps the in-memory draw sessions, serialises mutations per session and
connects the draw engine to shared-draw storage and the commentary client.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Optional, List, Dict, Any, Iterator, Tuple
from cachetools import TTLCache

from .. import config
from ..draw import DrawEngine, InvalidExternalDraw, InvalidCommit
from ..models import DrawSession, Placement, ValidationResult
from ..storage import get_database, DrawStoreInterface, DatabaseError
from ..clients import CommentaryClient, get_commentary_client
from .exceptions import (
    SessionNotFound,
    DrawNotFound,
    PersistenceFailure,
    DrawIncomplete,
    GroupNotFound,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to create share link"
LOAD_FAILED_MESSAGE = "Could not load the shared draw, started a new one"


class DrawService:
    """
    Service layer for draw sessions.

    Each session has its own lock; only one mutation runs against a session at
    a time. Sessions are independent and live in memory only: an idle session
    expires after SESSION_TTL_MINUTES and the least recently used ones are
    dropped once MAX_SESSIONS are held.
    """

    def __init__(
        self,
        engine: Optional[DrawEngine] = None,
        database: Optional[DrawStoreInterface] = None,
        commentary: Optional[CommentaryClient] = None,
    ):
        self.engine = engine or DrawEngine()
        self._db = database
        self._commentary = commentary

        # session id -> (session, its mutation lock)
        self._sessions: TTLCache = TTLCache(
            maxsize=max(1, config.MAX_SESSIONS),
            ttl=config.SESSION_TTL_MINUTES * 60,
        )
        self._sessions_lock = threading.Lock()

    @property
    def db(self) -> DrawStoreInterface:
        """Lazy database lookup (respects DB_TYPE env var)."""
        if self._db is None:
            self._db = get_database()
        return self._db

    @property
    def commentary(self) -> CommentaryClient:
        if self._commentary is None:
            self._commentary = get_commentary_client()
        return self._commentary

    # =========================================================================
    # SESSIONS
    # =========================================================================

    def _register(self, session: DrawSession) -> DrawSession:
        with self._sessions_lock:
            self._sessions[session.id] = (session, threading.Lock())
        return session

    def _entry(self, session_id: str) -> Tuple[DrawSession, threading.Lock]:
        """Look up a session and its lock, restarting its idle timer."""
        with self._sessions_lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                raise SessionNotFound(f"Draw session not found: {session_id}")
            self._sessions[session_id] = entry
        return entry

    def create_session(self) -> DrawSession:
        """Start a new draw with the hosts seated."""
        session = self._register(self.engine.start_draw())
        logger.info(f"Started draw {session.id}")
        return session

    def get_session(self, session_id: str) -> DrawSession:
        return self._entry(session_id)[0]

    def delete_session(self, session_id: str) -> None:
        with self._sessions_lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(f"Draw session not found: {session_id}")

    def session_count(self) -> int:
        with self._sessions_lock:
            self._sessions.expire()
            return len(self._sessions)

    @contextmanager
    def _locked(self, session_id: str) -> Iterator[DrawSession]:
        """Hold the session's lock for the duration of one mutation."""
        session, lock = self._entry(session_id)
        with lock:
            yield session

    # =========================================================================
    # DRAWING
    # =========================================================================

    def draw_next(self, session_id: str) -> Optional[Placement]:
        """Select the next team for the session (not committed)."""
        with self._locked(session_id) as session:
            return self.engine.draw_next(session)

    def commit(
        self,
        session_id: str,
        team_id: Optional[str] = None,
        group_index: Optional[int] = None,
    ) -> DrawSession:
        """
        Seat a team.

        Without arguments the pending placement is committed. With a team id
        and group index, that placement is committed if it is legal.
        """
        with self._locked(session_id) as session:
            if team_id is None:
                return self.engine.commit_pending(session)

            team = self.engine.registry.team(team_id)
            if team is None:
                raise InvalidCommit(f"Unknown team: {team_id}")
            if group_index is None:
                raise InvalidCommit("group_index is required with team_id")
            return self.engine.commit(session, team, group_index)

    def cancel(self, session_id: str) -> Optional[Placement]:
        """Discard the pending selection, if any."""
        with self._locked(session_id) as session:
            return self.engine.cancel_pending(session)

    def complete(self, session_id: str) -> DrawSession:
        """Finish the draw instantly."""
        with self._locked(session_id) as session:
            return self.engine.complete_draw(session)

    def reset(self, session_id: str) -> DrawSession:
        """Restart the draw from the hosts-only state."""
        with self._locked(session_id) as session:
            return self.engine.reset(session)

    def validate(self, session_id: str) -> ValidationResult:
        return self.engine.validate_session(self.get_session(session_id))

    # =========================================================================
    # SHARING
    # =========================================================================

    def save_draw(self, groups: List[Dict[str, Any]]) -> str:
        """
        Store raw group data and return its share id.

        Raises:
            PersistenceFailure: If the backend fails
        """
        try:
            draw_id = self.db.save_draw(groups)
        except DatabaseError as e:
            logger.error(f"Error saving draw: {e}")
            raise PersistenceFailure(SAVE_FAILED_MESSAGE) from e
        logger.info(f"Saved draw {draw_id}")
        return draw_id

    def fetch_draw(self, draw_id: str) -> List[Dict[str, Any]]:
        """
        Fetch raw group data by share id.

        Raises:
            DrawNotFound: If no draw has this id
            PersistenceFailure: If the backend fails
        """
        try:
            groups = self.db.get_draw(draw_id)
        except DatabaseError as e:
            logger.error(f"Error fetching draw {draw_id}: {e}")
            raise PersistenceFailure("Failed to fetch draw") from e
        if groups is None:
            raise DrawNotFound(f"Draw not found: {draw_id}")
        return groups

    def share(self, session_id: str) -> str:
        """
        Store the finished session's groups, reusing the id if already shared.

        Raises:
            DrawIncomplete: The draw is not finished
        """
        with self._locked(session_id) as session:
            if not session.is_finished:
                raise DrawIncomplete("Only a finished draw can be shared")
            if session.shared_id:
                return session.shared_id
            session.shared_id = self.save_draw(session.groups_data())
            return session.shared_id

    def load_shared(self, draw_id: str) -> Tuple[DrawSession, Optional[str]]:
        """
        Open a shared draw as a finished session.

        Any failure falls back to a fresh draw.

        Returns:
            Tuple of (session, error message or None)
        """
        try:
            data = self.fetch_draw(draw_id)
            session = self.engine.load_external_draw(data)
        except (DrawNotFound, PersistenceFailure, InvalidExternalDraw) as e:
            logger.error(f"Invalid draw data for {draw_id}: {e}")
            return self.create_session(), f"{LOAD_FAILED_MESSAGE}: {e}"

        session.shared_id = draw_id
        logger.info(f"Loaded shared draw {draw_id} as session {session.id}")
        return self._register(session), None

    # =========================================================================
    # COMMENTARY
    # =========================================================================

    async def analyze(self, session_id: str, group_name: Optional[str] = None) -> str:
        """
        Commentary on a finished draw, or on one of its groups.

        Raises:
            DrawIncomplete: The draw is not finished
            SessionNotFound: Unknown session
            GroupNotFound: Unknown group name
        """
        session = self.get_session(session_id)
        if not session.is_finished:
            raise DrawIncomplete("Commentary is only available once the draw is complete")

        groups = [group.clone() for group in session.groups]
        if group_name is None:
            return await self.commentary.summarize_draw(groups)

        for group in groups:
            if group.name.upper() == group_name.upper():
                return await self.commentary.summarize_group(group)
        raise GroupNotFound(f"Group {group_name} not found in draw {session_id}")
