"""
World Cup Group Draw - FastAPI Application

Provides a REST API for running, sharing and discussing World Cup group draws.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Query, HTTPException
from fastapi.responses import HTMLResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional, Any
import logging
import threading

from .draw import (
    WORLD_CUP_2026,
    DrawError,
    PlacementDeadEnd,
    UnplaceableTeam,
    DrawValidationFailed,
)
from .services.draw_service import DrawService
from .services.exceptions import (
    SessionNotFound,
    DrawNotFound,
    GroupNotFound,
    PersistenceFailure,
    DrawIncomplete,
)
from .storage import DatabaseError
from . import config, __version__

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

draw_service = DrawService()


# ============================================================================
# RATE LIMITING
# ============================================================================

class RateLimiter:
    """Simple rate limiter for the commentary endpoint."""

    def __init__(self, cooldown_seconds: int = 10):
        """
        Initialize rate limiter.

        Args:
            cooldown_seconds: Minimum seconds between allowed requests (default 10)
        """
        self.cooldown_seconds = cooldown_seconds
        self._last_request: Optional[datetime] = None
        self._lock = threading.Lock()

    def try_acquire(self) -> tuple[bool, int]:
        """
        Try to acquire rate limit.

        Returns:
            Tuple of (allowed: bool, wait_seconds: int)
            - If allowed, wait_seconds is 0
            - If not allowed, wait_seconds is how long to wait
        """
        with self._lock:
            now = datetime.now()

            if self._last_request is None:
                self._last_request = now
                return True, 0

            elapsed = (now - self._last_request).total_seconds()

            if elapsed >= self.cooldown_seconds:
                self._last_request = now
                return True, 0

            wait_seconds = max(1, int(self.cooldown_seconds - elapsed))
            return False, wait_seconds

    def reset(self) -> None:
        """Reset the rate limiter (for testing)."""
        with self._lock:
            self._last_request = None


commentary_rate_limiter = RateLimiter(cooldown_seconds=config.COMMENTARY_COOLDOWN_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    print("[*] Checking draw storage...")
    try:
        if draw_service.db.health_check():
            print(f"[+] Draw storage ready ({draw_service.db.count_draws()} shared draws)")
        else:
            print("[!] Draw storage is not reachable, sharing will fail")
    except DatabaseError as e:
        print(f"[!] Draw storage unavailable: {e}")

    if not config.GEMINI_API_KEY:
        print("[*] GEMINI_API_KEY not set, commentary will use the fallback message")

    print("[*] App is ready.")

    yield

    print("[*] Shutting down...")


app = FastAPI(
    title="World Cup Group Draw",
    description="Simulate the 2026 World Cup group draw under confederation rules",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# REQUEST BODIES
# ============================================================================

class CommitRequest(BaseModel):
    """Explicit placement; an empty body commits the pending placement."""

    team_id: Optional[str] = None
    group_index: Optional[int] = None


class SaveDrawRequest(BaseModel):
    drawData: Optional[Any] = None


def _http_error(e: Exception) -> HTTPException:
    """Map service and engine errors to HTTP errors."""
    if isinstance(e, (SessionNotFound, DrawNotFound, GroupNotFound)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PersistenceFailure):
        return HTTPException(status_code=500, detail=str(e))
    if isinstance(e, (PlacementDeadEnd, UnplaceableTeam, DrawValidationFailed)):
        logger.error(f"Draw failed: {e}")
        return HTTPException(status_code=500, detail=str(e))
    if isinstance(e, (DrawError, DrawIncomplete)):
        return HTTPException(status_code=409, detail=str(e))
    logger.exception("Unexpected error")
    return HTTPException(status_code=500, detail=str(e))


@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve a small index page."""
    return HTMLResponse(
        content="""
        <html>
        <head><title>World Cup Group Draw</title></head>
        <body style="font-family: sans-serif; padding: 40px;">
            <h1>World Cup Group Draw</h1>
            <p>API is running.</p>
            <h2>API Endpoints:</h2>
            <ul>
                <li><a href="/api/pots">GET /api/pots</a> - Pots and hosts</li>
                <li>POST /api/draws - Start a draw</li>
                <li>POST /api/draws/{id}/next - Draw the next team</li>
                <li>POST /api/draws/{id}/commit - Place the drawn team</li>
                <li>POST /api/draws/{id}/complete - Finish the draw instantly</li>
                <li>POST /api/draws/{id}/share - Get a share id</li>
                <li><a href="/docs">API Documentation</a></li>
            </ul>
        </body>
        </html>
        """,
        status_code=200
    )


@app.get("/api/pots")
async def get_pots():
    """Get the pots, group names and host placements."""
    return WORLD_CUP_2026.to_dict()


# ============================================================================
# DRAW SESSIONS
# ============================================================================

@app.post("/api/draws")
async def create_draw():
    """Start a new draw with the hosts already placed."""
    return draw_service.create_session().to_dict()


@app.post("/api/draws/load")
async def load_draw(id: str = Query(..., description="Shared draw id")):
    """
    Open a shared draw as a finished session.

    Falls back to a fresh draw when the id is unknown or the data is invalid.
    """
    session, error = draw_service.load_shared(id)
    return {"session": session.to_dict(), "error": error}


@app.get("/api/draws/{session_id}")
async def get_draw_session(session_id: str):
    """Get the state of a draw."""
    try:
        return draw_service.get_session(session_id).to_dict()
    except SessionNotFound as e:
        raise _http_error(e)


@app.delete("/api/draws/{session_id}")
async def delete_draw_session(session_id: str):
    """Discard a draw session."""
    try:
        draw_service.delete_session(session_id)
        return {"status": "deleted"}
    except SessionNotFound as e:
        raise _http_error(e)


@app.post("/api/draws/{session_id}/next")
async def draw_next(session_id: str):
    """
    Draw the next team.

    The team is not placed until /commit is called, so a client can run its
    reveal animation in between. Refused while a drawn team is still pending.

    Each step obeys the group rules, but there is no look-ahead: with the 2026
    pots most stepwise draws end invalid (see groupdraw.simulate). Use
    /complete for a draw that is checked as a whole.
    """
    try:
        placement = draw_service.draw_next(session_id)
        session = draw_service.get_session(session_id)
    except (DrawError, SessionNotFound) as e:
        raise _http_error(e)
    return {
        "placement": placement.model_dump(mode="json") if placement else None,
        "session": session.to_dict(),
    }


@app.post("/api/draws/{session_id}/commit")
async def commit_draw(session_id: str, body: Optional[CommitRequest] = None):
    """Place the drawn team (or an explicit team/group pair)."""
    body = body or CommitRequest()
    try:
        session = draw_service.commit(session_id, body.team_id, body.group_index)
    except (DrawError, SessionNotFound) as e:
        raise _http_error(e)
    return session.to_dict()


@app.post("/api/draws/{session_id}/cancel")
async def cancel_draw_step(session_id: str):
    """Discard the drawn team without placing it."""
    try:
        draw_service.cancel(session_id)
        return draw_service.get_session(session_id).to_dict()
    except SessionNotFound as e:
        raise _http_error(e)


@app.post("/api/draws/{session_id}/complete")
async def complete_draw(session_id: str):
    """Finish every remaining pot instantly."""
    try:
        return draw_service.complete(session_id).to_dict()
    except (DrawError, SessionNotFound) as e:
        raise _http_error(e)


@app.post("/api/draws/{session_id}/reset")
async def reset_draw(session_id: str):
    """Restart the draw."""
    try:
        return draw_service.reset(session_id).to_dict()
    except SessionNotFound as e:
        raise _http_error(e)


@app.get("/api/draws/{session_id}/validation")
async def validate_draw(session_id: str):
    """Check the groups against the confederation rules."""
    try:
        return draw_service.validate(session_id).model_dump(mode="json")
    except SessionNotFound as e:
        raise _http_error(e)


@app.post("/api/draws/{session_id}/share")
async def share_draw(session_id: str):
    """Store the finished draw and return its share id."""
    try:
        return {"id": draw_service.share(session_id)}
    except (SessionNotFound, PersistenceFailure, DrawIncomplete) as e:
        raise _http_error(e)


@app.post("/api/draws/{session_id}/analysis")
async def analyze_draw(
    session_id: str,
    group: Optional[str] = Query(None, description="Group name, e.g. A")
):
    """
    Commentary on a finished draw, or on one group.

    Rate limited; the model is an external paid service.
    """
    try:
        draw_service.get_session(session_id)
    except SessionNotFound as e:
        raise _http_error(e)

    allowed, wait_seconds = commentary_rate_limiter.try_acquire()
    if not allowed:
        return {
            "status": "rate_limited",
            "message": f"Please wait {wait_seconds} seconds before asking again",
            "retry_after": wait_seconds
        }

    try:
        analysis = await draw_service.analyze(session_id, group)
    except (SessionNotFound, GroupNotFound, DrawIncomplete) as e:
        raise _http_error(e)
    return {"status": "ok", "analysis": analysis}


# ============================================================================
# SHARED DRAWS
# ============================================================================

@app.post("/api/save-draw")
async def save_draw(body: SaveDrawRequest):
    """Store raw group data and return its id."""
    if not body.drawData:
        raise HTTPException(status_code=400, detail="drawData is required")
    try:
        return {"id": draw_service.save_draw(body.drawData)}
    except PersistenceFailure as e:
        raise _http_error(e)


@app.get("/api/get-draw")
async def get_draw(id: Optional[str] = Query(None, description="Shared draw id")):
    """Fetch raw group data by id."""
    if not id:
        raise HTTPException(status_code=400, detail="id parameter is required")
    try:
        return {"drawData": draw_service.fetch_draw(id)}
    except (DrawNotFound, PersistenceFailure) as e:
        raise _http_error(e)


@app.get("/health")
async def health():
    """Health check endpoint."""
    try:
        storage_ok = draw_service.db.health_check()
    except DatabaseError:
        storage_ok = False
    return {
        "status": "ok",
        "version": __version__,
        "storage": storage_ok,
        "sessions": draw_service.session_count(),
    }


# Run with: uvicorn groupdraw.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
