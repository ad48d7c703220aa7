"""
Session management - Tracks the planner state for one user.
"""
from pydantic import BaseModel, Field, PrivateAttr
from typing import Optional
from datetime import datetime
from enum import Enum
import asyncio
import uuid

from .trip import MusicCredential, TripPlan


class PlannerState(str, Enum):
    """Current state of the planner session."""
    IDLE = "idle"  # Nothing planned yet
    PLANNING = "planning"  # Build in progress
    READY = "ready"  # Plan available
    FAILED = "failed"  # Last build aborted


class PlannerSession(BaseModel):
    """Planner session holding the current plan and music pagination state."""
    session_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique session identifier"
    )
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    state: PlannerState = Field(
        default=PlannerState.IDLE,
        description="Current planner state"
    )
    plan: Optional[TripPlan] = None
    error: Optional[str] = Field(
        None,
        description="User-facing message of the last aborted build"
    )

    # Music pagination
    credential: Optional[MusicCredential] = None
    music_offset: int = Field(
        default=0,
        ge=0,
        description="Offset of the last fetched music page"
    )
    extending_music: bool = False

    # Monotonic operation counter; only the latest operation may commit
    sequence: int = 0

    _music_lock: asyncio.Lock = PrivateAttr(default_factory=asyncio.Lock)

    @property
    def music_lock(self) -> asyncio.Lock:
        return self._music_lock

    def next_sequence(self) -> int:
        """Issue a sequence number, superseding every in-flight operation."""
        self.sequence += 1
        return self.sequence

    def is_current(self, sequence: int) -> bool:
        return sequence == self.sequence

    def start_planning(self) -> int:
        """Enter planning and drop the music state of the previous plan."""
        ticket = self.next_sequence()
        self.state = PlannerState.PLANNING
        self.error = None
        self.music_offset = 0
        self.credential = None
        self.updated_at = datetime.now()
        return ticket

    def complete(self, plan: TripPlan, credential: Optional[MusicCredential]):
        """Store a finished plan."""
        self.plan = plan
        self.credential = credential
        self.music_offset = 0
        self.state = PlannerState.READY
        self.updated_at = datetime.now()

    def fail(self, message: str):
        """Record an aborted build. No partial plan is kept."""
        self.plan = None
        self.credential = None
        self.error = message
        self.state = PlannerState.FAILED
        self.updated_at = datetime.now()

    def can_extend_music(self) -> bool:
        return (
            self.state == PlannerState.READY
            and self.plan is not None
            and bool(self.plan.origin)
            and bool(self.plan.destination)
            and self.credential is not None
        )

    def to_status_dict(self) -> dict:
        """Get a summary of the session for display."""
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "error": self.error,
            "extending_music": self.extending_music,
            "plan": self.plan.to_display_dict() if self.plan else None,
        }


# In-memory session storage (would be replaced with database in production)
class SessionStore:
    """Simple in-memory session store."""

    def __init__(self):
        self._sessions: dict[str, PlannerSession] = {}

    def create(self) -> PlannerSession:
        """Create a new session."""
        session = PlannerSession()
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[PlannerSession]:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def update(self, session: PlannerSession):
        """Update a session."""
        self._sessions[session.session_id] = session

    def delete(self, session_id: str):
        """Delete a session."""
        self._sessions.pop(session_id, None)


# Global session store
session_store = SessionStore()
