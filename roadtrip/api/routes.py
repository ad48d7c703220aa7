"""
API Routes for the Road Trip Planner.
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from ..exceptions import InvalidTripRequest, LocationNotFound, RouteNotFound
from ..models.session import PlannerSession, session_store
from ..services.trip_planner import get_trip_planner


router = APIRouter(prefix="/api", tags=["road-trip-planner"])


# Request/Response Models
class CreateSessionResponse(BaseModel):
    session_id: str


class PlanRequest(BaseModel):
    session_id: str
    origin: str
    destination: str


class SessionStatusResponse(BaseModel):
    session_id: str
    state: str
    error: Optional[str] = None
    extending_music: bool = False
    plan: Optional[dict] = None


def _get_session(session_id: str) -> PlannerSession:
    session = session_store.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# Endpoints

@router.post("/session", response_model=CreateSessionResponse)
async def create_session():
    """Create a new planner session."""
    session = session_store.create()
    return CreateSessionResponse(session_id=session.session_id)


@router.post("/plan")
async def build_plan(request: PlanRequest):
    """Plan a trip: route, map, weather and the first page of music."""
    session = _get_session(request.session_id)
    planner = get_trip_planner()

    try:
        await planner.build_plan(session, request.origin, request.destination)
    except InvalidTripRequest as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (LocationNotFound, RouteNotFound) as e:
        session_store.update(session)
        raise HTTPException(status_code=422, detail=str(e))

    session_store.update(session)
    return session.to_status_dict()


@router.post("/plan/{session_id}/music")
async def load_more_music(session_id: str):
    """Append the next page of tracks to the current plan."""
    session = _get_session(session_id)
    planner = get_trip_planner()

    await planner.extend_music(session)
    session_store.update(session)
    return session.to_status_dict()


@router.get("/plan/{session_id}", response_model=SessionStatusResponse)
async def get_plan(session_id: str):
    """Get the current plan and planner state."""
    session = _get_session(session_id)
    return SessionStatusResponse(**session.to_status_dict())
