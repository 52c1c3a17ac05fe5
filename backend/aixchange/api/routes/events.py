"""Event Routes — public event pages, joining, and event solution submissions."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.api.dependencies import require_user
from aixchange.core.domain_types import EventStatus, EventType
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.schemas.event import EventOut, EventPage
from aixchange.schemas.solution import SolutionSubmission
from aixchange.services import event_service

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventPage)
async def list_events(
    featured: bool = Query(False),
    status_filter: EventStatus | None = Query(None, alias="status"),
    event_type: EventType | None = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await event_service.list_public(
        db, featured, status_filter,
        event_type.value if event_type else None, page, limit,
    )


@router.get("/{event_id}", response_model=EventOut)
async def get_event(event_id: str, db: AsyncSession = Depends(get_db)):
    return await event_service.view_public(db, event_id)


@router.post("/{event_id}/join")
async def join_event(
    event_id: str,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    participant = await event_service.join_event(db, event_id, user)
    return {"message": "Successfully joined event", "participant": participant}


@router.post("/{event_id}/solutions", status_code=status.HTTP_201_CREATED)
async def submit_event_solution(
    event_id: str,
    body: SolutionSubmission,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    solution = await event_service.submit_to_event(db, event_id, user, body)
    return {"data": solution}


@router.get("/{event_id}/solutions")
async def list_event_solutions(
    event_id: str,
    sort: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await event_service.list_event_solutions(db, event_id, sort)}
