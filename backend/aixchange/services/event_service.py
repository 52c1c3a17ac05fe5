"""Event Service — public event listing, joining, and event solution submissions.

Invariants:
    - Only is_public events are visible through the public endpoints
    - Joining: the capacity check and participant_count increment are one conditional UPDATE;
      the participant row and the increment commit together
    - A user participates in an event at most once (unique constraint backs the pre-check)
    - Submissions only to ACTIVE events; submission_count incremented atomically
"""

import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aixchange.core.domain_types import (
    JOINABLE_EVENT_STATUSES, AuditAction, EntityType, EventStatus, ParticipantRole,
    SolutionStatus,
)
from aixchange.core.errors import BusinessRuleError, ResourceNotFoundError
from aixchange.core.solution_ranking import normalize_event_solution_sort, sort_listing
from aixchange.models import Event, EventParticipant, Solution, User
from aixchange.schemas.common import Pagination, page_count
from aixchange.schemas.event import EventOut, EventPage, ParticipantOut
from aixchange.schemas.solution import SolutionListItem, SolutionOut, SolutionSubmission
from aixchange.services import audit
from aixchange.services.solution_queries import review_stats, to_list_item
from aixchange.services.solution_service import build_solution

logger = logging.getLogger(__name__)

_VOTE_ORDER = {
    "most-voted": Solution.total_votes.desc(),
    "most-upvoted": Solution.upvotes.desc(),
}


async def get_event_or_404(db: AsyncSession, event_id: str) -> Event:
    event = (await db.execute(select(Event).where(Event.id == event_id))).scalar_one_or_none()
    if event is None:
        raise ResourceNotFoundError("Event", event_id)
    return event


async def list_public(
    db: AsyncSession,
    featured: bool = False,
    status: EventStatus | None = None,
    event_type: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> EventPage:
    conditions = [Event.is_public.is_(True)]
    if featured:
        conditions += [Event.is_promoted.is_(True), Event.status == EventStatus.ACTIVE.value]
    if status:
        conditions.append(Event.status == status.value)
    if event_type:
        conditions.append(Event.type == event_type)

    total = (await db.execute(select(func.count(Event.id)).where(*conditions))).scalar_one()
    events = (await db.execute(
        select(Event).where(*conditions)
        .order_by(Event.start_date.asc())
        .offset((page - 1) * limit).limit(limit),
    )).scalars().all()
    return EventPage(
        events=[EventOut.model_validate(e) for e in events],
        pagination=Pagination(
            total=total, pages=page_count(total, limit), page=page, limit=limit,
        ),
    )


async def view_public(db: AsyncSession, event_id: str) -> EventOut:
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.is_public.is_(True))
        .values(view_count=Event.view_count + 1)
        .execution_options(synchronize_session=False),
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ResourceNotFoundError("Event", event_id)
    await db.commit()
    event = (await db.execute(
        select(Event).where(Event.id == event_id)
        .execution_options(populate_existing=True),
    )).scalar_one()
    return EventOut.model_validate(event)


async def join_event(db: AsyncSession, event_id: str, user: User) -> ParticipantOut:
    event = await get_event_or_404(db, event_id)
    if EventStatus(event.status) not in JOINABLE_EVENT_STATUSES:
        raise BusinessRuleError("Event is not accepting participants", "EVENT_NOT_JOINABLE")

    existing = await db.execute(
        select(EventParticipant.id)
        .where(EventParticipant.event_id == event_id, EventParticipant.user_id == user.id),
    )
    if existing.first() is not None:
        raise BusinessRuleError("Already participating in this event", "ALREADY_PARTICIPATING")

    title = event.title
    claimed = await db.execute(
        update(Event)
        .where(
            Event.id == event_id,
            Event.status.in_([s.value for s in JOINABLE_EVENT_STATUSES]),
            or_(
                Event.max_participants.is_(None),
                Event.participant_count < Event.max_participants,
            ),
        )
        .values(participant_count=Event.participant_count + 1)
        .execution_options(synchronize_session=False),
    )
    if claimed.rowcount == 0:
        await db.rollback()
        raise BusinessRuleError("Event has reached maximum participants", "EVENT_FULL")

    participant = EventParticipant(
        user_id=user.id, event_id=event_id, role=ParticipantRole.PARTICIPANT.value,
    )
    try:
        db.add(participant)
        await db.flush()
        audit.record(
            db, AuditAction.JOIN_EVENT, EntityType.EVENT, event_id, user.id,
            {"eventTitle": title, "participantRole": ParticipantRole.PARTICIPANT.value},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise BusinessRuleError("Already participating in this event", "ALREADY_PARTICIPATING")
    logger.info("User joined event", extra={"entity_id": event_id, "user_id": user.id})
    return ParticipantOut.model_validate(participant)


async def submit_to_event(
    db: AsyncSession, event_id: str, user: User, data: SolutionSubmission,
) -> SolutionOut:
    event = await get_event_or_404(db, event_id)
    if event.status != EventStatus.ACTIVE.value:
        raise BusinessRuleError("Event is not accepting submissions", "EVENT_NOT_ACTIVE")

    title = event.title
    solution = build_solution(data, user.id, SolutionStatus.PENDING, event_id=event_id)
    db.add(solution)
    await db.flush()
    await db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(submission_count=Event.submission_count + 1)
        .execution_options(synchronize_session=False),
    )
    audit.record(
        db, AuditAction.SUBMIT_SOLUTION, EntityType.EVENT, event_id, user.id,
        {"solutionId": solution.id, "solutionTitle": solution.title, "eventTitle": title},
    )
    await db.commit()
    logger.info("Solution submitted to event", extra={"entity_id": event_id, "user_id": user.id})
    return SolutionOut.model_validate(solution)


async def list_event_solutions(
    db: AsyncSession, event_id: str, sort: str | None = None,
) -> list[SolutionListItem]:
    await get_event_or_404(db, event_id)
    sort = normalize_event_solution_sort(sort)
    query = (
        select(Solution)
        .options(selectinload(Solution.author))
        .where(Solution.event_id == event_id, Solution.is_published.is_(True))
    )
    if sort in _VOTE_ORDER:
        query = query.order_by(_VOTE_ORDER[sort], Solution.created_at.desc())
    else:
        query = query.order_by(Solution.created_at.desc())
    solutions = (await db.execute(query)).scalars().all()
    stats = await review_stats(db, (s.id for s in solutions))
    items = [to_list_item(s, s.author, stats) for s in solutions]
    return sort_listing(items, sort) if sort == "rating" else items
