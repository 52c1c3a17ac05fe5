"""Admin Event Service — event CRUD, bulk status changes and image-backed creation.

Invariants:
    - A created event without imageUrl gets a generated banner; generation failure
      leaves it empty and never fails the request
    - Updates only touch the fields the caller sent; the audit entry lists them
    - Deleting an event removes its participants and detaches its solutions
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aixchange.core.domain_types import AuditAction, EntityType, EventStatus
from aixchange.core.errors import BusinessRuleError, ResourceNotFoundError
from aixchange.models import Event, EventParticipant, Solution, User
from aixchange.schemas.common import Pagination, page_count
from aixchange.schemas.event import (
    AdminEventItem, AdminEventPage, EventCreate, EventCreator, EventOut, EventStatusUpdate,
)
from aixchange.services import audit
from aixchange.services.event_service import get_event_or_404
from aixchange.services.image_service import ImageService, event_prompt

logger = logging.getLogger(__name__)

NULLABLE_EVENT_FIELDS = frozenset({
    "rules", "image_url", "banner_url", "prizes", "max_participants",
})


def _stored(value):
    """Enum members are stored by value."""
    return getattr(value, "value", value)


async def _solution_counts(db: AsyncSession, event_ids: list[str]) -> dict[str, int]:
    if not event_ids:
        return {}
    result = await db.execute(
        select(Solution.event_id, func.count(Solution.id))
        .where(Solution.event_id.in_(event_ids))
        .group_by(Solution.event_id),
    )
    return {eid: int(count) for eid, count in result.all()}


def _admin_item(event: Event, creator: User | None, solution_count: int) -> AdminEventItem:
    return AdminEventItem(
        **EventOut.model_validate(event).model_dump(),
        created_by=EventCreator.model_validate(creator) if creator else None,
        solution_count=solution_count,
    )


async def list_events(
    db: AsyncSession,
    status: EventStatus | None = None,
    event_type: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> AdminEventPage:
    conditions = []
    if status:
        conditions.append(Event.status == status.value)
    if event_type:
        conditions.append(Event.type == event_type)
    total = (await db.execute(select(func.count(Event.id)).where(*conditions))).scalar_one()
    events = (await db.execute(
        select(Event).options(selectinload(Event.created_by)).where(*conditions)
        .order_by(Event.created_at.desc())
        .offset((page - 1) * limit).limit(limit),
    )).scalars().all()
    counts = await _solution_counts(db, [e.id for e in events])
    return AdminEventPage(
        events=[_admin_item(e, e.created_by, counts.get(e.id, 0)) for e in events],
        pagination=Pagination(
            total=total, pages=page_count(total, limit), page=page, limit=limit,
        ),
    )


async def create_event(
    db: AsyncSession, admin: User, data: EventCreate, images: ImageService,
) -> AdminEventItem:
    image_url = data.image_url
    image_generated = False
    if not image_url:
        image_url = await images.generate_event_image(
            event_prompt(data.title, data.short_description),
        ) or None
        image_generated = bool(image_url)

    fields = data.model_dump()
    fields.update(
        type=data.type.value,
        status=data.status.value,
        image_url=image_url,
        created_by_id=admin.id,
    )
    event = Event(**fields)
    db.add(event)
    await db.flush()
    audit.record(
        db, AuditAction.CREATE_EVENT, EntityType.EVENT, event.id, admin.id,
        {"eventType": event.type, "title": event.title, "imageGenerated": image_generated},
    )
    await db.commit()
    logger.info("Event created", extra={"entity_id": event.id, "user_id": admin.id})
    return _admin_item(event, admin, 0)


async def update_event(
    db: AsyncSession, admin: User, event_id: str, changes: dict,
) -> AdminEventItem:
    event = (await db.execute(
        select(Event).options(selectinload(Event.created_by)).where(Event.id == event_id),
    )).scalar_one_or_none()
    if event is None:
        raise ResourceNotFoundError("Event", event_id)
    changes = {
        name: value for name, value in changes.items()
        if value is not None or name in NULLABLE_EVENT_FIELDS
    }

    start = changes.get("start_date", event.start_date)
    end = changes.get("end_date", event.end_date)
    if start is not None and end is not None and _naive(end) <= _naive(start):
        raise BusinessRuleError("End date must be after start date", "INVALID_DATE_RANGE")

    if changes.get("created_by_id"):
        creator = await db.get(User, changes["created_by_id"])
        if creator is None:
            raise ResourceNotFoundError("User", changes["created_by_id"])

    for name, value in changes.items():
        setattr(event, name, _stored(value))
    audit.record(
        db, AuditAction.UPDATE_EVENT, EntityType.EVENT, event.id, admin.id,
        {"title": event.title, "updatedFields": sorted(changes)},
    )
    await db.commit()
    event = (await db.execute(
        select(Event).options(selectinload(Event.created_by))
        .where(Event.id == event_id)
        .execution_options(populate_existing=True),
    )).scalar_one()
    counts = await _solution_counts(db, [event.id])
    return _admin_item(event, event.created_by, counts.get(event.id, 0))


def _naive(value: datetime) -> datetime:
    """UTC wall time; SQLite hands back naive datetimes."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def _delete_rows(db: AsyncSession, ids: list[str]) -> int:
    await db.execute(
        update(Solution).where(Solution.event_id.in_(ids)).values(event_id=None)
        .execution_options(synchronize_session=False),
    )
    await db.execute(delete(EventParticipant).where(EventParticipant.event_id.in_(ids)))
    result = await db.execute(
        delete(Event).where(Event.id.in_(ids)).execution_options(synchronize_session=False),
    )
    return result.rowcount


async def delete_event(db: AsyncSession, admin: User, event_id: str) -> None:
    event = await get_event_or_404(db, event_id)
    title = event.title
    await _delete_rows(db, [event_id])
    audit.record(
        db, AuditAction.DELETE_EVENT, EntityType.EVENT, event_id, admin.id, {"title": title},
    )
    await db.commit()
    logger.info("Event deleted", extra={"entity_id": event_id, "user_id": admin.id})


async def bulk_delete(db: AsyncSession, admin: User, event_ids: list[str]) -> int:
    count = await _delete_rows(db, event_ids)
    audit.record(
        db, AuditAction.BULK_DELETE_EVENTS, EntityType.EVENT, "BULK_DELETE", admin.id,
        {"eventIds": event_ids, "count": count},
    )
    await db.commit()
    return count


async def bulk_update_status(db: AsyncSession, admin: User, body: EventStatusUpdate) -> int:
    result = await db.execute(
        update(Event).where(Event.id.in_(body.event_ids))
        .values(status=body.status.value)
        .execution_options(synchronize_session=False),
    )
    audit.record(
        db, AuditAction.BULK_UPDATE_EVENTS, EntityType.EVENT, "BULK_UPDATE", admin.id,
        {"eventIds": body.event_ids, "status": body.status.value, "count": result.rowcount},
    )
    await db.commit()
    return result.rowcount
