"""Admin Event Routes — event CRUD, bulk operations and bulk import.

Invariants:
    - Every endpoint requires an ADMIN session (401 without session, 403 otherwise)
    - Static paths (/import, /bulk-*) are registered before /{event_id}
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.api.dependencies import require_admin
from aixchange.api.routes.admin_solutions import import_response
from aixchange.core.domain_types import EventStatus, EventType, ImportMode
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.schemas.event import (
    AdminEventItem, AdminEventPage, EventCreate, EventIdsRequest, EventImportPayload,
    EventStatusUpdate, EventUpdate, EventUpdateWithId,
)
from aixchange.services import admin_events
from aixchange.services.bulk_import import BulkImporter
from aixchange.services.image_service import ImageService, get_image_service

router = APIRouter(prefix="/api/admin/events", tags=["admin"])


@router.get("", response_model=AdminEventPage)
async def list_events(
    status_filter: EventStatus | None = Query(None, alias="status"),
    event_type: EventType | None = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_events.list_events(
        db, status_filter, event_type.value if event_type else None, page, limit,
    )


@router.post("", response_model=AdminEventItem, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    images: ImageService = Depends(get_image_service),
):
    return await admin_events.create_event(db, admin, body, images)


@router.patch("", response_model=AdminEventItem)
async def update_event_by_body(
    body: EventUpdateWithId,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_events.update_event(db, admin, body.id, body.changes())


@router.post("/import")
async def import_events(
    body: EventImportPayload,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    images: ImageService = Depends(get_image_service),
):
    report = await BulkImporter(db, admin, images).import_events(body, body.mode)
    return import_response(report, "events")


@router.post("/bulk-submission")
async def bulk_submit_events(
    body: EventImportPayload,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    images: ImageService = Depends(get_image_service),
):
    report = await BulkImporter(db, admin, images).import_events(body, ImportMode.PARTIAL)
    return import_response(report, "events")


@router.delete("/bulk-delete")
async def bulk_delete(
    body: EventIdsRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    count = await admin_events.bulk_delete(db, admin, body.event_ids)
    return {"success": True, "count": count}


@router.post("/bulk-update")
async def bulk_update(
    body: EventStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    count = await admin_events.bulk_update_status(db, admin, body)
    return {"success": True, "count": count}


@router.patch("/{event_id}", response_model=AdminEventItem)
async def update_event(
    event_id: str,
    body: EventUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_events.update_event(db, admin, event_id, body.changes())


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await admin_events.delete_event(db, admin, event_id)
    return {"success": True}
