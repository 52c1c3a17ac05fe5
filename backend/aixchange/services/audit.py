"""Audit Trail — appends AuditLog rows inside the caller's transaction.

Invariants:
    - record() only adds to the session; the caller commits (or rolls back) with its own work
"""

from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.core.domain_types import AuditAction, EntityType
from aixchange.models import AuditLog


def record(
    db: AsyncSession,
    action: AuditAction,
    entity_type: EntityType,
    entity_id: str,
    user_id: str | None,
    metadata: dict | None = None,
) -> AuditLog:
    entry = AuditLog(
        action=action.value,
        entity_type=entity_type.value,
        entity_id=entity_id,
        user_id=user_id,
        extra=metadata or {},
    )
    db.add(entry)
    return entry
