"""Admin User Service — user listing and role changes."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.core.domain_types import AuditAction, EntityType
from aixchange.core.errors import BusinessRuleError, ResourceNotFoundError
from aixchange.models import Review, Solution, User
from aixchange.schemas.user import AdminUserItem, RoleUpdate
from aixchange.services import audit

logger = logging.getLogger(__name__)


async def _counts_by_user(db: AsyncSession, column) -> dict[str, int]:
    result = await db.execute(select(column, func.count()).group_by(column))
    return {uid: int(count) for uid, count in result.all()}


async def list_users(db: AsyncSession) -> list[AdminUserItem]:
    users = (await db.execute(select(User).order_by(User.created_at.desc()))).scalars().all()
    solutions = await _counts_by_user(db, Solution.author_id)
    reviews = await _counts_by_user(db, Review.user_id)
    return [
        AdminUserItem.model_validate(u).model_copy(update={
            "solution_count": solutions.get(u.id, 0),
            "review_count": reviews.get(u.id, 0),
        })
        for u in users
    ]


async def change_role(db: AsyncSession, admin: User, body: RoleUpdate) -> AdminUserItem:
    if not body.user_id or body.role is None:
        raise BusinessRuleError("User ID and role are required", "MISSING_FIELDS")
    if body.user_id == admin.id:
        raise BusinessRuleError("Cannot modify your own role", "SELF_ROLE_CHANGE")
    user = await db.get(User, body.user_id)
    if user is None:
        raise ResourceNotFoundError("User", body.user_id)

    previous = user.role
    user.role = body.role.value
    audit.record(
        db, AuditAction.UPDATE_USER_ROLE, EntityType.USER, user.id, admin.id,
        {"previousRole": previous, "newRole": user.role},
    )
    await db.commit()
    logger.info(
        f"Role changed {previous} -> {user.role}",
        extra={"entity_id": user.id, "user_id": admin.id},
    )
    return AdminUserItem.model_validate(user)
