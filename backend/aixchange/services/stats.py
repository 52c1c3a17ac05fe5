"""Statistics — headline counts for the landing and community pages."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.core.domain_types import EventStatus, SolutionStatus, UserRole
from aixchange.models import Event, Solution, User


async def _count(db: AsyncSession, column, *conditions) -> int:
    return (await db.execute(select(func.count(column)).where(*conditions))).scalar_one()


async def platform_stats(db: AsyncSession) -> dict:
    return {
        "solutions": {
            "total": await _count(db, Solution.id),
            "active": await _count(db, Solution.id, Solution.status == SolutionStatus.ACTIVE.value),
            "pending": await _count(db, Solution.id, Solution.status == SolutionStatus.PENDING.value),
        },
        "community": {
            "members": await _count(db, User.id, User.role != UserRole.ADMIN.value),
        },
    }


async def community_stats(db: AsyncSession) -> dict:
    return {
        "totalUsers": await _count(db, User.id, User.is_active.is_(True)),
        "totalSolutions": await _count(
            db, Solution.id, Solution.status == SolutionStatus.ACTIVE.value,
        ),
        "totalEvents": await _count(
            db, Event.id,
            Event.is_public.is_(True), Event.status != EventStatus.ARCHIVED.value,
        ),
    }
