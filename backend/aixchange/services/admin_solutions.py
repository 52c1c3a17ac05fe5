"""Admin Solution Service — full catalogue management for administrators.

Invariants:
    - Deleting a solution removes its reviews and resources in the same transaction
    - Bulk operations are single transactions with one audit entry each
    - Unknown ids answer 404 for single-item operations
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aixchange.core.domain_types import AuditAction, EntityType, SolutionStatus
from aixchange.models import Resource, Review, Solution, User
from aixchange.schemas.solution import (
    AdminSolutionItem, SolutionStatusUpdate, SolutionSubmission, SolutionUpdate,
)
from aixchange.services import audit
from aixchange.services.solution_queries import (
    get_solution_or_404, review_stats, to_admin_item,
)
from aixchange.services.solution_service import build_solution

logger = logging.getLogger(__name__)


async def list_all(db: AsyncSession) -> list[AdminSolutionItem]:
    solutions = (await db.execute(
        select(Solution).options(selectinload(Solution.author))
        .order_by(Solution.created_at.desc()),
    )).scalars().all()
    stats = await review_stats(db, (s.id for s in solutions))
    return [to_admin_item(s, s.author, stats) for s in solutions]


async def create(db: AsyncSession, admin: User, data: SolutionSubmission) -> AdminSolutionItem:
    solution = build_solution(data, admin.id, data.stored_status)
    db.add(solution)
    await db.flush()
    audit.record(
        db, AuditAction.CREATE, EntityType.SOLUTION, solution.id, admin.id,
        {"title": solution.title, "category": solution.category},
    )
    await db.commit()
    return to_admin_item(solution, admin, {})


async def update_one(
    db: AsyncSession, admin: User, solution_id: str, data: SolutionUpdate,
) -> AdminSolutionItem:
    solution = await get_solution_or_404(db, solution_id, with_author=True)
    solution.title = data.title
    solution.description = data.description
    solution.category = data.category
    solution.provider = data.provider
    solution.launch_url = data.launch_url
    solution.source_code_url = data.source_code_url
    solution.token_cost = data.token_cost
    solution.rating = data.rating
    solution.status = data.stored_status.value
    solution.tags = list(data.tags)
    solution.is_published = data.is_published
    if data.image_url:
        solution.image_url = data.image_url
    if data.resource_config is not None:
        solution.resource_config = data.resource_config.model_dump(exclude_none=True)
    if data.metadata is not None:
        solution.extra = data.metadata
    audit.record(
        db, AuditAction.UPDATE, EntityType.SOLUTION, solution.id, admin.id,
        {
            "title": solution.title,
            "category": solution.category,
            "provider": solution.provider,
            "status": solution.status,
        },
    )
    await db.commit()
    stats = await review_stats(db, [solution.id])
    return to_admin_item(solution, solution.author, stats)


async def _delete_rows(db: AsyncSession, ids: list[str]) -> int:
    await db.execute(delete(Review).where(Review.solution_id.in_(ids)))
    await db.execute(delete(Resource).where(Resource.solution_id.in_(ids)))
    result = await db.execute(
        delete(Solution).where(Solution.id.in_(ids))
        .execution_options(synchronize_session=False),
    )
    return result.rowcount


async def delete_one(db: AsyncSession, admin: User, solution_id: str) -> None:
    solution = await get_solution_or_404(db, solution_id)
    title = solution.title
    await _delete_rows(db, [solution_id])
    audit.record(
        db, AuditAction.DELETE, EntityType.SOLUTION, solution_id, admin.id, {"title": title},
    )
    await db.commit()
    logger.info("Solution deleted", extra={"entity_id": solution_id, "user_id": admin.id})


async def bulk_delete(db: AsyncSession, admin: User, solution_ids: list[str]) -> int:
    count = await _delete_rows(db, solution_ids)
    audit.record(
        db, AuditAction.BULK_DELETE, EntityType.SOLUTION, "BULK_DELETE", admin.id,
        {"solutionIds": solution_ids, "count": count},
    )
    await db.commit()
    return count


async def bulk_update_status(db: AsyncSession, admin: User, body: SolutionStatusUpdate) -> int:
    status: SolutionStatus = body.status
    result = await db.execute(
        update(Solution).where(Solution.id.in_(body.solution_ids))
        .values(status=status.value)
        .execution_options(synchronize_session=False),
    )
    audit.record(
        db, AuditAction.BULK_UPDATE, EntityType.SOLUTION, "BULK_UPDATE", admin.id,
        {"solutionIds": body.solution_ids, "status": status.value, "count": result.rowcount},
    )
    await db.commit()
    return result.rowcount
