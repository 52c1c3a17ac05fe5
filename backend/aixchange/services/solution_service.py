"""Solution Service — public catalogue, form submissions, votes and reviews.

Invariants:
    - Public reads only see is_published solutions
    - Vote tallies change through a single UPDATE ... SET col = col + 1 (no read-modify-write)
    - A user reviews a solution at most once (unique constraint backs the pre-check)
    - Every mutation writes its audit entry in the same transaction
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aixchange.core.domain_types import (
    PLACEHOLDER_IMAGE, AuditAction, EntityType, SolutionStatus, VoteDirection,
)
from aixchange.core.errors import BusinessRuleError, ResourceNotFoundError
from aixchange.core.solution_ranking import matches_search, sort_listing
from aixchange.models import Review, Solution, User
from aixchange.schemas.solution import (
    ReviewCreate, ReviewOut, SolutionListItem, SolutionOut, SolutionSubmission, VoteTally,
)
from aixchange.services import audit
from aixchange.services.auth_service import ensure_anonymous_user
from aixchange.services.solution_queries import (
    get_solution_or_404, review_stats, to_list_item,
)

logger = logging.getLogger(__name__)


async def list_published(
    db: AsyncSession,
    search: str | None = None,
    category: str | None = None,
    provider: str | None = None,
    sort: str = "recent",
) -> list[SolutionListItem]:
    query = (
        select(Solution)
        .options(selectinload(Solution.author))
        .where(Solution.is_published.is_(True))
        .order_by(Solution.created_at.desc())
    )
    if category:
        query = query.where(Solution.category == category)
    if provider:
        query = query.where(Solution.provider == provider)
    solutions = list((await db.execute(query)).scalars().all())
    if search:
        solutions = [
            s for s in solutions
            if matches_search(search, s.title, s.description, s.tags or [])
        ]
    stats = await review_stats(db, (s.id for s in solutions))
    items = [to_list_item(s, s.author, stats) for s in solutions]
    return sort_listing(items, sort)


async def get_published(db: AsyncSession, solution_id: str) -> SolutionListItem:
    solution = await get_solution_or_404(db, solution_id, with_author=True)
    if not solution.is_published:
        raise ResourceNotFoundError("Solution", solution_id)
    stats = await review_stats(db, [solution.id])
    return to_list_item(solution, solution.author, stats)


def build_solution(
    data: SolutionSubmission, author_id: str, status: SolutionStatus, **overrides,
) -> Solution:
    now = datetime.now(timezone.utc)
    fields = dict(
        title=data.title,
        description=data.description,
        category=data.category,
        provider=data.provider,
        launch_url=data.launch_url,
        source_code_url=data.source_code_url,
        token_cost=data.token_cost,
        rating=data.rating,
        status=status.value,
        tags=list(data.tags),
        image_url=data.image_url or PLACEHOLDER_IMAGE,
        resource_config=(
            data.resource_config.model_dump(exclude_none=True)
            if data.resource_config else None
        ),
        extra=data.metadata or {},
        author_id=author_id,
        is_published=True,
        published_at=now,
    )
    fields.update(overrides)
    return Solution(**fields)


async def submit_solution(
    db: AsyncSession, data: SolutionSubmission, user: User | None,
) -> SolutionOut:
    """Public form submission; anonymous when there is no session."""
    author_id = user.id if user else (await ensure_anonymous_user(db)).id
    solution = build_solution(data, author_id, SolutionStatus.ACTIVE)
    db.add(solution)
    await db.flush()
    audit.record(
        db, AuditAction.CREATE, EntityType.SOLUTION, solution.id, author_id,
        {"title": solution.title, "category": solution.category},
    )
    await db.commit()
    logger.info("Solution submitted", extra={"entity_id": solution.id, "user_id": author_id})
    return SolutionOut.model_validate(solution)


async def vote(
    db: AsyncSession, solution_id: str, direction: VoteDirection,
) -> VoteTally:
    column = "upvotes" if direction == VoteDirection.UP else "downvotes"
    result = await db.execute(
        update(Solution)
        .where(Solution.id == solution_id)
        .values({
            column: getattr(Solution, column) + 1,
            "total_votes": Solution.total_votes + 1,
        })
        .execution_options(synchronize_session=False),
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ResourceNotFoundError("Solution", solution_id)
    await db.commit()
    row = (await db.execute(
        select(Solution.upvotes, Solution.downvotes, Solution.total_votes)
        .where(Solution.id == solution_id),
    )).one()
    return VoteTally(upvotes=row.upvotes, downvotes=row.downvotes, total_votes=row.total_votes)


async def add_review(
    db: AsyncSession, solution_id: str, user: User, body: ReviewCreate,
) -> ReviewOut:
    await get_solution_or_404(db, solution_id)
    existing = await db.execute(
        select(Review.id).where(Review.solution_id == solution_id, Review.user_id == user.id),
    )
    if existing.first() is not None:
        raise BusinessRuleError("You have already reviewed this solution", "ALREADY_REVIEWED")
    review = Review(
        solution_id=solution_id, user_id=user.id,
        rating=body.rating, comment=body.comment,
    )
    try:
        db.add(review)
        await db.flush()
        audit.record(
            db, AuditAction.CREATE_REVIEW, EntityType.SOLUTION, solution_id, user.id,
            {"rating": body.rating},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise BusinessRuleError("You have already reviewed this solution", "ALREADY_REVIEWED")
    return ReviewOut.model_validate(review)
