"""Solution Queries — shared lookups and response builders for solution endpoints.

Invariants:
    - Builders never touch lazy relationships; authors are loaded with selectinload
    - review_stats returns (average, count) per solution id; missing ids mean no reviews
"""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aixchange.core.errors import ResourceNotFoundError
from aixchange.models import Review, Solution, User
from aixchange.schemas.solution import (
    AdminAuthorSummary, AdminSolutionItem, AuthorSummary, SolutionListItem, SolutionOut,
)

ReviewStats = dict[str, tuple[float, int]]


async def review_stats(db: AsyncSession, solution_ids: Iterable[str]) -> ReviewStats:
    ids = list(solution_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Review.solution_id, func.avg(Review.rating), func.count(Review.id))
        .where(Review.solution_id.in_(ids))
        .group_by(Review.solution_id),
    )
    return {sid: (float(avg or 0), int(count)) for sid, avg, count in result.all()}


async def get_solution_or_404(db: AsyncSession, solution_id: str, with_author: bool = False) -> Solution:
    query = select(Solution).where(Solution.id == solution_id)
    if with_author:
        query = query.options(selectinload(Solution.author))
    solution = (await db.execute(query)).scalar_one_or_none()
    if solution is None:
        raise ResourceNotFoundError("Solution", solution_id)
    return solution


def to_list_item(solution: Solution, author: User | None, stats: ReviewStats) -> SolutionListItem:
    average, count = stats.get(solution.id, (0.0, 0))
    base = SolutionOut.model_validate(solution).model_dump()
    base["rating"] = average
    return SolutionListItem(
        **base,
        author=AuthorSummary.model_validate(author) if author else None,
        review_count=count,
    )


def to_admin_item(solution: Solution, author: User | None, stats: ReviewStats) -> AdminSolutionItem:
    _, count = stats.get(solution.id, (0.0, 0))
    return AdminSolutionItem(
        **SolutionOut.model_validate(solution).model_dump(),
        author=AdminAuthorSummary.model_validate(author) if author else None,
        review_count=count,
    )
