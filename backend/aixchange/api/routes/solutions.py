"""Solution Routes — public catalogue, form submission, votes and reviews.

Invariants:
    - Form submissions: every value is JSON-decoded when possible, else kept as text
    - Form payloads are validated with SolutionSubmission; failures answer 400 with details
    - Vote and review require a session; submission falls back to the anonymous author
"""

import json
import logging

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.api.dependencies import get_optional_user, require_user
from aixchange.api.error_handlers import validation_details
from aixchange.core.errors import PayloadValidationError
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.schemas.solution import (
    ReviewCreate, SolutionListItem, SolutionSubmission, VoteRequest, VoteTally,
)
from aixchange.services import solution_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/solutions", tags=["solutions"])


def decode_form_value(raw):
    """JSON-decode a form field when it parses, otherwise keep the raw value."""
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@router.get("", response_model=list[SolutionListItem])
async def list_solutions(
    search: str | None = Query(None),
    category: str | None = Query(None),
    provider: str | None = Query(None),
    sort: str = Query("recent"),
    db: AsyncSession = Depends(get_db),
):
    return await solution_service.list_published(db, search, category, provider, sort)


@router.get("/{solution_id}", response_model=SolutionListItem)
async def get_solution(solution_id: str, db: AsyncSession = Depends(get_db)):
    return await solution_service.get_published(db, solution_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_solution(
    request: Request,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    form = await request.form()
    raw = {key: decode_form_value(value) for key, value in form.items()}
    try:
        data = SolutionSubmission.model_validate(raw)
    except ValidationError as e:
        raise PayloadValidationError(validation_details(e.errors()))
    return await solution_service.submit_solution(db, data, user)


@router.post("/{solution_id}/vote", response_model=VoteTally)
async def vote(
    solution_id: str,
    body: VoteRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return await solution_service.vote(db, solution_id, body.vote)


@router.post("/{solution_id}/reviews", status_code=status.HTTP_201_CREATED)
async def create_review(
    solution_id: str,
    body: ReviewCreate,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return await solution_service.add_review(db, solution_id, user, body)
