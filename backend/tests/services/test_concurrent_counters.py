"""Concurrent Counters — votes and capacity-checked joins under simultaneous requests.

Invariants:
    - N concurrent upvotes leave upvotes == total_votes == N
    - N concurrent joins on an event capped at k < N admit exactly k participants;
      the other N - k fail with EVENT_FULL
    - Every caller works on its own session and connection
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from aixchange.core.domain_types import (
    EventStatus, EventType, SolutionStatus, UserRole, VoteDirection,
)
from aixchange.core.errors import BusinessRuleError
from aixchange.db.base import Base
from aixchange.models import Event, EventParticipant, Solution, User
from aixchange.services import event_service, solution_service

CALLERS = 8
CAPACITY = 3


@pytest.fixture
async def session_factory(tmp_path):
    # In-memory SQLite hands every session the same connection; a file does not.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def _seed_users(factory, count: int) -> list[User]:
    async with factory() as db:
        users = [
            User(email=f"user{i}@example.com", name=f"User {i}", role=UserRole.USER.value)
            for i in range(count)
        ]
        db.add_all(users)
        await db.commit()
        return users


async def test_concurrent_upvotes_are_all_counted(session_factory):
    author, = await _seed_users(session_factory, 1)
    async with session_factory() as db:
        solution = Solution(
            title="Vision API", description="Detects objects in images",
            launch_url="https://example.com/app", category="Computer Vision",
            provider="Acme", status=SolutionStatus.ACTIVE.value, tags=["vision"],
            is_published=True, author_id=author.id,
        )
        db.add(solution)
        await db.commit()
        solution_id = solution.id

    async def upvote():
        async with session_factory() as db:
            return await solution_service.vote(db, solution_id, VoteDirection.UP)

    await asyncio.gather(*(upvote() for _ in range(CALLERS)))

    async with session_factory() as db:
        row = (await db.execute(
            select(Solution.upvotes, Solution.downvotes, Solution.total_votes)
            .where(Solution.id == solution_id),
        )).one()
    assert tuple(row) == (CALLERS, 0, CALLERS)


async def test_concurrent_joins_respect_capacity(session_factory):
    creator, *joiners = await _seed_users(session_factory, CALLERS + 1)
    start = datetime.now(timezone.utc) + timedelta(days=1)
    async with session_factory() as db:
        event = Event(
            title="Spring Hackathon", description="Build things", short_description="Build",
            rules="Be nice", type=EventType.HACKATHON.value, status=EventStatus.ACTIVE.value,
            start_date=start, end_date=start + timedelta(days=2),
            max_participants=CAPACITY, created_by_id=creator.id,
        )
        db.add(event)
        await db.commit()
        event_id = event.id

    async def join(user):
        async with session_factory() as db:
            try:
                await event_service.join_event(db, event_id, user)
            except BusinessRuleError as e:
                return e.code
            return "joined"

    outcomes = await asyncio.gather(*(join(u) for u in joiners))

    assert outcomes.count("joined") == CAPACITY
    assert outcomes.count("EVENT_FULL") == CALLERS - CAPACITY
    async with session_factory() as db:
        count = (await db.execute(
            select(Event.participant_count).where(Event.id == event_id),
        )).scalar_one()
        participants = (await db.execute(
            select(func.count(EventParticipant.id)).where(EventParticipant.event_id == event_id),
        )).scalar_one()
    assert count == CAPACITY
    assert participants == CAPACITY
