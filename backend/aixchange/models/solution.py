"""Solution ORM — a listed AI tool/service and its vote tallies.

Invariants:
    - upvotes, downvotes, total_votes only change through atomic SQL increments
    - total_votes == upvotes + downvotes
    - event_id is NULL unless the solution was submitted to an event
    - Deleting a solution deletes its reviews and resources (services/admin_solutions.py)

Design Decisions:
    - `extra` attribute maps to the "metadata" column: `metadata` is reserved on
      declarative classes
    - tags stored as JSON list: portable across PostgreSQL and SQLite
"""

from datetime import datetime

from sqlalchemy import (
    JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aixchange.core.domain_types import SolutionStatus
from aixchange.db.base import Base, new_id, utc_now


class Solution(Base):
    __tablename__ = "solutions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[str] = mapped_column(String(50), nullable=False, default="1.0.0")
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="Other")
    provider: Mapped[str] = mapped_column(String(100), nullable=False, default="Unknown")
    launch_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    source_code_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    token_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SolutionStatus.PENDING.value,
    )
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    resource_config: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    extra: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    event_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("events.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now,
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    author: Mapped["User"] = relationship("User", lazy="raise")  # noqa: F821
