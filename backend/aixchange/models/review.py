"""Review ORM — a user's 1-5 rating of a solution.

Invariants:
    - (solution_id, user_id) is unique: one review per user per solution
    - 1 <= rating <= 5 (CHECK constraint plus input schema)
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from aixchange.db.base import Base, new_id, utc_now


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("solution_id", "user_id", name="uq_review_author"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    solution_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("solutions.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
