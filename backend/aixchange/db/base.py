"""SQLAlchemy Declarative Base — shared base class and column helpers for all ORM models.

Invariants:
    - All models inherit from Base
    - Primary keys are 36-char strings (uuid4 text, or well-known ids like "anonymous-user")
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all AIXchange ORM models."""
    pass
