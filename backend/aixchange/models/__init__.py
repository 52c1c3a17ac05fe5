"""ORM Models — SQLAlchemy declarative models for all marketplace entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User owns solutions, reviews and created events

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from aixchange.models.user import User  # noqa: F401
from aixchange.models.event import Event  # noqa: F401
from aixchange.models.solution import Solution  # noqa: F401
from aixchange.models.resource import Resource  # noqa: F401
from aixchange.models.event_participant import EventParticipant  # noqa: F401
from aixchange.models.review import Review  # noqa: F401
from aixchange.models.audit_log import AuditLog  # noqa: F401
