"""Domain Types — enums replacing raw status/role strings across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching in services
    - Enum values are the exact strings stored in the DB and sent over the wire

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


ANONYMOUS_USER_ID = "anonymous-user"
PLACEHOLDER_IMAGE = "/placeholder-image.jpg"


class UserRole(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


class AuthProvider(str, Enum):
    EMAIL = "EMAIL"


class SolutionStatus(str, Enum):
    """Solution moderation state — maps to DB `status` column."""
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    INACTIVE = "INACTIVE"

    @classmethod
    def from_label(cls, label: str) -> "SolutionStatus":
        """Accept form labels (Active) as well as stored values (ACTIVE)."""
        try:
            return cls(label.upper())
        except ValueError:
            return cls.PENDING


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    VOTING = "VOTING"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


JOINABLE_EVENT_STATUSES = frozenset({EventStatus.ACTIVE, EventStatus.UPCOMING})


class EventType(str, Enum):
    HACKATHON = "HACKATHON"
    CHALLENGE = "CHALLENGE"
    COMPETITION = "COMPETITION"
    WORKSHOP = "WORKSHOP"


class ParticipantRole(str, Enum):
    PARTICIPANT = "PARTICIPANT"
    ORGANIZER = "ORGANIZER"
    JUDGE = "JUDGE"


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class ImportMode(str, Enum):
    """Bulk import reconciliation mode."""
    TRANSACTION = "transaction"  # all-or-nothing
    PARTIAL = "partial"          # continue on error


class AuditAction(str, Enum):
    """Audit log actions — one per mutating operation."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    BULK_DELETE = "BULK_DELETE"
    BULK_UPDATE = "BULK_UPDATE"
    SOLUTION_IMPORT = "SOLUTION_IMPORT"
    SOLUTION_SUBMISSION = "SOLUTION_SUBMISSION"
    SUBMIT_SOLUTION = "SUBMIT_SOLUTION"
    CREATE_REVIEW = "CREATE_REVIEW"
    CREATE_EVENT = "CREATE_EVENT"
    UPDATE_EVENT = "UPDATE_EVENT"
    DELETE_EVENT = "DELETE_EVENT"
    BULK_DELETE_EVENTS = "BULK_DELETE_EVENTS"
    BULK_UPDATE_EVENTS = "BULK_UPDATE_EVENTS"
    IMPORT_EVENTS = "IMPORT_EVENTS"
    BULK_SUBMIT_EVENTS = "BULK_SUBMIT_EVENTS"
    JOIN_EVENT = "JOIN_EVENT"
    UPDATE_USER_ROLE = "UPDATE_USER_ROLE"


class EntityType(str, Enum):
    SOLUTION = "Solution"
    EVENT = "Event"
    USER = "User"
