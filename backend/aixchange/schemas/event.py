"""Event Schemas — admin create/update, import records, and response shapes.

Invariants:
    - end_date > start_date whenever both are present
    - Input dates are timezone-aware UTC; naive values are read as UTC
    - shortDescription is at most 200 characters
    - EventUpdate only carries the fields the caller sent (model_fields_set)
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, Field, model_validator

from aixchange.core.domain_types import EventStatus, EventType, ImportMode
from aixchange.schemas.common import ApiInput, ApiOutput, Pagination


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Naive timestamps are read as UTC.
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


def _check_dates(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and end <= start:
        raise ValueError("End date must be after start date")


class EventCreate(ApiInput):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    short_description: str = Field(min_length=1, max_length=200)
    rules: str = Field(min_length=1)
    type: EventType
    status: EventStatus = EventStatus.DRAFT
    start_date: UtcDatetime
    end_date: UtcDatetime
    image_url: str | None = None
    banner_url: str | None = None
    prizes: Any = None
    max_participants: int | None = Field(None, ge=1)
    is_public: bool = True
    is_promoted: bool = False

    @model_validator(mode="after")
    def end_after_start(self):
        _check_dates(self.start_date, self.end_date)
        return self


class EventUpdate(ApiInput):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    short_description: str | None = Field(None, min_length=1, max_length=200)
    rules: str | None = Field(None, min_length=1)
    type: EventType | None = None
    status: EventStatus | None = None
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    image_url: str | None = None
    banner_url: str | None = None
    prizes: Any = None
    max_participants: int | None = Field(None, ge=1)
    is_public: bool | None = None
    is_promoted: bool | None = None
    created_by_id: str | None = None

    @model_validator(mode="after")
    def end_after_start(self):
        _check_dates(self.start_date, self.end_date)
        return self

    def changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


class EventUpdateWithId(EventUpdate):
    id: str = Field(min_length=1)

    def changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in self.model_fields_set if name != "id"
        }


class EventImportRecord(ApiInput):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    short_description: str = Field(min_length=1)
    rules: str = Field(min_length=1)
    type: EventType
    status: EventStatus = EventStatus.UPCOMING
    start_date: UtcDatetime
    end_date: UtcDatetime
    image_url: str | None = None
    banner_url: str | None = None
    prizes: Any = None
    max_participants: int | None = Field(None, ge=1)
    is_public: bool = True
    is_promoted: bool = False

    @model_validator(mode="after")
    def end_after_start(self):
        _check_dates(self.start_date, self.end_date)
        return self


class EventImportPayload(ApiInput):
    events: list[Any] = Field(min_length=1)
    default_author_id: str | None = None
    mode: ImportMode = ImportMode.TRANSACTION


class EventIdsRequest(ApiInput):
    event_ids: list[str] = Field(min_length=1)


class EventStatusUpdate(EventIdsRequest):
    status: EventStatus


# --- Responses ---------------------------------------------------------------

class EventCreator(ApiOutput):
    id: str
    name: str | None = None
    email: str


class EventOut(ApiOutput):
    id: str
    title: str
    description: str
    short_description: str
    rules: str | None = None
    type: str
    status: str
    start_date: datetime
    end_date: datetime
    image_url: str | None = None
    banner_url: str | None = None
    prizes: Any = None
    max_participants: int | None = None
    is_public: bool
    is_promoted: bool
    view_count: int
    participant_count: int
    submission_count: int
    created_by_id: str
    created_at: datetime
    updated_at: datetime


class AdminEventItem(EventOut):
    created_by: EventCreator | None = None
    solution_count: int = 0


class EventPage(ApiOutput):
    events: list[EventOut]
    pagination: Pagination


class AdminEventPage(ApiOutput):
    events: list[AdminEventItem]
    pagination: Pagination


class ParticipantOut(ApiOutput):
    id: str
    user_id: str
    event_id: str
    role: str
    joined_at: datetime
