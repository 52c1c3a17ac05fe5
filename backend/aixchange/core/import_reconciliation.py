"""Import Reconciliation — per-record validation and bookkeeping for bulk imports.

Invariants:
    - Every raw record yields exactly one ValidRecord or one ImportFailure
    - identifier is the record's title, or "#<index>" when it has none
    - Failures are reported in input order regardless of when they occurred
    - A transaction-mode report with failures has imported == [] (rolled back)

Design Decisions:
    - Validation is per record, not per envelope: one bad record must not hide
      the errors of the others
    - Pure module: services/bulk_import.py owns the DB side
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from aixchange.core.domain_types import ImportMode

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ImportFailure:
    index: int
    identifier: str
    error: str

    def to_dict(self) -> dict:
        return {"identifier": self.identifier, "error": self.error}


@dataclass(frozen=True)
class ValidRecord(Generic[M]):
    index: int
    identifier: str
    data: M


@dataclass
class ImportReport:
    """Outcome of one bulk import run."""
    mode: ImportMode
    total: int
    imported: list[dict] = field(default_factory=list)
    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def rolled_back(self) -> bool:
        return self.mode == ImportMode.TRANSACTION and bool(self.failures)

    @property
    def imported_count(self) -> int:
        return len(self.imported)

    def error_dicts(self) -> list[dict]:
        return [f.to_dict() for f in sorted(self.failures, key=lambda f: f.index)]


def record_identifier(raw: Any, index: int) -> str:
    if isinstance(raw, dict):
        title = raw.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
    return f"#{index}"


def format_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into "field: message; field: message"."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "record"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def validate_records(
    raw_records: list[Any], model: type[M],
) -> tuple[list[ValidRecord[M]], list[ImportFailure]]:
    """Single validation pass over all records."""
    valid: list[ValidRecord[M]] = []
    failures: list[ImportFailure] = []
    for index, raw in enumerate(raw_records):
        identifier = record_identifier(raw, index)
        try:
            data = model.model_validate(raw)
        except ValidationError as e:
            failures.append(ImportFailure(index, identifier, format_validation_error(e)))
            continue
        valid.append(ValidRecord(index, identifier, data))
    return valid, failures


def summarize(imported_count: int, error_count: int, noun: str) -> str:
    message = f"Successfully imported {imported_count} {noun}"
    if error_count:
        message += f" with {error_count} errors"
    return message
