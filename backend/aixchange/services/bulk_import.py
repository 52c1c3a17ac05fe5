"""Bulk Import — reconciles batches of solution/event records against the database.

Invariants:
    - transaction mode: every record is validated before any write; one failure
      (validation or persistence) rolls the whole batch back and raises ImportRolledBackError
    - partial mode: each valid record commits on its own; a failing record is rolled
      back alone, recorded, and the loop continues
    - The default author must exist before any record is processed (404 otherwise)
    - Per-solution audit entries share the record's transaction; event imports add one
      summary entry
    - No retry, no backoff
    - Event banners are generated only for events that have committed; a rolled-back
      batch never reaches the image API or the image store

Design Decisions:
    - No SAVEPOINTs: partial mode commits per record instead, so the importer behaves
      the same on PostgreSQL and SQLite
    - Created rows are captured as {id, title} right after flush; nothing is read from
      ORM objects after a rollback
"""

import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.core.domain_types import (
    AuditAction, EntityType, ImportMode, SolutionStatus,
)
from aixchange.core.errors import ImportRolledBackError, ResourceNotFoundError
from aixchange.core.import_reconciliation import (
    ImportFailure, ImportReport, ValidRecord, validate_records,
)
from aixchange.models import Event, Resource, Solution, User
from aixchange.schemas.event import EventImportPayload, EventImportRecord
from aixchange.schemas.solution import SolutionImportPayload, SolutionImportRecord
from aixchange.services import audit
from aixchange.services.image_service import ImageService, event_prompt

logger = logging.getLogger(__name__)

_SOLUTION_AUDIT = {
    ImportMode.TRANSACTION: AuditAction.SOLUTION_IMPORT,
    ImportMode.PARTIAL: AuditAction.SOLUTION_SUBMISSION,
}
_EVENT_AUDIT = {
    ImportMode.TRANSACTION: AuditAction.IMPORT_EVENTS,
    ImportMode.PARTIAL: AuditAction.BULK_SUBMIT_EVENTS,
}


def describe_failure(exc: Exception) -> str:
    """Short, driver-level message for a persistence failure."""
    orig = getattr(exc, "orig", None)
    text = str(orig) if orig is not None else str(exc)
    return text.splitlines()[0] if text else exc.__class__.__name__


class BulkImporter:
    def __init__(self, db: AsyncSession, actor: User, images: ImageService | None = None):
        self.db = db
        self.actor_id = actor.id
        self.images = images

    # --- solutions -----------------------------------------------------------

    async def import_solutions(
        self, payload: SolutionImportPayload, mode: ImportMode,
    ) -> ImportReport:
        author = await self._require_user(payload.default_author_id)
        valid, failures = validate_records(payload.solutions, SolutionImportRecord)
        report = ImportReport(mode=mode, total=len(payload.solutions), failures=failures)
        action = _SOLUTION_AUDIT[mode]
        author_id = author.id

        async def create(record: ValidRecord[SolutionImportRecord]) -> dict:
            return await self._create_solution(record.data, author_id, action, mode)

        await self._run(report, valid, create, "solutions")
        logger.info(
            f"Solution import finished: {report.imported_count}/{report.total} imported",
            extra={"mode": mode.value, "user_id": self.actor_id},
        )
        return report

    async def _create_solution(
        self, data: SolutionImportRecord, author_id: str, action: AuditAction, mode: ImportMode,
    ) -> dict:
        solution = Solution(
            title=data.title,
            description=data.description,
            version=data.version,
            is_published=data.is_published,
            category=data.category,
            provider=data.provider,
            launch_url=data.launch_url,
            source_code_url=data.source_code_url,
            token_cost=data.token_cost,
            status=SolutionStatus.PENDING.value,
            tags=list(data.tags),
            image_url=data.image_url,
            resource_config=(
                data.resource_config.model_dump(exclude_none=True)
                if data.resource_config else None
            ),
            extra=data.metadata or {},
            author_id=author_id,
        )
        self.db.add(solution)
        await self.db.flush()
        for res in data.resources or []:
            self.db.add(Resource(solution_id=solution.id, name=res.name, type=res.type, url=res.url))
        audit.record(
            self.db, action, EntityType.SOLUTION, solution.id, author_id,
            {"importBatch": True, "solutionTitle": data.title, "mode": mode.value},
        )
        await self.db.flush()
        return {"id": solution.id, "title": solution.title}

    # --- events --------------------------------------------------------------

    async def import_events(
        self, payload: EventImportPayload, mode: ImportMode,
    ) -> ImportReport:
        creator = await self._require_user(payload.default_author_id or self.actor_id)
        valid, failures = validate_records(payload.events, EventImportRecord)
        report = ImportReport(mode=mode, total=len(payload.events), failures=failures)
        creator_id = creator.id
        prompts: dict[str, str] = {}

        async def create(record: ValidRecord[EventImportRecord]) -> dict:
            return await self._create_event(record.data, creator_id, prompts)

        await self._run(report, valid, create, "events", self._event_summary)
        await self._attach_event_images(report, prompts)
        logger.info(
            f"Event import finished: {report.imported_count}/{report.total} imported",
            extra={"mode": mode.value, "user_id": self.actor_id},
        )
        return report

    async def _create_event(
        self, data: EventImportRecord, creator_id: str, prompts: dict[str, str],
    ) -> dict:
        fields = data.model_dump()
        fields.update(
            type=data.type.value,
            status=data.status.value,
            image_url=data.image_url or None,
            created_by_id=creator_id,
        )
        event = Event(**fields)
        self.db.add(event)
        await self.db.flush()
        if not data.image_url:
            prompts[event.id] = event_prompt(data.title, data.short_description)
        return {"id": event.id, "title": event.title}

    async def _attach_event_images(self, report: ImportReport, prompts: dict[str, str]) -> None:
        """Generate banners for committed events that arrived without one."""
        if self.images is None:
            return
        pending = [(c["id"], prompts[c["id"]]) for c in report.imported if c["id"] in prompts]
        for event_id, prompt in pending:
            image_url = await self.images.generate_event_image(prompt)
            if image_url:
                await self.db.execute(
                    update(Event).where(Event.id == event_id).values(image_url=image_url),
                )
        if pending:
            await self.db.commit()

    def _event_summary(self, report: ImportReport) -> None:
        audit.record(
            self.db, _EVENT_AUDIT[report.mode], EntityType.EVENT, "BULK_IMPORT", self.actor_id,
            {
                "mode": report.mode.value,
                "totalCount": report.total,
                "successCount": report.imported_count,
                "failureCount": len(report.failures),
            },
        )

    # --- reconciliation ------------------------------------------------------

    async def _run(self, report, valid, create, noun: str, summary=None) -> None:
        if report.mode == ImportMode.TRANSACTION:
            await self._run_transaction(report, valid, create, noun, summary)
        else:
            await self._run_partial(report, valid, create, summary)

    async def _run_transaction(self, report, valid, create, noun, summary) -> None:
        if report.failures:
            raise ImportRolledBackError(noun, report.error_dicts())
        current = None
        try:
            for record in valid:
                current = record
                report.imported.append(await create(record))
            current = None
            if summary is not None:
                summary(report)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            identifier = current.identifier if current else "batch"
            index = current.index if current else report.total
            report.failures.append(ImportFailure(index, identifier, describe_failure(e)))
            report.imported.clear()
            logger.warning(
                f"Import rolled back at {identifier}: {describe_failure(e)}",
                extra={"mode": report.mode.value, "user_id": self.actor_id},
            )
            raise ImportRolledBackError(noun, report.error_dicts())

    async def _run_partial(self, report, valid, create, summary) -> None:
        for record in valid:
            try:
                created = await create(record)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                report.failures.append(
                    ImportFailure(record.index, record.identifier, describe_failure(e)),
                )
                continue
            report.imported.append(created)
        if summary is not None:
            summary(report)
            await self.db.commit()

    async def _require_user(self, user_id: str) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user
