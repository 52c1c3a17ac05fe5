"""Admin Solution Routes — catalogue CRUD, bulk operations and bulk import.

Invariants:
    - Every endpoint requires an ADMIN session (401 without session, 403 otherwise)
    - /import honours the payload's mode (default transaction); /bulk-submission is
      always partial
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.api.dependencies import require_admin
from aixchange.core.domain_types import ImportMode
from aixchange.core.import_reconciliation import ImportReport, summarize
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.schemas.solution import (
    AdminSolutionItem, SolutionIdsRequest, SolutionImportPayload, SolutionStatusUpdate,
    SolutionSubmission, SolutionUpdate,
)
from aixchange.services import admin_solutions
from aixchange.services.bulk_import import BulkImporter

router = APIRouter(prefix="/api/admin/solutions", tags=["admin"])


def import_response(report: ImportReport, noun: str) -> dict:
    errors = report.error_dicts()
    return {
        "success": True,
        "mode": report.mode.value,
        "imported": report.imported_count,
        "importedIds": [item["id"] for item in report.imported],
        "errors": errors,
        "message": summarize(report.imported_count, len(errors), noun),
    }


@router.get("", response_model=list[AdminSolutionItem])
async def list_solutions(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return await admin_solutions.list_all(db)


@router.post("", response_model=AdminSolutionItem, status_code=status.HTTP_201_CREATED)
async def create_solution(
    body: SolutionSubmission,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_solutions.create(db, admin, body)


@router.post("/import")
async def import_solutions(
    body: SolutionImportPayload,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    report = await BulkImporter(db, admin).import_solutions(body, body.mode)
    return import_response(report, "solutions")


@router.post("/bulk-submission")
async def bulk_submit_solutions(
    body: SolutionImportPayload,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    report = await BulkImporter(db, admin).import_solutions(body, ImportMode.PARTIAL)
    return import_response(report, "solutions")


@router.post("/bulk-delete")
async def bulk_delete(
    body: SolutionIdsRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    count = await admin_solutions.bulk_delete(db, admin, body.solution_ids)
    return {"success": True, "count": count, "message": f"Successfully deleted {count} solutions"}


@router.post("/bulk-update")
async def bulk_update(
    body: SolutionStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    count = await admin_solutions.bulk_update_status(db, admin, body)
    return {"success": True, "count": count, "message": f"Successfully updated {count} solutions"}


@router.patch("/{solution_id}")
async def update_solution(
    solution_id: str,
    body: SolutionUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    solution = await admin_solutions.update_one(db, admin, solution_id, body)
    return {"success": True, "solution": solution, "message": "Solution updated successfully"}


@router.delete("/{solution_id}")
async def delete_solution(
    solution_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await admin_solutions.delete_one(db, admin, solution_id)
    return {"success": True}
