"""Admin User Routes — user listing and role changes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.api.dependencies import require_admin
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.schemas.user import AdminUserItem, RoleUpdate
from aixchange.services import admin_users

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@router.get("", response_model=list[AdminUserItem])
async def list_users(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await admin_users.list_users(db)


@router.patch("", response_model=AdminUserItem)
async def update_role(
    body: RoleUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await admin_users.change_role(db, admin, body)
