"""User Admin Schemas — role changes and the admin user listing."""

from datetime import datetime

from aixchange.core.domain_types import UserRole
from aixchange.schemas.common import ApiInput, ApiOutput


class RoleUpdate(ApiInput):
    """Both fields optional so a missing one answers 400 with a clear message."""
    user_id: str | None = None
    role: UserRole | None = None


class AdminUserItem(ApiOutput):
    id: str
    email: str
    name: str | None = None
    role: str
    auth_provider: str
    created_at: datetime
    last_login: datetime | None = None
    is_active: bool
    solution_count: int = 0
    review_count: int = 0
