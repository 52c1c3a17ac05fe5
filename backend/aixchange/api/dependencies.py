"""Request Dependencies — session resolution and role guards for route handlers.

Invariants:
    - Session token read from `Authorization: Bearer` first, then the session cookie
    - The user is re-read from the database on every request; inactive users have no session
    - require_user raises 401, require_admin raises 403 for authenticated non-admins
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.config import get_settings
from aixchange.core.domain_types import UserRole
from aixchange.core.errors import AuthenticationRequiredError, PermissionDeniedError
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.services.auth_service import get_user
from aixchange.services.security import decode_session_token


def _bearer_token(authorization: str | None) -> str | None:
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def _candidate_tokens(request: Request, cookie_name: str) -> list[str]:
    tokens = [_bearer_token(request.headers.get("authorization")), request.cookies.get(cookie_name)]
    return [t for t in tokens if t]


async def get_optional_user(
    request: Request, db: AsyncSession = Depends(get_db),
) -> User | None:
    settings = get_settings()
    for token in _candidate_tokens(request, settings.session_cookie_name):
        payload = decode_session_token(
            token, secret=settings.jwt_secret, algorithm=settings.jwt_algorithm,
        )
        if payload is None:
            continue
        user = await get_user(db, payload["sub"])
        if user is not None and user.is_active:
            return user
    return None


async def require_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationRequiredError()
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise PermissionDeniedError()
    return user
