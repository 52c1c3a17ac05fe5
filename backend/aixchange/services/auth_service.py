"""Auth Service — registration, credential checks, and well-known accounts.

Invariants:
    - Registration always creates a USER; roles change only through the admin endpoint
    - authenticate() distinguishes bad credentials (401) from inactive accounts (403)
    - The anonymous user is created on demand and can never log in (no password hash)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.core.domain_types import ANONYMOUS_USER_ID, AuthProvider, UserRole
from aixchange.core.errors import (
    AuthenticationRequiredError, BusinessRuleError, PermissionDeniedError,
)
from aixchange.models import User
from aixchange.schemas.auth import RegisterRequest
from aixchange.services.security import hash_password, verify_password

logger = logging.getLogger(__name__)

ANONYMOUS_EMAIL = "anonymous@aixchange.local"


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, body: RegisterRequest) -> User:
    if await get_user_by_email(db, body.email):
        raise BusinessRuleError("User already exists", "EMAIL_TAKEN")
    user = User(
        email=body.email,
        name=body.name.strip(),
        password_hash=hash_password(body.password),
        role=UserRole.USER.value,
        auth_provider=AuthProvider.EMAIL.value,
        is_active=True,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise BusinessRuleError("User already exists", "EMAIL_TAKEN")
    logger.info("User registered", extra={"user_id": user.id})
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationRequiredError("Invalid credentials")
    if not user.is_active:
        raise PermissionDeniedError("Account is disabled")
    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    logger.info("User logged in", extra={"user_id": user.id})
    return user


async def ensure_anonymous_user(db: AsyncSession) -> User:
    """Return the anonymous author, creating it (flushed, not committed) if absent."""
    user = await get_user(db, ANONYMOUS_USER_ID)
    if user is not None:
        return user
    user = User(
        id=ANONYMOUS_USER_ID,
        email=ANONYMOUS_EMAIL,
        name="Anonymous User",
        role=UserRole.USER.value,
        auth_provider=AuthProvider.EMAIL.value,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    return user


async def upsert_admin(db: AsyncSession, email: str, password: str, name: str = "Admin") -> User:
    """Create the admin account, or promote and re-password an existing one."""
    user = await get_user_by_email(db, email)
    if user is None:
        user = User(email=email.strip().lower(), name=name)
        db.add(user)
    user.password_hash = hash_password(password)
    user.role = UserRole.ADMIN.value
    user.auth_provider = AuthProvider.EMAIL.value
    user.is_active = True
    await db.flush()
    return user
