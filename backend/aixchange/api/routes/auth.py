"""Auth Routes — register, login, logout and current user.

Invariants:
    - Login returns the session token and sets it as an HTTP-only cookie
    - Logout clears the cookie; tokens are stateless and expire on their own
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.api.dependencies import require_user
from aixchange.config import get_settings
from aixchange.infrastructure.database import get_db
from aixchange.models import User
from aixchange.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserOut
from aixchange.services import auth_service
from aixchange.services.security import create_session_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register")
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await auth_service.register_user(db, body)
    return {"user": UserOut.model_validate(user)}


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db),
):
    settings = get_settings()
    user = await auth_service.authenticate(db, body.email, body.password)
    token = create_session_token(
        user_id=user.id,
        role=user.role,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.jwt_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return LoginResponse(user=UserOut.model_validate(user), token=token)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(get_settings().session_cookie_name)
    return {"success": True}


@router.get("/me")
async def me(user: User = Depends(require_user)):
    return {"user": UserOut.model_validate(user)}
