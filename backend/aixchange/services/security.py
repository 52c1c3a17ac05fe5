"""Auth Security — bcrypt password hashing and signed session tokens.

Invariants:
    - Plain passwords are never stored or logged
    - Session tokens are JWTs carrying sub (user id), role, type="session", iat, exp
    - decode_session_token returns None for any invalid, expired, or foreign token
"""

import time
from typing import Any

import bcrypt
import jwt

TOKEN_TYPE = "session"


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise ValueError("Password is empty")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def create_session_token(
    *, user_id: str, role: str, secret: str, algorithm: str, expire_minutes: int,
) -> str:
    issued_at = int(time.time())
    payload = {
        "sub": user_id,
        "role": role,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + expire_minutes * 60,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_session_token(
    token: str, *, secret: str, algorithm: str,
) -> dict[str, Any] | None:
    raw = (token or "").strip()
    if not raw:
        return None
    try:
        payload = jwt.decode(raw, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != TOKEN_TYPE or not payload.get("sub"):
        return None
    return payload
