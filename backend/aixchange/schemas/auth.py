"""Auth Schemas — registration, login and current-user payloads.

Invariants:
    - Passwords are at least 6 characters; confirmPassword must match on register
    - Emails are lowercased and stripped before lookup or storage
    - UserOut never carries the password hash
"""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from aixchange.schemas.common import EMAIL_PATTERN, ApiInput, ApiOutput


class RegisterRequest(ApiInput):
    name: str = Field(min_length=2, max_length=255)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6, max_length=128)
    confirm_password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(ApiInput):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UserOut(ApiOutput):
    id: str
    email: str
    name: str | None = None
    role: str
    image: str | None = None
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime


class LoginResponse(ApiOutput):
    user: UserOut
    token: str
