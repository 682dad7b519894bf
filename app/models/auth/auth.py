from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.database.validation import ROLES
from app.models.base.base import ApiModel
from app.models.user.user import UserOut

# ---------- Auth Schemas ----------#


class RegisterPayload(ApiModel):
    name: str = Field(..., max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Optional[str] = None
    faculty: str
    department: Optional[str] = None

    @field_validator("name", "faculty")
    @classmethod
    def not_blank(cls, value: str, info) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value

    @field_validator("role")
    @classmethod
    def known_role(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in ROLES:
            raise ValueError("Role must be one of student, supervisor, admin")
        return value


class LoginPayload(ApiModel):
    # Both optional so a missing field is reported as a bad request, not a schema error
    email: Optional[str] = None
    password: Optional[str] = None


class PasswordUpdate(ApiModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class TokenClaims(BaseModel):
    user_id: str
    role: str


class AuthResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
    token: str
    user: UserOut


class TokenResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
    token: str
