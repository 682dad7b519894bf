from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.database.validation import EMAIL_PATTERN
from app.models.base.base import ApiModel

Role = Literal["student", "supervisor", "admin"]

# ---------- User Models ----------


class UserOut(ApiModel):
    """Public profile. The stored password hash is never part of it."""

    id: str = Field(..., alias="_id", serialization_alias="id")
    name: str
    email: str
    role: str = "student"
    faculty: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None


class UserSummary(ApiModel):
    id: str = Field(..., alias="_id", serialization_alias="id")
    name: str
    email: str
    faculty: Optional[str] = None
    department: Optional[str] = None


class UserDetailsUpdate(ApiModel):
    name: Optional[str] = Field(None, max_length=50)
    faculty: Optional[str] = None
    department: Optional[str] = None


class UserResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
    user: UserOut


# ---------- Stored Documents ----------


class UserDocument(BaseModel):
    """Shape of a stored user. Repositories validate every write against it."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., pattern=EMAIL_PATTERN, json_schema_extra={"unique": True})
    password: str = Field(..., min_length=1)
    role: Role = "student"
    faculty: str = Field(..., min_length=1)
    department: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value
