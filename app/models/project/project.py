import json
import re
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.database.validation import EMAIL_PATTERN, GITHUB_URL_PATTERN, URL_PATTERN
from app.models.base.base import ApiModel
from app.models.user.user import UserSummary

Category = Literal["Web Development", "Mobile App", "AI/ML", "IoT", "Robotics", "Data Science", "Other"]
Status = Literal["pending", "approved", "rejected", "revision"]


def normalize_technologies(value: Any) -> List[str]:
    """Accept a list, a JSON array string or a comma separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            value = parsed
        else:
            value = value.split(",")
    if not isinstance(value, list):
        raise ValueError("Technologies must be an array")
    return [str(tech).strip() for tech in value if str(tech).strip()]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_url(value: Any, pattern: str, message: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or not re.match(pattern, value.strip()):
        raise ValueError(message)
    return value.strip()


# ---------- Project Models ----------#

class TeamMember(ApiModel):
    name: str
    email: Optional[str] = None
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Team member name is required")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def email_pattern(cls, value: Any) -> Optional[str]:
        value = _blank_to_none(value)
        if value is not None and not re.match(EMAIL_PATTERN, str(value)):
            raise ValueError("Please add a valid email")
        return value


def _parse_team_members(value: Any) -> Any:
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            return json.loads(value)
        except ValueError:
            raise ValueError("Team members must be an array")
    return value


def _check_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not 3 <= len(value) <= 100:
        raise ValueError("Title must be between 3 and 100 characters")
    return value


def _check_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not 10 <= len(value) <= 2000:
        raise ValueError("Description must be between 10 and 2000 characters")
    return value


def _check_faculty(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Faculty is required")
    return value


def _check_year(value: Optional[int]) -> Optional[int]:
    if value is not None and not 2020 <= value <= datetime.now(timezone.utc).year + 1:
        raise ValueError("Invalid year")
    return value


class ProjectFields(ApiModel):
    """Request validation shared by project creation and update."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[Category] = None
    technologies: Optional[List[str]] = None
    faculty: Optional[str] = None
    department: Optional[str] = None
    year: Optional[int] = None
    github_url: Optional[str] = None
    live_demo_url: Optional[str] = None
    team_members: Optional[List[TeamMember]] = None

    @field_validator("title")
    @classmethod
    def title_length(cls, value: Optional[str]) -> Optional[str]:
        return _check_title(value)

    @field_validator("description")
    @classmethod
    def description_length(cls, value: Optional[str]) -> Optional[str]:
        return _check_description(value)

    @field_validator("faculty")
    @classmethod
    def faculty_required(cls, value: Optional[str]) -> Optional[str]:
        return _check_faculty(value)

    @field_validator("year")
    @classmethod
    def year_range(cls, value: Optional[int]) -> Optional[int]:
        return _check_year(value)

    @field_validator("technologies", mode="before")
    @classmethod
    def split_technologies(cls, value: Any) -> Optional[List[str]]:
        if value is None:
            return None
        return normalize_technologies(value)

    @field_validator("team_members", mode="before")
    @classmethod
    def parse_team_members(cls, value: Any) -> Any:
        return _parse_team_members(value)

    @field_validator("github_url", mode="before")
    @classmethod
    def github_url_pattern(cls, value: Any) -> Optional[str]:
        return _check_url(_blank_to_none(value), GITHUB_URL_PATTERN, "Invalid GitHub URL")

    @field_validator("live_demo_url", mode="before")
    @classmethod
    def live_demo_url_pattern(cls, value: Any) -> Optional[str]:
        return _check_url(_blank_to_none(value), URL_PATTERN, "Invalid demo URL")

    @field_validator("department", mode="before")
    @classmethod
    def strip_department(cls, value: Any) -> Optional[str]:
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value


class ProjectCreate(ProjectFields):
    title: str
    description: str
    category: Category
    faculty: str
    year: int
    technologies: List[str] = Field(default_factory=list)
    team_members: List[TeamMember] = Field(default_factory=list)

    @field_validator("technologies", mode="before")
    @classmethod
    def split_technologies(cls, value: Any) -> List[str]:
        return normalize_technologies(value)

    @field_validator("team_members", mode="before")
    @classmethod
    def parse_team_members(cls, value: Any) -> Any:
        return [] if value is None else _parse_team_members(value)


class ProjectUpdate(ProjectFields):
    """Fields accepted by the generic update path.

    ``status``, ``approved_by`` and ``approved_at`` are only honoured for
    reviewers; the service strips them for everyone else.
    """

    status: Optional[Status] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


class ApprovalPayload(ApiModel):
    # Not a Literal: an unknown status is rejected by the service as an invalid argument
    status: Optional[str] = None
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def comment_length(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if len(value) > 500:
            raise ValueError("Comment too long")
        return value or None


class ProjectFilters(ApiModel):
    category: Optional[str] = None
    faculty: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None


class SupervisorCommentOut(ApiModel):
    user: str
    user_name: Optional[str] = None
    comment: str
    created_at: Optional[datetime] = None


class LikeOut(ApiModel):
    user: str
    created_at: Optional[datetime] = None


class ProjectOut(ApiModel):
    id: str = Field(..., alias="_id", serialization_alias="id")
    title: str
    description: str
    category: str
    technologies: List[str] = Field(default_factory=list)
    faculty: str
    department: Optional[str] = None
    year: int
    status: str = "pending"
    github_url: Optional[str] = None
    live_demo_url: Optional[str] = None
    documentation_url: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    team_members: List[TeamMember] = Field(default_factory=list)
    submitted_by: str
    submitter: Optional[UserSummary] = None
    approved_by: Optional[str] = None
    approver: Optional[UserSummary] = None
    approved_at: Optional[datetime] = None
    supervisor_comments: List[SupervisorCommentOut] = Field(default_factory=list)
    views: int = 0
    likes: List[LikeOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="likeCount")
    @property
    def like_count(self) -> int:
        return len(self.likes)


class ProjectResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
    data: ProjectOut


class ProjectListResponse(ApiModel):
    success: bool = True
    count: int
    data: List[ProjectOut]


class LikeResponse(ApiModel):
    success: bool = True
    liked: bool
    like_count: int


class MessageResponse(ApiModel):
    success: bool = True
    message: str


# ---------- Stored Documents ----------#

class SupervisorComment(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user: str = Field(..., min_length=1)
    comment: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None

    @field_validator("comment")
    @classmethod
    def comment_length(cls, value: str) -> str:
        if len(value) > 500:
            raise ValueError("Comment too long")
        return value


class Like(BaseModel):
    user: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None


class ProjectDocument(BaseModel):
    """Shape of a stored project. Repositories validate every write against it.

    Request-level rules such as the title minimum or the upper year bound live
    on ``ProjectFields``; this model only holds what must be true of anything
    persisted.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    category: Category
    technologies: List[str] = Field(default_factory=list)
    faculty: str = Field(..., min_length=1)
    department: Optional[str] = None
    year: int = Field(..., ge=2020)
    status: Status = "pending"
    github_url: Optional[str] = Field(None, pattern=GITHUB_URL_PATTERN)
    live_demo_url: Optional[str] = Field(None, pattern=URL_PATTERN)
    documentation_url: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    team_members: List[TeamMember] = Field(default_factory=list)
    submitted_by: str = Field(..., min_length=1)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    supervisor_comments: List[SupervisorComment] = Field(default_factory=list)
    views: int = Field(0, ge=0)
    likes: List[Like] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
