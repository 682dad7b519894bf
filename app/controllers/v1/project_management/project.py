import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.datastructures import UploadFile

from app.models.project.project import (
    ApprovalPayload,
    LikeResponse,
    MessageResponse,
    ProjectCreate,
    ProjectFilters,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from app.services.auth.guards import ProjectAccess, require, require_project_access
from app.services.auth.policies import (
    AUTHENTICATED,
    OPTIONAL_AUTH,
    OWNER_OR_ADMIN,
    OWNER_OR_REVIEWER,
    REVIEWERS,
    STUDENTS,
)
from app.services.project_management.project import (
    approve_project_helper,
    create_project_helper,
    delete_project_helper,
    get_pending_projects_helper,
    get_project_helper,
    get_user_projects_helper,
    list_projects_helper,
    toggle_like_helper,
    update_project_helper,
)
from app.services.uploads.uploads import DocumentStorage
from app.utils.exceptions import BadRequest

router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_submission(request: Request):
    """Return the submitted fields and the optional ``document`` upload.

    Submissions arrive either as multipart forms (with a PDF attached) or as
    plain JSON bodies.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(FORM_CONTENT_TYPES):
        try:
            body = await request.json()
        except json.JSONDecodeError:
            raise BadRequest("Request body must be valid JSON")
        if not isinstance(body, dict):
            raise BadRequest("Request body must be a JSON object")
        return body, None

    form = await request.form()
    data: Dict[str, Any] = {}
    document: Optional[UploadFile] = None
    for key in form.keys():
        values = form.getlist(key)
        if key == "document":
            upload = values[0]
            if isinstance(upload, UploadFile) and upload.filename:
                document = upload
            continue
        data[key] = values if len(values) > 1 else values[0]
    return data, document


@router.get("/api/projects", response_model=ProjectListResponse, response_model_exclude_none=True)
async def list_projects(
    category: Optional[str] = Query(None, description="Category to filter, 'all' for any"),
    faculty: Optional[str] = Query(None, description="Faculty to filter, 'all' for any"),
    status_filter: Optional[str] = Query(None, alias="status", description="Status to filter, 'all' for any"),
    search: Optional[str] = Query(None, description="Case-insensitive text search"),
    user: Optional[Dict[str, Any]] = Depends(require(OPTIONAL_AUTH)),
):
    filters = ProjectFilters(category=category, faculty=faculty, status=status_filter, search=search)
    return await list_projects_helper(filters, user)


@router.get("/api/projects/user/me", response_model=ProjectListResponse, response_model_exclude_none=True)
async def my_projects(user: Dict[str, Any] = Depends(require(AUTHENTICATED))):
    return await get_user_projects_helper(user)


@router.get("/api/projects/admin/pending", response_model=ProjectListResponse, response_model_exclude_none=True)
async def pending_projects(user: Dict[str, Any] = Depends(require(REVIEWERS))):
    return await get_pending_projects_helper()


@router.get("/api/projects/{project_id}", response_model=ProjectResponse, response_model_exclude_none=True)
async def get_project(project_id: str, user: Optional[Dict[str, Any]] = Depends(require(OPTIONAL_AUTH))):
    return await get_project_helper(project_id)


@router.post(
    "/api/projects",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
async def create_project(request: Request, user: Dict[str, Any] = Depends(require(STUDENTS))):
    data, document = await read_submission(request)
    payload = ProjectCreate.model_validate(data)
    # Fields are validated before anything touches the disk
    document_url = await DocumentStorage.save_document(document) if document else None
    return await create_project_helper(payload, user, document_url)


@router.put("/api/projects/{project_id}", response_model=ProjectResponse, response_model_exclude_none=True)
async def update_project(payload: ProjectUpdate, access: ProjectAccess = Depends(require_project_access(OWNER_OR_REVIEWER))):
    return await update_project_helper(access, payload)


@router.delete("/api/projects/{project_id}", response_model=MessageResponse, response_model_exclude_none=True)
async def delete_project(access: ProjectAccess = Depends(require_project_access(OWNER_OR_ADMIN))):
    return await delete_project_helper(access)


@router.post("/api/projects/{project_id}/like", response_model=LikeResponse, response_model_exclude_none=True)
async def like_project(project_id: str, user: Dict[str, Any] = Depends(require(AUTHENTICATED))):
    return await toggle_like_helper(project_id, user)


@router.put("/api/projects/{project_id}/approve", response_model=ProjectResponse, response_model_exclude_none=True)
async def approve_project(
    project_id: str,
    payload: ApprovalPayload,
    user: Dict[str, Any] = Depends(require(REVIEWERS)),
):
    return await approve_project_helper(project_id, payload, user)
