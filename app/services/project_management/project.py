import re
from typing import Any, Dict, Optional

from app.database.backends.base import utc_now
from app.database.store import get_store
from app.models.project.project import (
    ApprovalPayload,
    LikeResponse,
    MessageResponse,
    ProjectCreate,
    ProjectFilters,
    ProjectListResponse,
    ProjectOut,
    ProjectResponse,
    ProjectUpdate,
)
from app.models.user.user import UserSummary
from app.services.auth.guards import ProjectAccess
from app.services.auth.policies import is_reviewer
from app.utils.exceptions import AppError, InvalidArgument, NotFound, ServerError
from app.utils.logger_utils import logger

APPROVAL_STATUSES = ("approved", "rejected", "revision")
REVIEW_QUEUE_STATUSES = ["pending", "revision"]
# Only reviewers may move a project through its lifecycle via the generic update
REVIEWER_ONLY_FIELDS = ("status", "approved_by", "approved_at")


def _projects():
    return get_store().projects


def _to_list_response(docs) -> ProjectListResponse:
    items = [ProjectOut(**doc) for doc in docs]
    return ProjectListResponse(count=len(items), data=items)


def build_list_query(filters: ProjectFilters, requester: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    for name in ("category", "faculty", "status"):
        value = getattr(filters, name)
        if value and value != "all":
            query[name] = value

    if filters.search:
        pattern = {"$regex": re.escape(filters.search), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}, {"technologies": pattern}]

    # Anonymous callers only ever see the public gallery
    if requester is None:
        query["status"] = "approved"
    return query


async def list_projects_helper(filters: ProjectFilters, requester: Optional[Dict[str, Any]]) -> ProjectListResponse:
    try:
        docs = await _projects().find_many(build_list_query(filters, requester))
        return _to_list_response(docs)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"list_projects_helper error: {e}")
        raise ServerError() from e


async def _load_users(user_ids) -> Dict[str, Dict[str, Any]]:
    """Fetch each distinct account once, keyed by id; missing ones are left out."""
    users = {}
    for user_id in dict.fromkeys(uid for uid in user_ids if uid):
        user = await get_store().users.find_by_id(user_id)
        if user:
            users[user_id] = user
    return users


async def get_project_helper(project_id: str) -> ProjectResponse:
    """Return one project and count the view.

    Every read increments ``views``, including reads by the owner or a
    reviewer. Public summaries of the owner and the approving reviewer are
    attached, and every supervisor comment gets its author's name, for the
    accounts that still exist.
    """
    try:
        doc = await _projects().update_by_id(project_id, {"$inc": {"views": 1}})
        if not doc:
            raise NotFound("Project not found")

        project = ProjectOut(**doc)
        people = await _load_users([doc["submitted_by"], doc.get("approved_by")]
                                   + [comment.user for comment in project.supervisor_comments])
        if doc["submitted_by"] in people:
            project.submitter = UserSummary(**people[doc["submitted_by"]])
        if doc.get("approved_by") in people:
            project.approver = UserSummary(**people[doc["approved_by"]])
        for comment in project.supervisor_comments:
            if comment.user in people:
                comment.user_name = people[comment.user]["name"]
        return ProjectResponse(data=project)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"get_project_helper error: {e}")
        raise ServerError() from e


async def create_project_helper(
    payload: ProjectCreate,
    owner: Dict[str, Any],
    document_url: Optional[str] = None,
) -> ProjectResponse:
    try:
        doc = payload.model_dump(exclude_none=True)
        doc.update({
            "status": "pending",
            "submitted_by": owner["_id"],
            "views": 0,
            "likes": [],
            "supervisor_comments": [],
            "images": [],
        })
        if document_url:
            doc["documentation_url"] = document_url

        created = await _projects().create(doc)
        logger.info(f"Project created: {created['_id']} by user {owner['_id']}")
        return ProjectResponse(message="Project submitted successfully", data=ProjectOut(**created))
    except AppError:
        raise
    except Exception as e:
        logger.error(f"create_project_helper error: {e}")
        raise ServerError() from e


async def update_project_helper(access: ProjectAccess, payload: ProjectUpdate) -> ProjectResponse:
    try:
        fields = payload.model_dump(exclude_none=True)
        if not is_reviewer(access.user):
            dropped = [name for name in REVIEWER_ONLY_FIELDS if fields.pop(name, None) is not None]
            if dropped:
                logger.warning(f"User {access.user['_id']} may not set {dropped}; ignoring")

        doc = await _projects().update_by_id(access.project["_id"], {"$set": fields})
        if not doc:
            raise NotFound("Project not found")
        logger.info(f"Project {doc['_id']} updated by user {access.user['_id']}: {sorted(fields)}")
        return ProjectResponse(message="Project updated successfully", data=ProjectOut(**doc))
    except AppError:
        raise
    except Exception as e:
        logger.error(f"update_project_helper error: {e}")
        raise ServerError() from e


async def delete_project_helper(access: ProjectAccess) -> MessageResponse:
    try:
        deleted = await _projects().delete_by_id(access.project["_id"])
        if not deleted:
            raise NotFound("Project not found")
        logger.info(f"Project {access.project['_id']} deleted by user {access.user['_id']}")
        return MessageResponse(message="Project deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.error(f"delete_project_helper error: {e}")
        raise ServerError() from e


async def approve_project_helper(project_id: str, payload: ApprovalPayload, reviewer: Dict[str, Any]) -> ProjectResponse:
    """Record a review decision.

    The status is checked before the project is loaded, so an invalid
    decision never touches the record. The reviewer role itself is enforced
    by the route.
    """
    if payload.status not in APPROVAL_STATUSES:
        raise InvalidArgument("Invalid status")

    try:
        project = await _projects().find_by_id(project_id)
        if not project:
            raise NotFound("Project not found")

        now = utc_now()
        update: Dict[str, Any] = {"$set": {"status": payload.status}}
        if payload.status == "approved":
            update["$set"]["approved_by"] = reviewer["_id"]
            update["$set"]["approved_at"] = now
        if payload.comment:
            update["$push"] = {
                "supervisor_comments": {"user": reviewer["_id"], "comment": payload.comment, "created_at": now}
            }

        doc = await _projects().update_by_id(project_id, update)
        if not doc:
            raise NotFound("Project not found")
        logger.info(f"Project {project_id} marked {payload.status} by reviewer {reviewer['_id']}")
        return ProjectResponse(message=f"Project {payload.status} successfully", data=ProjectOut(**doc))
    except AppError:
        raise
    except Exception as e:
        logger.error(f"approve_project_helper error: {e}")
        raise ServerError() from e


async def toggle_like_helper(project_id: str, user: Dict[str, Any]) -> LikeResponse:
    try:
        project = await _projects().find_by_id(project_id)
        if not project:
            raise NotFound("Project not found")

        already_liked = any(like.get("user") == user["_id"] for like in project.get("likes", []))
        if already_liked:
            update = {"$pull": {"likes": {"user": user["_id"]}}}
        else:
            update = {"$push": {"likes": {"user": user["_id"], "created_at": utc_now()}}}

        doc = await _projects().update_by_id(project_id, update)
        if not doc:
            raise NotFound("Project not found")
        return LikeResponse(liked=not already_liked, like_count=len(doc.get("likes", [])))
    except AppError:
        raise
    except Exception as e:
        logger.error(f"toggle_like_helper error: {e}")
        raise ServerError() from e


async def get_pending_projects_helper() -> ProjectListResponse:
    try:
        docs = await _projects().find_many({"status": {"$in": REVIEW_QUEUE_STATUSES}})
        return _to_list_response(docs)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"get_pending_projects_helper error: {e}")
        raise ServerError() from e


async def get_user_projects_helper(user: Dict[str, Any]) -> ProjectListResponse:
    try:
        docs = await _projects().find_many({"submitted_by": user["_id"]})
        return _to_list_response(docs)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"get_user_projects_helper error: {e}")
        raise ServerError() from e
