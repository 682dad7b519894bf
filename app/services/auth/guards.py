from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.database.store import get_store
from app.services.auth.auth_utils import verify_access_token
from app.services.auth.policies import AccessPolicy
from app.utils.exceptions import NotFound, Unauthorized
from app.utils.logger_utils import logger

security_scheme = HTTPBearer(auto_error=False)


@dataclass
class ProjectAccess:
    user: Dict[str, Any]
    project: Dict[str, Any]


async def _resolve_user(token: str) -> Dict[str, Any]:
    claims = verify_access_token(token)
    user = await get_store().users.find_by_id(claims.user_id)
    if not user:
        raise Unauthorized("User not found")
    return user


async def protect(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme)) -> Dict[str, Any]:
    """Require a valid bearer token and return the stored user it belongs to."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authorized to access this route")
    return await _resolve_user(credentials.credentials)


async def optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Optional[Dict[str, Any]]:
    """Like ``protect``, but an absent or unusable token means an anonymous caller."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await _resolve_user(credentials.credentials)
    except Unauthorized as e:
        logger.debug(f"Ignoring credentials on public route: {e.message}")
        return None


def _public_caller(policy: AccessPolicy):
    if policy.identifies_caller:
        async def dependency(user: Optional[Dict[str, Any]] = Depends(optional_user)) -> Optional[Dict[str, Any]]:
            return user
    else:
        async def dependency() -> None:
            return None
    return dependency


def require(policy: AccessPolicy):
    """
    Dependency enforcing the role part of ``policy``; returns the user.

    Unauthenticated policies never reject: ``OPTIONAL_AUTH`` yields the caller
    when a usable token is sent and ``None`` otherwise, ``PUBLIC`` always
    yields ``None`` without looking at credentials.
    """
    if not policy.authenticated:
        dependency = _public_caller(policy)
    else:
        async def dependency(user: Dict[str, Any] = Depends(protect)) -> Dict[str, Any]:
            policy.check_role(user)
            return user
    dependency.policy = policy
    return dependency


def require_project_access(policy: AccessPolicy):
    """Dependency loading ``project_id`` and enforcing ``policy``'s ownership rule."""
    async def dependency(project_id: str, user: Dict[str, Any] = Depends(protect)) -> ProjectAccess:
        policy.check_role(user)
        project = await get_store().projects.find_by_id(project_id)
        if not project:
            raise NotFound("Project not found")
        policy.check_ownership(user, project)
        return ProjectAccess(user=user, project=project)
    dependency.policy = policy
    return dependency
