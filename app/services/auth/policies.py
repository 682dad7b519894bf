"""
Access policies attached to each route.

A policy is plain data plus two pure checks, so the rules can be tested
without going through HTTP. ``guards.py`` turns policies into FastAPI
dependencies.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from app.utils.exceptions import Forbidden, Unauthorized

STUDENT = "student"
SUPERVISOR = "supervisor"
ADMIN = "admin"
REVIEWER_ROLES = (SUPERVISOR, ADMIN)


@dataclass(frozen=True)
class AccessPolicy:
    name: str
    authenticated: bool = True
    # Empty means any authenticated role
    roles: Tuple[str, ...] = ()
    # When set, the requester must own the resource or hold one of these roles
    owner_override_roles: Optional[Tuple[str, ...]] = None
    owner_field: str = "submitted_by"
    # Unauthenticated policies only: resolve a bearer token when one is sent
    identifies_caller: bool = False

    def check_role(self, user: Optional[Dict[str, Any]]) -> None:
        if not self.authenticated:
            return
        if not user or not user.get("role"):
            raise Unauthorized("User not authenticated")
        if self.roles and user["role"] not in self.roles:
            raise Forbidden(f"User role {user['role']} is not authorized to access this route")

    def check_ownership(self, user: Dict[str, Any], resource: Dict[str, Any]) -> None:
        if self.owner_override_roles is None:
            return
        if resource.get(self.owner_field) == user["_id"]:
            return
        if user.get("role") in self.owner_override_roles:
            return
        raise Forbidden("Not authorized to access this resource")


PUBLIC = AccessPolicy("public", authenticated=False)
OPTIONAL_AUTH = AccessPolicy("optional_auth", authenticated=False, identifies_caller=True)
AUTHENTICATED = AccessPolicy("authenticated")
STUDENTS = AccessPolicy("students", roles=(STUDENT,))
REVIEWERS = AccessPolicy("reviewers", roles=REVIEWER_ROLES)
OWNER_OR_REVIEWER = AccessPolicy("owner_or_reviewer", owner_override_roles=REVIEWER_ROLES)
OWNER_OR_ADMIN = AccessPolicy("owner_or_admin", owner_override_roles=(ADMIN,))


def is_reviewer(user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and user.get("role") in REVIEWER_ROLES
