import pytest

from app.services.auth.policies import (
    AUTHENTICATED,
    OWNER_OR_ADMIN,
    OWNER_OR_REVIEWER,
    PUBLIC,
    REVIEWERS,
    STUDENTS,
    is_reviewer,
)
from app.utils.exceptions import Forbidden, Unauthorized

STUDENT = {"_id": "1", "role": "student"}
OTHER_STUDENT = {"_id": "2", "role": "student"}
SUPERVISOR = {"_id": "3", "role": "supervisor"}
ADMIN = {"_id": "4", "role": "admin"}
PROJECT = {"_id": "10", "submitted_by": "1"}


def test_public_policy_accepts_anonymous():
    PUBLIC.check_role(None)


def test_authenticated_policy_rejects_anonymous():
    with pytest.raises(Unauthorized):
        AUTHENTICATED.check_role(None)


@pytest.mark.parametrize("user", [STUDENT, SUPERVISOR, ADMIN])
def test_authenticated_policy_accepts_any_role(user):
    AUTHENTICATED.check_role(user)


def test_students_policy():
    STUDENTS.check_role(STUDENT)
    with pytest.raises(Forbidden) as exc:
        STUDENTS.check_role(SUPERVISOR)
    assert exc.value.message == "User role supervisor is not authorized to access this route"


@pytest.mark.parametrize("user", [SUPERVISOR, ADMIN])
def test_reviewers_policy_accepts_reviewers(user):
    REVIEWERS.check_role(user)


def test_reviewers_policy_rejects_students():
    with pytest.raises(Forbidden):
        REVIEWERS.check_role(STUDENT)


@pytest.mark.parametrize("user", [STUDENT, SUPERVISOR, ADMIN])
def test_owner_or_reviewer_allows(user):
    OWNER_OR_REVIEWER.check_ownership(user, PROJECT)


def test_owner_or_reviewer_rejects_other_student():
    with pytest.raises(Forbidden):
        OWNER_OR_REVIEWER.check_ownership(OTHER_STUDENT, PROJECT)


@pytest.mark.parametrize("user", [STUDENT, ADMIN])
def test_owner_or_admin_allows(user):
    OWNER_OR_ADMIN.check_ownership(user, PROJECT)


@pytest.mark.parametrize("user", [OTHER_STUDENT, SUPERVISOR])
def test_owner_or_admin_rejects(user):
    with pytest.raises(Forbidden):
        OWNER_OR_ADMIN.check_ownership(user, PROJECT)


def test_is_reviewer():
    assert is_reviewer(SUPERVISOR)
    assert is_reviewer(ADMIN)
    assert not is_reviewer(STUDENT)
    assert not is_reviewer(None)


def _route_policies(route):
    found = []
    pending = list(route.dependant.dependencies)
    while pending:
        dependant = pending.pop()
        policy = getattr(dependant.call, "policy", None)
        if policy is not None:
            found.append(policy.name)
        pending.extend(dependant.dependencies)
    return found


def test_every_route_declares_one_policy():
    from fastapi.routing import APIRoute

    from main import app

    declared = {}
    for route in app.routes:
        if isinstance(route, APIRoute):
            for method in route.methods:
                policies = _route_policies(route)
                assert len(policies) == 1, f"{method} {route.path} declares {policies}"
                declared[(method, route.path)] = policies[0]

    assert declared[("POST", "/api/auth/register")] == "public"
    assert declared[("POST", "/api/auth/login")] == "public"
    assert declared[("GET", "/health")] == "public"
    assert declared[("GET", "/")] == "public"
    assert declared[("GET", "/api/projects")] == "optional_auth"
    assert declared[("GET", "/api/projects/{project_id}")] == "optional_auth"
    assert declared[("POST", "/api/projects")] == "students"
    assert declared[("PUT", "/api/projects/{project_id}/approve")] == "reviewers"
    assert declared[("DELETE", "/api/projects/{project_id}")] == "owner_or_admin"
