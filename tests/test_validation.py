import time

import pytest
from pydantic import ValidationError

from app.database.validation import validate_document, validate_update
from app.models.project.project import (
    ApprovalPayload,
    ProjectCreate,
    ProjectDocument,
    ProjectUpdate,
    TeamMember,
    normalize_technologies,
)
from app.models.user.user import UserDocument
from app.utils.exceptions import ValidationFailed


def _project(**overrides):
    data = {
        "title": "Campus Navigator",
        "description": "Indoor navigation for the main campus.",
        "category": "Mobile App",
        "faculty": "Engineering",
        "year": 2024,
        "submitted_by": "1",
    }
    data.update(overrides)
    return data


def _fields(exc):
    return {error["field"] for error in exc.value.errors}


def test_user_document_is_normalized():
    doc = validate_document(UserDocument, {
        "name": "  Ada  ",
        "email": "  Ada@Hub.EDU ",
        "password": "hash",
        "faculty": " Science ",
    })
    assert doc["name"] == "Ada"
    assert doc["email"] == "ada@hub.edu"
    assert doc["faculty"] == "Science"
    assert doc["role"] == "student"
    assert doc["is_active"] is True


def test_user_document_reports_every_broken_field():
    with pytest.raises(ValidationFailed) as exc:
        validate_document(UserDocument, {"name": "x" * 51, "email": "nope", "password": "", "role": "janitor"})
    assert _fields(exc) == {"name", "email", "password", "role", "faculty"}


def test_project_document_limits():
    with pytest.raises(ValidationFailed) as exc:
        validate_document(ProjectDocument, _project(
            title="t" * 101,
            year=2019,
            category="Gardening",
            github_url="https://gitlab.com/x/y",
            live_demo_url="ftp://demo",
        ))
    assert _fields(exc) == {"title", "year", "category", "github_url", "live_demo_url"}


def test_team_member_rules():
    with pytest.raises(ValidationFailed) as exc:
        validate_document(ProjectDocument, _project(team_members=[{"name": " "}, {"name": "Bo", "email": "bad"}]))
    assert _fields(exc) == {"team_members.0.name", "team_members.1.email"}


def test_partial_update_only_checks_present_fields():
    update = validate_update(ProjectDocument, {"$set": {"title": "  New title  "}})
    assert update["$set"]["title"] == "New title"


def test_pushed_comment_length():
    with pytest.raises(ValidationFailed) as exc:
        validate_update(ProjectDocument, {"$push": {"supervisor_comments": {"user": "1", "comment": "c" * 501}}})
    assert exc.value.errors == [{"field": "supervisor_comments.0.comment", "message": "Comment too long"}]


def test_partial_update_rejects_unknown_status():
    with pytest.raises(ValidationFailed) as exc:
        validate_update(ProjectDocument, {"$set": {"status": "archived", "title": "Still fine"}})
    assert _fields(exc) == {"status"}


def test_pushed_like_is_stored_without_empty_fields():
    update = validate_update(ProjectDocument, {"$push": {"likes": {"user": "7"}}})
    assert update["$push"] == {"likes": {"user": "7"}}


@pytest.mark.parametrize("email", ["a" * 5000 + "!", "a." * 2000 + "!", "a@" + "b-" * 2000 + "!"])
def test_invalid_email_is_rejected_quickly(email):
    started = time.perf_counter()
    with pytest.raises(ValidationError):
        TeamMember(name="x", email=email)
    with pytest.raises(ValidationFailed):
        validate_document(UserDocument, {"name": "Ada", "email": email, "password": "hash", "faculty": "Science"})
    assert time.perf_counter() - started < 0.5


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("React, Node.js , ,MongoDB", ["React", "Node.js", "MongoDB"]),
        ('["Python", " FastAPI "]', ["Python", "FastAPI"]),
        (["Go", "  ", "Rust "], ["Go", "Rust"]),
        (None, []),
        ("", []),
    ],
)
def test_normalize_technologies(raw, expected):
    assert normalize_technologies(raw) == expected


def test_project_create_accepts_camel_case_and_strings():
    payload = ProjectCreate.model_validate({
        "title": "  Smart Bins ",
        "description": "Fill-level sensors for campus bins.",
        "category": "IoT",
        "faculty": "Engineering",
        "year": "2024",
        "technologies": "Arduino, LoRa",
        "githubUrl": "https://github.com/hub/smart-bins",
        "teamMembers": '[{"name": "Ada", "email": "ada@hub.edu"}]',
    })
    assert payload.title == "Smart Bins"
    assert payload.year == 2024
    assert payload.technologies == ["Arduino", "LoRa"]
    assert payload.github_url == "https://github.com/hub/smart-bins"
    assert payload.team_members[0].name == "Ada"


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "X"},
        {"description": "short"},
        {"category": "Gardening"},
        {"faculty": "   "},
        {"year": 2019},
        {"githubUrl": "https://gitlab.com/a/b"},
        {"liveDemoUrl": "demo.example.com"},
    ],
)
def test_project_create_rejects(overrides):
    data = {
        "title": "Smart Bins",
        "description": "Fill-level sensors for campus bins.",
        "category": "IoT",
        "faculty": "Engineering",
        "year": 2024,
    }
    data.update(overrides)
    with pytest.raises(ValidationError):
        ProjectCreate.model_validate(data)


def test_project_update_leaves_absent_fields_unset():
    update = ProjectUpdate.model_validate({"description": "A much better description."})
    assert update.model_dump(exclude_none=True) == {"description": "A much better description."}


def test_approval_comment_limit():
    with pytest.raises(ValidationError):
        ApprovalPayload(status="approved", comment="c" * 501)
    assert ApprovalPayload(status="approved", comment="   ").comment is None
