import pytest

from app.database.backends.memory_backend import MemoryRepository, apply_update, matches
from app.models.project.project import ProjectDocument
from app.models.user.user import UserDocument
from app.utils.exceptions import Conflict, ValidationFailed


@pytest.fixture
def users():
    return MemoryRepository("users", UserDocument)


@pytest.fixture
def projects():
    return MemoryRepository("projects", ProjectDocument)


def _user(email="ada@hub.edu", **extra):
    return {"name": "Ada", "email": email, "password": "hash", "faculty": "Science", **extra}


def _project(title="Campus Navigator", **extra):
    return {
        "title": title,
        "description": "Indoor navigation for the main campus.",
        "category": "Mobile App",
        "faculty": "Engineering",
        "year": 2024,
        "submitted_by": "1",
        **extra,
    }


async def test_create_assigns_sequential_string_ids_and_timestamps(users):
    first = await users.create(_user("a@hub.edu"))
    second = await users.create(_user("b@hub.edu"))
    assert (first["_id"], second["_id"]) == ("1", "2")
    assert first["created_at"] is not None
    assert first["updated_at"] is not None


async def test_unique_email_is_case_insensitive(users):
    await users.create(_user("ada@hub.edu"))
    with pytest.raises(Conflict) as exc:
        await users.create(_user("ADA@hub.edu"))
    assert exc.value.message == "Email already exists"
    assert len(users) == 1


async def test_invalid_document_is_not_stored(users):
    with pytest.raises(ValidationFailed):
        await users.create(_user(email="not-an-email"))
    assert len(users) == 0


async def test_returned_documents_are_copies(projects):
    created = await projects.create(_project(technologies=["Go"]))
    created["technologies"].append("Rust")
    stored = await projects.find_by_id(created["_id"])
    assert stored["technologies"] == ["Go"]


async def test_update_operators(projects):
    project = await projects.create(_project(likes=[], views=0))
    pid = project["_id"]

    await projects.update_by_id(pid, {"$inc": {"views": 1}})
    await projects.update_by_id(pid, {"$push": {"likes": {"user": "7"}}})
    updated = await projects.update_by_id(pid, {"$set": {"status": "approved"}})
    assert updated["views"] == 1
    assert updated["likes"] == [{"user": "7"}]
    assert updated["status"] == "approved"

    updated = await projects.update_by_id(pid, {"$pull": {"likes": {"user": "7"}}})
    assert updated["likes"] == []


async def test_create_fills_document_defaults(projects):
    project = await projects.create(_project())
    assert project["status"] == "pending"
    assert project["views"] == 0
    assert project["likes"] == []
    assert "approved_by" not in project


async def test_invalid_update_leaves_document_untouched(projects):
    project = await projects.create(_project())
    with pytest.raises(ValidationFailed) as exc:
        await projects.update_by_id(project["_id"], {"$set": {"year": 2019}})
    assert exc.value.errors[0]["field"] == "year"
    assert (await projects.find_by_id(project["_id"]))["year"] == 2024


async def test_update_of_missing_document(projects):
    assert await projects.update_by_id("99", {"$inc": {"views": 1}}) is None


async def test_delete_keeps_index_consistent(projects):
    first = await projects.create(_project("First project"))
    second = await projects.create(_project("Second project"))
    assert await projects.delete_by_id(first["_id"])
    assert not await projects.delete_by_id(first["_id"])
    assert (await projects.find_by_id(second["_id"]))["title"] == "Second project"
    assert [p["title"] for p in await projects.find_many()] == ["Second project"]


async def test_find_many_preserves_insertion_order(projects):
    for title in ("Alpha project", "Beta project", "Gamma project"):
        await projects.create(_project(title))
    assert [p["title"] for p in await projects.find_many()] == ["Alpha project", "Beta project", "Gamma project"]


def test_matches_operators():
    doc = {"title": "Smart Farm", "status": "pending", "technologies": ["Arduino", "LoRa"]}
    assert matches(doc, {"status": {"$in": ["pending", "revision"]}})
    assert matches(doc, {"technologies": "LoRa"})
    assert matches(doc, {"title": {"$regex": "farm", "$options": "i"}})
    assert not matches(doc, {"title": {"$regex": "farm"}})
    assert matches(doc, {"$or": [{"title": "Nope"}, {"technologies": {"$regex": "^ard", "$options": "i"}}]})
    assert not matches(doc, {"status": "approved"})


def test_apply_update_rejects_unknown_operator():
    with pytest.raises(ValueError):
        apply_update({}, {"$rename": {"a": "b"}})
