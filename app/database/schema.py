from typing import Any, Dict

from app.database.conn import mongo_client
from app.database.validation import PROJECT_CATEGORIES, PROJECT_STATUSES, ROLES
from app.utils.logger_utils import logger
from config import database_config


def _user_validator() -> Dict[str, Any]:
    return {
        "$jsonSchema": {
            "bsonType": "object",
            "required": ["name", "email", "password", "role", "faculty", "created_at", "updated_at"],
            "properties": {
                "name": {"bsonType": "string", "maxLength": 50},
                "email": {"bsonType": "string"},
                "password": {"bsonType": "string"},
                "role": {"enum": list(ROLES)},
                "faculty": {"bsonType": "string"},
                "department": {"bsonType": ["string", "null"]},
                "is_active": {"bsonType": "bool"},
                "last_login": {"bsonType": ["date", "null"]},
                "profile_picture": {"bsonType": ["string", "null"]},
                "created_at": {"bsonType": "date"},
                "updated_at": {"bsonType": "date"},
            },
        }
    }


def _project_validator() -> Dict[str, Any]:
    return {
        "$jsonSchema": {
            "bsonType": "object",
            "required": [
                "title",
                "description",
                "category",
                "faculty",
                "year",
                "status",
                "submitted_by",
                "created_at",
                "updated_at",
            ],
            "properties": {
                "title": {"bsonType": "string", "maxLength": 100},
                "description": {"bsonType": "string", "maxLength": 2000},
                "category": {"enum": list(PROJECT_CATEGORIES)},
                "technologies": {"bsonType": "array", "items": {"bsonType": "string"}},
                "faculty": {"bsonType": "string"},
                "department": {"bsonType": ["string", "null"]},
                "year": {"bsonType": ["int", "long"], "minimum": 2020},
                "status": {"enum": list(PROJECT_STATUSES)},
                "github_url": {"bsonType": ["string", "null"]},
                "live_demo_url": {"bsonType": ["string", "null"]},
                "documentation_url": {"bsonType": ["string", "null"]},
                "images": {"bsonType": "array"},
                "team_members": {
                    "bsonType": "array",
                    "items": {
                        "bsonType": "object",
                        "required": ["name"],
                        "properties": {
                            "name": {"bsonType": "string"},
                            "email": {"bsonType": ["string", "null"]},
                            "role": {"bsonType": ["string", "null"]},
                        },
                    },
                },
                "submitted_by": {"bsonType": "string"},
                "approved_by": {"bsonType": ["string", "null"]},
                "approved_at": {"bsonType": ["date", "null"]},
                "supervisor_comments": {
                    "bsonType": "array",
                    "items": {
                        "bsonType": "object",
                        "required": ["user", "comment"],
                        "properties": {
                            "user": {"bsonType": "string"},
                            "comment": {"bsonType": "string", "maxLength": 500},
                            "created_at": {"bsonType": "date"},
                        },
                    },
                },
                "views": {"bsonType": ["int", "long"], "minimum": 0},
                "likes": {
                    "bsonType": "array",
                    "items": {
                        "bsonType": "object",
                        "properties": {
                            "user": {"bsonType": "string"},
                            "created_at": {"bsonType": "date"},
                        },
                    },
                },
                "created_at": {"bsonType": "date"},
                "updated_at": {"bsonType": "date"},
            },
        }
    }


async def ensure_collections_and_indexes() -> None:
    """Create collections with validators and ensure indexes exist.

    This is idempotent and safe to call on every startup.
    """
    db = mongo_client.database

    collections: Dict[str, Dict[str, Any]] = {
        database_config["USER_COLLECTION"]: _user_validator(),
        database_config["PROJECT_COLLECTION"]: _project_validator(),
    }

    existing = await db.list_collection_names()

    for name, validator in collections.items():
        try:
            if name not in existing:
                await db.create_collection(name, validator=validator)
                logger.info(f"Created collection {name} with validator")
            else:
                try:
                    await db.command({
                        "collMod": name,
                        "validator": validator,
                        "validationLevel": "moderate",
                    })
                    logger.info(f"Updated validator for collection {name}")
                except Exception as e:
                    logger.warning(f"Could not update validator for {name}: {e}")
        except Exception as e:
            logger.error(f"Error ensuring collection {name}: {e}")

    # Users unique email
    try:
        await db[database_config["USER_COLLECTION"]].create_index("email", unique=True, name="uniq_user_email")
    except Exception as e:
        logger.warning(f"Create index users.email failed or exists: {e}")

    try:
        await db[database_config["PROJECT_COLLECTION"]].create_index(
            "submitted_by", unique=False, name="idx_project_submitted_by"
        )
    except Exception as e:
        logger.warning(f"Create index projects.submitted_by failed or exists: {e}")

    try:
        await db[database_config["PROJECT_COLLECTION"]].create_index(
            [("status", 1), ("category", 1), ("faculty", 1)], unique=False, name="idx_project_status_category_faculty"
        )
    except Exception as e:
        logger.warning(f"Create index projects (status,category,faculty) failed or exists: {e}")
