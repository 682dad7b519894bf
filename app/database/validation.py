"""
Document checks enforced at the repository boundary.

Each repository is bound to a pydantic document model. Both storage backends
validate through it before touching their store, so the services above them
see the same failures whichever backend is active.
"""
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ValidationError

from app.utils.exceptions import Conflict, ValidationFailed

# Linear-time: no nested quantifiers, so a failing match cannot backtrack
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$"
GITHUB_URL_PATTERN = r"^https?://(www\.)?github\.com/.+"
URL_PATTERN = r"^https?://.+"

ROLES = ("student", "supervisor", "admin")
PROJECT_CATEGORIES = ("Web Development", "Mobile App", "AI/ML", "IoT", "Robotics", "Data Science", "Other")
PROJECT_STATUSES = ("pending", "approved", "rejected", "revision")

# Location prefixes FastAPI puts in front of the offending field name
_LOCATION_ROOTS = ("body", "query", "path", "header", "cookie")


def field_errors(raw_errors) -> List[Dict[str, str]]:
    """Flatten pydantic error entries into ``{"field", "message"}`` pairs."""
    errors = []
    for err in raw_errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _LOCATION_ROOTS:
            loc = loc[1:]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(str(part) for part in loc) or "body", "message": message})
    return errors


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def validate_document(model: Type[BaseModel], doc: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a whole document and return it normalized, with defaults filled in."""
    try:
        instance = model.model_validate(doc)
    except ValidationError as e:
        raise ValidationFailed("Validation failed", errors=field_errors(e.errors())) from e
    return instance.model_dump(exclude_none=True)


def validate_fields(model: Type[BaseModel], fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate only the given fields against ``model``.

    Each value goes through the same field schema (constraints, validators,
    nested models) a full validation would use. Keys the model does not
    declare pass through untouched.
    """
    instance = model.model_construct()
    validated: Dict[str, Any] = {}
    errors: List[Dict[str, str]] = []
    for name, value in fields.items():
        if name not in model.model_fields:
            validated[name] = value
            continue
        try:
            model.__pydantic_validator__.validate_assignment(instance, name, value)
        except ValidationError as e:
            errors.extend(field_errors(e.errors()))
            continue
        validated[name] = _plain(getattr(instance, name))
    if errors:
        raise ValidationFailed("Validation failed", errors=errors)
    return validated


def validate_update(model: Type[BaseModel], update: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the ``$set`` and ``$push`` parts of an update document."""
    validated = dict(update)
    errors: List[Dict[str, str]] = []

    if "$set" in update:
        try:
            validated["$set"] = validate_fields(model, update["$set"])
        except ValidationFailed as e:
            errors.extend(e.errors or [])

    if "$push" in update:
        pushed = {}
        for name, item in update["$push"].items():
            # A pushed item is checked as a one element list of the field's item type
            try:
                pushed[name] = validate_fields(model, {name: [item]})[name][0]
            except ValidationFailed as e:
                errors.extend(e.errors or [])
        validated["$push"] = pushed

    if errors:
        raise ValidationFailed("Validation failed", errors=errors)
    return validated


def unique_fields(model: Type[BaseModel]) -> List[str]:
    """Fields declared with ``json_schema_extra={"unique": True}``."""
    names = []
    for name, info in model.model_fields.items():
        extra = info.json_schema_extra
        if isinstance(extra, dict) and extra.get("unique"):
            names.append(name)
    return names


def duplicate_error(field_name: str) -> Conflict:
    label = field_name.replace("_", " ").capitalize()
    return Conflict(f"{label} already exists", errors=[{"field": field_name, "message": f"{label} already exists"}])
