from typing import Any, Dict

from app.database.backends.base import utc_now
from app.database.store import get_store
from app.models.auth.auth import AuthResponse, LoginPayload, PasswordUpdate, RegisterPayload, TokenResponse
from app.models.user.user import UserDetailsUpdate, UserOut, UserResponse
from app.services.auth.auth_utils import (
    burn_password_check,
    create_access_token,
    hash_password,
    verify_password,
)
from app.services.auth.policies import STUDENT
from app.utils.exceptions import BadRequest, Conflict, NotFound, Unauthorized
from app.utils.logger_utils import logger


def _users():
    return get_store().users


def _issue_token(user: Dict[str, Any]) -> str:
    return create_access_token(user["_id"], user["role"])


async def register_user(payload: RegisterPayload) -> AuthResponse:
    email = payload.email.lower()
    existing = await _users().find_one({"email": email})
    if existing:
        logger.warning(f"Registration rejected, email already in use: {email}")
        raise Conflict("User already exists with this email")

    doc = {
        "name": payload.name,
        "email": email,
        "password": hash_password(payload.password),
        "role": payload.role or STUDENT,
        "faculty": payload.faculty,
        "department": payload.department,
        "is_active": True,
        "last_login": None,
    }
    user = await _users().create(doc)
    logger.info(f"User registered: {user['_id']} ({user['email']}, {user['role']})")
    return AuthResponse(message="User registered successfully", token=_issue_token(user), user=UserOut(**user))


async def login_user(payload: LoginPayload) -> AuthResponse:
    if not payload.email or not payload.password:
        raise BadRequest("Please provide an email and password")

    user = await _users().find_one({"email": payload.email.strip().lower()})
    if not user:
        burn_password_check(payload.password)
        logger.warning(f"Login failed for unknown email: {payload.email}")
        raise Unauthorized("Invalid credentials")

    if not verify_password(payload.password, user.get("password", "")):
        logger.warning(f"Login failed, wrong password for user {user['_id']}")
        raise Unauthorized("Invalid credentials")

    if not user.get("is_active", True):
        logger.warning(f"Login refused for deactivated user {user['_id']}")
        raise Unauthorized("Account is deactivated. Please contact administrator.")

    user = await _users().update_by_id(user["_id"], {"$set": {"last_login": utc_now()}})
    logger.info(f"User logged in: {user['_id']}")
    return AuthResponse(message="Login successful", token=_issue_token(user), user=UserOut(**user))


async def get_me(user: Dict[str, Any]) -> UserResponse:
    return UserResponse(user=UserOut(**user))


async def update_details(user: Dict[str, Any], payload: UserDetailsUpdate) -> UserResponse:
    """Update name, faculty and department; fields left out are untouched."""
    fields = payload.model_dump(exclude_none=True)
    if not fields:
        return UserResponse(message="User details updated successfully", user=UserOut(**user))

    updated = await _users().update_by_id(user["_id"], {"$set": fields})
    if not updated:
        raise NotFound("User not found")
    logger.info(f"User {user['_id']} updated details: {sorted(fields)}")
    return UserResponse(message="User details updated successfully", user=UserOut(**updated))


async def update_password(user: Dict[str, Any], payload: PasswordUpdate) -> TokenResponse:
    if not verify_password(payload.current_password, user.get("password", "")):
        logger.warning(f"Password change rejected for user {user['_id']}: current password mismatch")
        raise Unauthorized("Current password is incorrect")

    updated = await _users().update_by_id(user["_id"], {"$set": {"password": hash_password(payload.new_password)}})
    if not updated:
        raise NotFound("User not found")
    logger.info(f"Password updated for user {user['_id']}")
    return TokenResponse(message="Password updated successfully", token=_issue_token(updated))
