import os
import re
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"

SERVER_CONFIG = {
    "APP_NAME": "Innovation Hub API",
    "VERSION": "1.0.0",
    "PORT": int(os.getenv("PORT", "5000")),
    "CORS_ORIGINS": [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
        if origin.strip()
    ],
}

database_config = {
    "MONGO_URI": os.getenv("MONGO_URI") or None,
    "DB_NAME": os.getenv("DB_NAME", "innovation_hub"),
    "SERVER_SELECTION_TIMEOUT_MS": int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000")),
    "USER_COLLECTION": "users",
    "PROJECT_COLLECTION": "projects",
}

JWT_CONFIG = {
    "JWT_SECRET_KEY": os.getenv("JWT_SECRET") or None,
    "JWT_ALGORITHM": os.getenv("JWT_ALGORITHM", "HS256"),
    "JWT_EXPIRE": os.getenv("JWT_EXPIRE", "7d"),
}

PASSWORD_CONFIG = {
    "BCRYPT_ROUNDS": int(os.getenv("BCRYPT_ROUNDS", "10")),
}

UPLOAD_CONFIG = {
    "UPLOAD_DIR": os.path.abspath(os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))),
    "UPLOAD_URL_PREFIX": "/uploads",
    "MAX_FILE_SIZE": int(os.getenv("MAX_FILE_SIZE", "5242880")),
    "ALLOWED_CONTENT_TYPES": ["application/pdf"],
}

SEED_CONFIG = {
    "SEED_DEMO_DATA": os.getenv("SEED_DEMO_DATA", "false").lower() == "true",
    "SEED_DEMO_PASSWORD": os.getenv("SEED_DEMO_PASSWORD") or None,
}

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """Parse durations such as ``7d``, ``12h``, ``30m`` or ``3600`` (seconds)."""
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def validate_config() -> None:
    """Fail fast on settings the service cannot run without."""
    if not JWT_CONFIG["JWT_SECRET_KEY"]:
        raise RuntimeError("JWT_SECRET is not set")
    parse_duration(JWT_CONFIG["JWT_EXPIRE"])
