import bcrypt
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from config import JWT_CONFIG, PASSWORD_CONFIG, parse_duration
from app.models.auth.auth import TokenClaims
from app.utils.exceptions import TokenExpired, TokenInvalid


# --------------------------------------------------------------------
# Password hashing
# --------------------------------------------------------------------
def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=PASSWORD_CONFIG["BCRYPT_ROUNDS"])
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed or empty hash
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


def burn_password_check(plain_password: str) -> None:
    """Run a throwaway bcrypt check so unknown-user logins cost the same as real ones."""
    verify_password(plain_password, _dummy_hash())


# --------------------------------------------------------------------
# JWT token creation
# --------------------------------------------------------------------
def create_access_token(user_id: str, role: str, expires_delta: timedelta | None = None) -> str:
    """Create a signed session token embedding the user id and role."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else parse_duration(JWT_CONFIG["JWT_EXPIRE"]))
    to_encode = {"sub": str(user_id), "role": role, "iat": now, "exp": expire}
    return jwt.encode(to_encode, JWT_CONFIG["JWT_SECRET_KEY"], algorithm=JWT_CONFIG["JWT_ALGORITHM"])


# --------------------------------------------------------------------
# Token verification
# --------------------------------------------------------------------
def verify_access_token(token: str) -> TokenClaims:
    """Verify and decode an access token."""
    try:
        payload = jwt.decode(token, JWT_CONFIG["JWT_SECRET_KEY"], algorithms=[JWT_CONFIG["JWT_ALGORITHM"]])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise TokenInvalid()

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise TokenInvalid()
    return TokenClaims(user_id=user_id, role=role)
