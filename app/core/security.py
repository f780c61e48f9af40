"""Security utilities: password hashing, bearer tokens and download access."""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.core.config import get_settings
from app.models.user import ROLE_ADMIN

settings = get_settings()

# Test fixtures store sha256 hex digests behind this prefix to skip bcrypt
PLAIN_HASH_PREFIX = "$plain$"
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its stored hash."""
    if hashed_password.startswith(PLAIN_HASH_PREFIX):
        digest = hashlib.sha256(plain_password.encode()).hexdigest()
        return hashed_password[len(PLAIN_HASH_PREFIX):] == digest

    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=12)).decode("utf-8")


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a bearer token for the given claims."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    claims = {
        **data,
        "exp": datetime.now(timezone.utc) + lifetime,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Validate a bearer token and return its claims, or None."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError:
        return None


def can_download(user: Any | None, app_id: Any) -> bool:
    """Decide whether ``user`` may download the paid app ``app_id``.

    Admins always may; other users only when the app is among their
    purchased games. Anonymous callers never may.
    """
    if user is None:
        return False
    return user.role == ROLE_ADMIN or str(app_id) in user.purchased_games
