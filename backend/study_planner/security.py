"""Password hashing and session token helpers.

Passwords are hashed with bcrypt (auto-salted, fixed work factor) and
session tokens are HS256 JWTs carrying the user id and an expiry. The
signing secret is read once from `settings` when the module is imported.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from .config import settings
from .errors import InvalidToken

JWT_SECRET = settings.JWT_SECRET
JWT_ALGORITHM = settings.JWT_ALGORITHM
JWT_EXPIRE_DAYS = settings.JWT_EXPIRE_DAYS


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash.

    Returns False for a mismatch or an unparseable stored hash.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Return a signed token for `user_id` that expires after `expires_delta`.

    Defaults to `JWT_EXPIRE_DAYS` days.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(days=JWT_EXPIRE_DAYS))
    payload = {"user_id": user_id, "iat": int(now.timestamp()), "exp": int(expire.timestamp())}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Verify `token` and return the user id it was issued for.

    Raises `InvalidToken` on a bad signature, malformed or expired token,
    or a payload without `user_id`.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM], options={"require": ["exp"]})
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except jwt.PyJWTError:
        raise InvalidToken()
    user_id = payload.get("user_id")
    if not user_id or not isinstance(user_id, str):
        raise InvalidToken()
    return user_id
