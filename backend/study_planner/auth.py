"""Authentication gate as a FastAPI security dependency.

`get_current_user` reads the `Authorization` header, strips a literal
`Bearer ` prefix if present, verifies the token and loads the subject
from the database. Every failure is raised as an HTTPException(401) so
it can be used directly inside route dependencies. Resolved users are
not cached between requests.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from . import models, repositories
from .database import get_session
from .errors import AccessDenied, AuthError, UserNotFound
from .security import decode_access_token

BEARER_PREFIX = "Bearer "


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the raw token from an Authorization header value."""
    if not authorization:
        return None
    token = authorization
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    return token.strip() or None


def resolve_user(token: Optional[str], session: Session) -> models.User:
    """Resolve `token` to a stored user or raise an `AuthError`."""
    if not token:
        raise AccessDenied()
    user_id = decode_access_token(token)
    user = repositories.UserRepository(session).get(user_id)
    if not user:
        raise UserNotFound()
    return user


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_session),
) -> models.User:
    """FastAPI dependency that returns the authenticated user.

    The returned instance is bound to the request's session so handlers
    can modify and save it directly.
    """
    try:
        return resolve_user(extract_token(authorization), db)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e), headers={"WWW-Authenticate": "Bearer"})
