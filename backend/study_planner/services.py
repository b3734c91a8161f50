"""Business logic services used by HTTP controllers.

Services are intentionally thin: they validate presence of required
input, delegate to the repository and the security helpers, and raise
`errors.StudyPlannerError` subclasses that controllers map to HTTP
responses. The serializer helpers at the bottom define every user shape
returned by the API; none of them include the password hash.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import models, repositories
from .errors import InvalidCredentials, NotFoundError, ValidationError
from .schemas import StudyPlanIn
from .security import create_access_token, hash_password, verify_password

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class AuthService:
    """Authentication related operations (register + authenticate)."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]):
        """Create a new user with a hashed password.

        Returns `(user, token)`. Raises `ValidationError` when a field is
        missing and `DuplicateKeyError` when the email is taken.
        """
        if not name or not email or not password:
            raise ValidationError("All fields are required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        user = models.User(name=name, email=email, password=hash_password(password))
        user = self.user_repo.create(user)
        return user, create_access_token(user.id)

    def authenticate(self, email: Optional[str], password: Optional[str]):
        """Verify credentials and return `(user, token)`.

        Unknown email and wrong password both raise `InvalidCredentials`.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")
        user = self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password):
            raise InvalidCredentials()
        return user, create_access_token(user.id)


class UserService:
    """Profile reads and updates for the authenticated user."""
    def __init__(self, session: Session, allow_cross_user_lookup: bool = False):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.allow_cross_user_lookup = allow_cross_user_lookup

    def get_document(self, requester: models.User, user_id: str) -> models.User:
        """Return the user document for `user_id`.

        Unless cross-user lookup is enabled, only the requester's own
        document can be fetched; any other id is reported as not found.
        """
        if user_id != requester.id and not self.allow_cross_user_lookup:
            raise NotFoundError("User not found")
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_settings(self, user: models.User, name: Optional[str] = None, avatar: Optional[str] = None) -> models.User:
        if name is not None:
            user.name = name
        if avatar is not None:
            user.avatar = avatar
        return self.user_repo.save(user)

    def update_target_date(self, user: models.User, target_date: Optional[date]) -> models.User:
        user.target_date = target_date
        return self.user_repo.save(user)


class PlanService:
    """Append to or replace the study plan list embedded in a user."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def add_plan(self, user: models.User, plan: StudyPlanIn) -> List[dict]:
        """Append one plan and return the full updated list."""
        user.study_plans = list(user.study_plans or []) + [plan.model_dump()]
        self._save(user)
        return user.study_plans

    def replace_plans(self, user: models.User, plans: List[StudyPlanIn]) -> List[dict]:
        """Replace the whole list; submitting the same list twice is a no-op."""
        user.study_plans = [p.model_dump() for p in plans]
        self._save(user)
        return user.study_plans

    def _save(self, user: models.User) -> None:
        try:
            self.user_repo.save(user)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise ValidationError(f"Could not save study plans: {e.__class__.__name__}")


def user_summary(user: models.User) -> dict:
    """Identity fields returned by login and settings updates."""
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'avatar': user.avatar,
    }


def user_profile(user: models.User) -> dict:
    """Summary plus the study plans and target date."""
    out = user_summary(user)
    out['studyPlans'] = list(user.study_plans or [])
    out['targetDate'] = user.target_date.isoformat() if user.target_date else None
    return out


def user_document(user: models.User) -> dict:
    """Every stored field except the password hash."""
    out = user_profile(user)
    out['createdAt'] = user.created_at.isoformat() if user.created_at else None
    return out
