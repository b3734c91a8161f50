"""Repository encapsulating user document persistence.

The user row is treated as a document: `save` writes back the whole
in-memory state, including the embedded study plan list. Concurrent
saves of the same user are not serialized; the last commit wins.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, select

from . import models
from .errors import DuplicateKeyError


class UserRepository:
    """CRUD operations for `User` documents."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance.

        Raises `DuplicateKeyError` when the email is already registered.
        """
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateKeyError()
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def get(self, user_id: str) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def save(self, user: models.User) -> models.User:
        """Write the full current state of a previously loaded user."""
        # in-place edits to the JSON column are not tracked by SQLAlchemy
        flag_modified(user, "study_plans")
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateKeyError()
        self.session.refresh(user)
        return user
