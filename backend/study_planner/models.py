"""SQLModel data models.

A user is stored as a single document-like row: profile fields plus the
ordered list of study plans embedded as a JSON column. Study plans have
no identity of their own and are only ever written together with their
owning user.
"""

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return uuid.uuid4().hex


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `email`: unique login key
    - `password`: bcrypt hash (never store plaintext)
    - `study_plans`: ordered list of `{subject, hours, milestone, completed}` dicts
    """
    __tablename__ = "users"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: Optional[str] = None
    email: str = Field(index=True, nullable=False, unique=True)
    password: str
    avatar: Optional[str] = None
    study_plans: List[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    target_date: Optional[date] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
