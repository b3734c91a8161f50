"""Pydantic request schemas used by the API.

Request bodies use the camelCase names the frontend sends
(`studyPlans`, `targetDate`). Required-field checks for register/login
are done by the services so that missing values produce the same 400
message as empty ones.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterIn(BaseModel):
    """Payload for user registration."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginIn(BaseModel):
    """Payload for login."""
    email: Optional[str] = None
    password: Optional[str] = None


class SettingsIn(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""
    name: Optional[str] = None
    avatar: Optional[str] = None


class TargetDateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_date: Optional[date] = Field(alias="targetDate")


class StudyPlanIn(BaseModel):
    """A single study plan entry as embedded in the user document."""
    subject: str
    hours: float = Field(ge=0)
    milestone: str = ""
    completed: bool = False
