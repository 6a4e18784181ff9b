"""Pydantic models for API request bodies."""

from datetime import datetime

from pydantic import BaseModel, Field

from baby_tracker.domain.logs import LogType


class SignUpRequest(BaseModel):
    """Sign-up form payload."""

    email: str
    password: str = Field(min_length=6)
    father_name: str = ""
    mother_name: str = ""
    baby_name: str = ""
    timezone: str | None = None
    profile_pic_url: str | None = None


class LoginRequest(BaseModel):
    """Sign-in form payload."""

    email: str
    password: str


class LogRequest(BaseModel):
    """Entry modal payload for a feeding or diaper change."""

    type: LogType
    amount: float | None = Field(default=None, allow_inf_nan=False)
    timestamp: datetime
    recorded_by: str = ""


class ProfileUpdateRequest(BaseModel):
    """Settings form payload. Omitted fields are left unchanged."""

    father_name: str | None = None
    mother_name: str | None = None
    baby_name: str | None = None
    timezone: str | None = None
    profile_pic_url: str | None = None
