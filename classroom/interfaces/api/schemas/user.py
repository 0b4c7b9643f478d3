"""User schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegister(BaseModel):
    """Public self-registration payload."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=100)
    role: Literal["student", "teacher"] = "student"
    email: EmailStr | None = None


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str
    role: str
    is_active: bool
    created_at: datetime | None


__all__ = ["UserRead", "UserRegister"]
