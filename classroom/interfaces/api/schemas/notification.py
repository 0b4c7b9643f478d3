"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from classroom.domain.entities import TITLE_MAX_LENGTH

Priority = Literal["normal", "high", "urgent"]


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: str
    sender_id: int | None = None
    recipient_id: int
    related_type: str | None = None
    related_id: int | None = None
    priority: str = "normal"
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime


class NotificationCreate(BaseModel):
    """Manual creation request; omitted text is rendered from ``data``."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., min_length=1, max_length=50)
    recipient_id: int = Field(..., alias="recipientId", ge=1)
    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    message: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    sender_id: int | None = Field(default=None, alias="senderId")
    related_type: str | None = Field(default=None, alias="relatedType", max_length=50)
    related_id: int | None = Field(default=None, alias="relatedId")
    priority: Priority | None = None
    audience: str | None = Field(default=None, max_length=20)


class NotificationMarkAllReadRequest(BaseModel):
    """Body of ``PUT /notifications/mark-all-read``."""

    model_config = ConfigDict(populate_by_name=True)

    recipient_id: int | None = Field(default=None, alias="recipientId")


class AnnouncementCreate(BaseModel):
    """System announcement fanned out to a list of recipients."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    message: str = Field(..., min_length=1)
    recipient_ids: list[int] = Field(..., alias="recipientIds", min_length=1)


__all__ = [
    "AnnouncementCreate",
    "NotificationCreate",
    "NotificationMarkAllReadRequest",
    "NotificationRead",
    "Priority",
]
